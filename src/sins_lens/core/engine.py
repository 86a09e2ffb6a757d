"""Engine facade: owns the schema set and the indices and answers editor requests."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from sins_lens.config import EnvironmentLanguage
from sins_lens.core.completion import CompletionProvider
from sins_lens.core.context import resolve_context
from sins_lens.core.definition import DefinitionProvider
from sins_lens.core.document import TextDocument
from sins_lens.core.entities import entity_type_from_uri
from sins_lens.core.errors import EngineNotReadyError, InvalidStateTransitionError
from sins_lens.core.hover import HoverProvider
from sins_lens.core.json_ast import JsonDocument, JsonNode, is_value_node
from sins_lens.core.json_service import JsonLanguageService
from sins_lens.core.pointers import PointerType
from sins_lens.core.ports.settings import LanguageSource
from sins_lens.core.schemas import SCHEMAS_DIR, AnnotatedSchema, configure
from sins_lens.core.validate import Validator
from sins_lens.index import IndexSet, rebuild_indices
from sins_lens.models import CompletionList, Diagnostic, Hover, Location

logger = logging.getLogger(__name__)

DiagnosticsCallback = Callable[[str, list[Diagnostic]], Awaitable[None]]


class EngineState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INDEXING = "indexing"
    READY = "ready"


_TRANSITIONS: dict[EngineState, frozenset[EngineState]] = {
    EngineState.UNINITIALIZED: frozenset({EngineState.INDEXING}),
    EngineState.INDEXING: frozenset({EngineState.READY, EngineState.UNINITIALIZED}),
    EngineState.READY: frozenset({EngineState.INDEXING}),
}


@dataclass
class EngineContext:
    schemas: list[AnnotatedSchema]
    service: JsonLanguageService
    language_source: LanguageSource
    indices: IndexSet = field(default_factory=IndexSet)
    root: Path | None = None


class Engine:
    def __init__(
        self,
        language_source: LanguageSource | None = None,
        schemas_dir: Path = SCHEMAS_DIR,
        on_diagnostics: DiagnosticsCallback | None = None,
    ) -> None:
        schemas = configure(schemas_dir=schemas_dir)
        self.context = EngineContext(
            schemas=schemas,
            service=JsonLanguageService(schemas),
            language_source=language_source or EnvironmentLanguage(),
        )
        self.schemas_dir = schemas_dir
        self.on_diagnostics = on_diagnostics
        self.state = EngineState.UNINITIALIZED
        # Set whenever no rebuild is running.
        self._settled = asyncio.Event()
        self._settled.set()
        self._documents: dict[str, TextDocument] = {}
        self._deferred: set[str] = set()

    def _transition(self, target: EngineState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidStateTransitionError(f"Cannot move from {self.state.value} to {target.value}")
        logger.debug("Engine %s -> %s", self.state.value, target.value)
        self.state = target
        if target is EngineState.INDEXING:
            self._settled.clear()
        else:
            self._settled.set()

    async def rebuild(self, root: str | Path, language: str | None = None) -> IndexSet:
        """Re-annotate the schemas and rebuild every index from ``root``.

        Open documents are validated once the indices are in place.
        """
        self._transition(EngineState.INDEXING)
        workspace = Path(root)
        try:
            language = language or await self.context.language_source.current_language()
            schemas = configure(schemas_dir=self.schemas_dir)
            indices = await rebuild_indices(workspace, language)
        except BaseException:
            self._transition(EngineState.UNINITIALIZED)
            raise
        self.context.schemas = schemas
        self.context.service.configure(schemas)
        self.context.indices = indices
        self.context.root = workspace
        self._transition(EngineState.READY)

        self._deferred.clear()
        for uri in list(self._documents):
            await self._publish(uri)
        return indices

    async def wait_ready(self) -> None:
        """Wait out a running rebuild; raise when no indices are available afterwards."""
        while self.state is EngineState.INDEXING:
            await self._settled.wait()
        if self.state is not EngineState.READY:
            raise EngineNotReadyError("Indices have not been built; run a rebuild and retry.")

    # Document lifecycle

    def get_document(self, uri: str) -> TextDocument | None:
        return self._documents.get(uri)

    @property
    def deferred_documents(self) -> list[str]:
        """Open documents whose validation waits for the next finished rebuild."""
        return sorted(self._deferred)

    async def open_document(self, uri: str, text: str, version: int = 0) -> TextDocument:
        document = TextDocument(uri=uri, text=text, version=version)
        self._documents[uri] = document
        logger.info("Document opened: %s", uri)
        await self._validate_or_defer(uri)
        return document

    async def change_document(self, uri: str, text: str, version: int | None = None) -> TextDocument:
        previous = self._documents.get(uri)
        if version is None:
            version = previous.version + 1 if previous else 0
        document = TextDocument(uri=uri, text=text, version=version)
        self._documents[uri] = document
        await self._validate_or_defer(uri)
        return document

    async def close_document(self, uri: str) -> None:
        self._documents.pop(uri, None)
        self._deferred.discard(uri)
        if self.on_diagnostics is not None:
            await self.on_diagnostics(uri, [])

    async def _validate_or_defer(self, uri: str) -> None:
        if self.state is EngineState.READY:
            await self._publish(uri)
        else:
            self._deferred.add(uri)

    async def _publish(self, uri: str) -> list[Diagnostic]:
        document = self._documents.get(uri)
        if document is None:
            return []
        diagnostics = await self.do_validation(document)
        if self.on_diagnostics is not None:
            await self.on_diagnostics(uri, diagnostics)
        return diagnostics

    # Requests

    def _parse(self, document: TextDocument, offset: int) -> tuple[JsonDocument, JsonNode | None]:
        json_document = self.context.service.parse_document(document)
        return json_document, json_document.get_node_from_offset(offset)

    async def resolve_context(self, document: TextDocument, offset: int) -> PointerType:
        await self.wait_ready()
        json_document, node = self._parse(document, offset)
        return resolve_context(self.context.service, document, json_document, node)

    async def do_validation(self, document: TextDocument) -> list[Diagnostic]:
        await self.wait_ready()
        service = self.context.service
        json_document = service.parse_document(document)
        diagnostics = service.do_validation(document, json_document)
        try:
            validator = Validator(service, self.context.indices)
            diagnostics.extend(validator.validate(document, json_document, entity_type_from_uri(document.uri)))
        except Exception:
            logger.exception("Cross-reference validation failed for %s", document.uri)
        return diagnostics

    async def do_completion(self, document: TextDocument, offset: int) -> CompletionList | None:
        await self.wait_ready()
        service = self.context.service
        json_document, node = self._parse(document, offset)
        context = resolve_context(service, document, json_document, node)
        logger.debug("Completion context: %s", context.value)
        provider = CompletionProvider(self.context.indices)
        result = provider.complete(context, entity_type_from_uri(document.uri), document, node, offset)
        if result is None or not result.items:
            return service.do_complete(document, json_document, offset)
        return result

    async def go_to_definition(self, document: TextDocument, offset: int) -> list[Location]:
        await self.wait_ready()
        json_document, node = self._parse(document, offset)
        if node is None or node.type != "string" or not is_value_node(node):
            return []
        context = resolve_context(self.context.service, document, json_document, node)
        language = await self.context.language_source.current_language()
        provider = DefinitionProvider(self.context.indices)
        return await provider.go_to_definition(context, str(node.value), language)

    async def get_hover(self, document: TextDocument, offset: int) -> Hover | None:
        await self.wait_ready()
        service = self.context.service
        json_document, node = self._parse(document, offset)
        context = resolve_context(service, document, json_document, node)
        logger.debug("Hover context: %s", context.value)
        if node is not None and node.type == "string" and node.value and is_value_node(node):
            language = await self.context.language_source.current_language()
            try:
                hover = await HoverProvider(self.context.indices).hover(context, str(node.value), language)
            except Exception:
                logger.exception("Hover failed for %s", document.uri)
                hover = None
            if hover is not None:
                return hover
        return service.do_hover(document, json_document, offset)

    # Named requests

    async def player_ids(self) -> list[str]:
        await self.wait_ready()
        return sorted(self.context.indices.existence.get(PointerType.PLAYER))

    async def entity_path(self, identifier: str) -> Path | None:
        await self.wait_ready()
        paths = self.context.indices.paths.get_paths(identifier)
        if len(paths) > 1:
            logger.warning("Identifier %r matches %d files; using %s", identifier, len(paths), paths[0])
        return paths[0] if paths else None

    async def localization(self, language: str, key: str) -> str | None:
        await self.wait_ready()
        return self.context.indices.localization.get(language, key)
