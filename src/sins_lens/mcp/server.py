"""FastMCP server exposing sins-lens requests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from sins_lens.core.document import TextDocument
from sins_lens.core.engine import Engine
from sins_lens.core.errors import SinsLensError
from sins_lens.models import Position


def _load(engine: Engine, path: str, line: int, character: int) -> tuple[TextDocument, int]:
    """Prefer the open snapshot of ``path`` over its content on disk."""
    file_path = Path(path).resolve()
    document = engine.get_document(file_path.as_uri()) or TextDocument.from_path(file_path)
    return document, document.offset_at(Position(line=line, character=character))


def create_mcp_server(engine: Engine) -> FastMCP:
    """Create a FastMCP server wired to the given engine."""

    mcp = FastMCP("sins-lens", instructions="Resolve, validate and complete cross-references in SoaSE II mod files.")

    @mcp.tool()
    async def rebuild(root: str, language: str | None = None) -> dict[str, int] | str:
        """Index a mod workspace; must run before any other tool."""
        if not Path(root).is_dir():
            return f"Error: '{root}' is not a directory."
        try:
            indices = await engine.rebuild(root, language)
        except SinsLensError as exc:
            return f"Error: {exc}"
        return indices.summary()

    @mcp.tool()
    async def resolve_context(path: str, line: int, character: int) -> str:
        """Pointer type governing a zero-based position."""
        try:
            document, offset = _load(engine, path, line, character)
            pointer = await engine.resolve_context(document, offset)
        except (SinsLensError, OSError) as exc:
            return f"Error: {exc}"
        return pointer.value

    @mcp.tool()
    async def validate(path: str) -> list[dict[str, Any]] | str:
        """Diagnostics for a mod file."""
        try:
            document, _ = _load(engine, path, 0, 0)
            diagnostics = await engine.do_validation(document)
        except (SinsLensError, OSError) as exc:
            return f"Error: {exc}"
        return [d.model_dump(mode="json") for d in diagnostics]

    @mcp.tool()
    async def complete(path: str, line: int, character: int) -> list[dict[str, Any]] | str:
        """Completion candidates at a zero-based position."""
        try:
            document, offset = _load(engine, path, line, character)
            result = await engine.do_completion(document, offset)
        except (SinsLensError, OSError) as exc:
            return f"Error: {exc}"
        return [item.model_dump(mode="json", exclude_none=True) for item in result.items] if result else []

    @mcp.tool()
    async def definition(path: str, line: int, character: int) -> list[dict[str, Any]] | str:
        """Definition locations of the value at a zero-based position."""
        try:
            document, offset = _load(engine, path, line, character)
            locations = await engine.go_to_definition(document, offset)
        except (SinsLensError, OSError) as exc:
            return f"Error: {exc}"
        return [location.model_dump(mode="json") for location in locations]

    @mcp.tool()
    async def hover(path: str, line: int, character: int) -> str:
        """Hover markdown at a zero-based position; empty when there is none."""
        try:
            document, offset = _load(engine, path, line, character)
            result = await engine.get_hover(document, offset)
        except (SinsLensError, OSError) as exc:
            return f"Error: {exc}"
        return result.contents.value if result else ""

    @mcp.tool()
    async def player_ids() -> list[str] | str:
        """Identifiers of every ``.player`` file."""
        try:
            return await engine.player_ids()
        except SinsLensError as exc:
            return f"Error: {exc}"

    @mcp.tool()
    async def entity_path(identifier: str) -> str:
        """Path of the first file carrying ``identifier``."""
        try:
            path = await engine.entity_path(identifier)
        except SinsLensError as exc:
            return f"Error: {exc}"
        return str(path) if path else f"Error: no file for '{identifier}'."

    @mcp.tool()
    async def localization(language: str, key: str) -> str:
        """Localized text of ``key`` in ``language``."""
        try:
            text = await engine.localization(language, key)
        except SinsLensError as exc:
            return f"Error: {exc}"
        return text if text is not None else f"Error: no '{language}' text for '{key}'."

    return mcp
