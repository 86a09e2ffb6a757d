import logging

from sins_lens.core.document import TextDocument
from sins_lens.core.json_ast import JsonDocument, JsonNode, find_properties, is_within
from sins_lens.core.pointers import MANIFEST_CHECKED, PointerType
from sins_lens.core.ports.json_service import JsonService
from sins_lens.index import IndexSet
from sins_lens.models import Diagnostic, DiagnosticSeverity

logger = logging.getLogger(__name__)

SOURCE = "sins-lens"


class Report:
    @staticmethod
    def missing_in_files(value: str, category: PointerType) -> str:
        return f'[{category.value}]: "{value}" is missing.'

    @staticmethod
    def missing_in_manifest(value: str, category: PointerType) -> str:
        return f'[{category.value}]: "{value}" is missing in {category.value}.entity_manifest'

    EMPTY_DESCRIPTION = "Empty localization key. Consider providing a description."


class Validator:
    """Checks every pointer-bearing value of a document against the indices."""

    def __init__(self, service: JsonService, indices: IndexSet) -> None:
        self.service = service
        self.indices = indices

    def validate(
        self, document: TextDocument, json_document: JsonDocument, current_entity: PointerType
    ) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        seen: set[tuple[int, PointerType]] = set()
        root = json_document.root

        def report(node: JsonNode, message: str, severity: DiagnosticSeverity) -> None:
            diagnostics.append(
                Diagnostic(
                    range=document.range_of(node.offset, node.length),
                    severity=severity,
                    message=message,
                    source=SOURCE,
                )
            )

        def check(node: JsonNode, key: str, pointer: PointerType) -> None:
            value = str(node.value)
            if pointer is PointerType.LOCALIZED_TEXT and current_entity is PointerType.UNIT_SKIN:
                if key == "description" and value == "":
                    report(node, Report.EMPTY_DESCRIPTION, DiagnosticSeverity.INFORMATION)
                    return
            if not self.indices.contains(pointer, value):
                report(node, Report.missing_in_files(value, pointer), DiagnosticSeverity.ERROR)
            elif pointer in MANIFEST_CHECKED and not self.indices.manifests.has(pointer, value):
                report(node, Report.missing_in_manifest(value, pointer), DiagnosticSeverity.WARNING)

        def walk(node: JsonNode | None, key: str, pointer: PointerType) -> None:
            if node is None or node.type == "null":
                return
            if node.type == "array":
                for item in node.children:
                    walk(item, key, pointer)
                return
            if node.type != "string" or (id(node), pointer) in seen:
                return
            seen.add((id(node), pointer))
            check(node, key, pointer)

        for match in self.service.get_matching_schemas(document, json_document):
            for key, fragment in match.fragment.properties.items():
                pointer = fragment.pointer
                if pointer is PointerType.NONE or self.indices.lookup(pointer) is None:
                    continue
                for prop in find_properties(root, key):
                    if is_within(prop.offset, match.node):
                        walk(prop.value_node, key, pointer)

        logger.debug("Validated %s: %d diagnostics", document.uri, len(diagnostics))
        return diagnostics
