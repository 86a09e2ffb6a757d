"""Generic JSON support: parsing, schema matching and the schema-driven fallbacks."""

from __future__ import annotations

import logging
from typing import Any

from jsonschema import Draft202012Validator

from sins_lens.core.document import TextDocument
from sins_lens.core.json_ast import JsonDocument, JsonNode, is_key_node, node_at_path, parse_document
from sins_lens.core.schema_match import MatchingSchema, collect_matching_schemas
from sins_lens.core.schemas import AnnotatedSchema, schemas_for_document
from sins_lens.models import (
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    Diagnostic,
    DiagnosticSeverity,
    Hover,
    TextEdit,
)

logger = logging.getLogger(__name__)

JSON_SOURCE = "json"


class JsonLanguageService:
    def __init__(self, schemas: list[AnnotatedSchema]) -> None:
        self.schemas = schemas
        self._validators: dict[str, Draft202012Validator] = {}

    def configure(self, schemas: list[AnnotatedSchema]) -> None:
        self.schemas = schemas
        self._validators.clear()

    def parse_document(self, document: TextDocument) -> JsonDocument:
        return parse_document(document.text)

    def schemas_for(self, document: TextDocument) -> list[AnnotatedSchema]:
        return schemas_for_document(self.schemas, document.uri)

    def get_matching_schemas(self, document: TextDocument, json_document: JsonDocument) -> list[MatchingSchema]:
        return collect_matching_schemas(json_document.root, self.schemas_for(document))

    def _validator(self, annotated: AnnotatedSchema) -> Draft202012Validator:
        validator = self._validators.get(annotated.uri)
        if validator is None:
            validator = Draft202012Validator(annotated.schema)
            self._validators[annotated.uri] = validator
        return validator

    def do_validation(self, document: TextDocument, json_document: JsonDocument) -> list[Diagnostic]:
        diagnostics = [
            Diagnostic(
                range=document.range_of(problem.offset, problem.length),
                severity=DiagnosticSeverity.ERROR,
                message=problem.message,
                source=JSON_SOURCE,
            )
            for problem in json_document.problems
        ]
        root = json_document.root
        if root is None:
            return diagnostics
        instance = root.to_python()
        for annotated in self.schemas_for(document):
            for error in self._validator(annotated).iter_errors(instance):
                node = node_at_path(root, list(error.absolute_path)) or root
                diagnostics.append(
                    Diagnostic(
                        range=document.range_of(node.offset, node.length),
                        severity=DiagnosticSeverity.WARNING,
                        message=error.message,
                        source=JSON_SOURCE,
                    )
                )
        return diagnostics

    def _schemas_at(self, document: TextDocument, json_document: JsonDocument, node: JsonNode) -> list[dict[str, Any]]:
        return [
            match.fragment.schema
            for match in self.get_matching_schemas(document, json_document)
            if match.node is node and isinstance(match.fragment.schema, dict)
        ]

    def do_hover(self, document: TextDocument, json_document: JsonDocument, offset: int) -> Hover | None:
        node = json_document.get_node_from_offset(offset)
        if node is None:
            return None
        if is_key_node(node) and node.parent is not None:
            node = node.parent.value_node
            if node is None:
                return None
        for schema in self._schemas_at(document, json_document, node):
            lines = [f"**{schema['title']}**"] if isinstance(schema.get("title"), str) else []
            if isinstance(schema.get("description"), str):
                lines.append(schema["description"])
            if lines:
                return Hover.markdown(lines, separator="\n\n")
        return None

    def do_complete(self, document: TextDocument, json_document: JsonDocument, offset: int) -> CompletionList | None:
        node = json_document.get_node_from_offset(offset, include_right_bound=True)
        if node is None or node.type != "string" or is_key_node(node):
            return None
        edit_range = document.range_of(node.offset + 1, max(node.length - 2, 0))
        labels: list[str] = []
        for schema in self._schemas_at(document, json_document, node):
            values = schema["enum"] if isinstance(schema.get("enum"), list) else []
            if "const" in schema:
                values = [*values, schema["const"]]
            labels.extend(value for value in values if isinstance(value, str) and value not in labels)
        if not labels:
            return None
        items = [
            CompletionItem(
                label=label,
                kind=CompletionItemKind.ENUM,
                text_edit=TextEdit(range=edit_range, new_text=label),
            )
            for label in labels
        ]
        return CompletionList(items=items)
