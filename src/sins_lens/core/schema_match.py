from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from sins_lens.core.json_ast import JsonNode
from sins_lens.core.schemas import AnnotatedSchema, SchemaFragment

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class MatchingSchema:
    """A schema fragment together with the AST node it governs."""

    node: JsonNode
    fragment: SchemaFragment


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error:
        logger.debug("Ignoring unsupported pattern %r", pattern)
        return None


def _type_matches(node: JsonNode, expected: Any) -> bool:
    names = expected if isinstance(expected, list) else [expected]
    for name in names:
        if name == node.type:
            return True
        if name == "integer" and node.type == "number" and isinstance(node.value, int):
            return True
    return False


def accepts(node: JsonNode, fragment: SchemaFragment) -> bool:
    """Cheap structural check used to pick ``anyOf`` / ``oneOf`` alternatives."""
    schema = fragment.resolve().schema
    if schema is False:
        return False
    if not isinstance(schema, dict):
        return True
    if "type" in schema and not _type_matches(node, schema["type"]):
        return False
    if "const" in schema and node.to_python() != schema["const"]:
        return False
    if isinstance(schema.get("enum"), list) and node.to_python() not in schema["enum"]:
        return False
    if node.type == "object" and isinstance(schema.get("required"), list):
        keys = {child.key for child in node.children}
        if not all(key in keys for key in schema["required"]):
            return False
    return True


def _combinator(fragment: SchemaFragment, keyword: str) -> list[SchemaFragment]:
    alternatives = fragment.schema.get(keyword)
    if not isinstance(alternatives, list):
        return []
    children = (fragment.child(keyword, index) for index in range(len(alternatives)))
    return [child for child in children if child is not None]


def _visit(node: JsonNode, fragment: SchemaFragment, out: list[MatchingSchema]) -> None:
    # Keywords beside a $ref (title, description) still apply to the node.
    if isinstance(fragment.schema, dict) and "$ref" in fragment.schema and len(fragment.schema) > 1:
        out.append(MatchingSchema(node=node, fragment=fragment))
    fragment = fragment.resolve()
    schema = fragment.schema
    if not isinstance(schema, dict):
        return
    out.append(MatchingSchema(node=node, fragment=fragment))

    for alternative in _combinator(fragment, "allOf"):
        _visit(node, alternative, out)
    for alternative in _combinator(fragment, "anyOf"):
        if accepts(node, alternative):
            _visit(node, alternative, out)
    for alternative in _combinator(fragment, "oneOf"):
        if accepts(node, alternative):
            _visit(node, alternative, out)
            break

    if node.type == "object":
        properties = fragment.properties
        patterns = fragment.pattern_properties
        additional = fragment.child("additionalProperties")
        for prop in node.children:
            key = prop.key
            if key is None or prop.value_node is None:
                continue
            matched = False
            if key in properties:
                _visit(prop.value_node, properties[key], out)
                matched = True
            for pattern, pattern_fragment in patterns:
                compiled = _compile(pattern)
                if compiled is not None and compiled.search(key):
                    _visit(prop.value_node, pattern_fragment, out)
                    matched = True
            if not matched and additional is not None:
                _visit(prop.value_node, additional, out)
    elif node.type == "array":
        prefix = schema.get("prefixItems")
        prefix_count = len(prefix) if isinstance(prefix, list) else 0
        items = fragment.child("items")
        for index, item in enumerate(node.children):
            if index < prefix_count:
                prefix_fragment = fragment.child("prefixItems", index)
                if prefix_fragment is not None:
                    _visit(item, prefix_fragment, out)
            elif items is not None:
                _visit(item, items, out)


def collect_matching_schemas(root: JsonNode | None, schemas: list[AnnotatedSchema]) -> list[MatchingSchema]:
    """Walk ``root`` against every schema, emitting matches parent-before-child."""
    matches: list[MatchingSchema] = []
    if root is None:
        return matches
    for annotated in schemas:
        _visit(root, annotated.root, matches)
    return matches
