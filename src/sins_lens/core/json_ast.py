from __future__ import annotations

import json
from bisect import bisect_left
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, cast

from tree_sitter import Node
from tree_sitter_language_pack import SupportedLanguage, get_parser


@dataclass(eq=False)
class JsonNode:
    """A node of a parsed JSON document.

    ``type`` is one of ``object``, ``array``, ``property``, ``string``, ``number``,
    ``boolean`` or ``null``. Offsets and lengths are counted in characters.
    """

    type: str
    offset: int
    length: int
    parent: JsonNode | None = field(default=None, repr=False)
    value: Any = None
    children: list[JsonNode] = field(default_factory=list, repr=False)
    key_node: JsonNode | None = field(default=None, repr=False)
    value_node: JsonNode | None = field(default=None, repr=False)

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def key(self) -> str | None:
        if self.type != "property" or self.key_node is None:
            return None
        return str(self.key_node.value)

    def to_python(self) -> Any:
        if self.type == "object":
            result: dict[str, Any] = {}
            for prop in self.children:
                if prop.key is not None and prop.value_node is not None:
                    result[prop.key] = prop.value_node.to_python()
            return result
        if self.type == "array":
            return [item.to_python() for item in self.children]
        if self.type == "property":
            return self.value_node.to_python() if self.value_node else None
        return self.value


@dataclass(frozen=True)
class SyntaxProblem:
    offset: int
    length: int
    message: str


@dataclass
class JsonDocument:
    root: JsonNode | None
    problems: list[SyntaxProblem] = field(default_factory=list)

    def get_node_from_offset(self, offset: int, include_right_bound: bool = False) -> JsonNode | None:
        def find(node: JsonNode) -> JsonNode | None:
            if node.offset <= offset < node.end or (include_right_bound and offset == node.end):
                for child in node.children:
                    if child.offset > offset:
                        break
                    found = find(child)
                    if found is not None:
                        return found
                return node
            return None

        if self.root is None:
            return None
        return find(self.root)

    def walk(self) -> Iterator[JsonNode]:
        if self.root is not None:
            yield from iter_nodes(self.root)


def iter_nodes(node: JsonNode) -> Iterator[JsonNode]:
    yield node
    for child in node.children:
        yield from iter_nodes(child)


def _char_offset_mapper(text: str) -> Callable[[int], int]:
    if text.isascii():
        return lambda byte_offset: byte_offset
    starts: list[int] = []
    position = 0
    for ch in text:
        starts.append(position)
        position += len(ch.encode("utf-8"))
    starts.append(position)
    return lambda byte_offset: bisect_left(starts, byte_offset)


class _Converter:
    def __init__(self, source: bytes, to_char: Callable[[int], int]) -> None:
        self._source = source
        self._to_char = to_char
        self.problems: list[SyntaxProblem] = []

    def _span(self, node: Node) -> tuple[int, int]:
        start = self._to_char(node.start_byte)
        return start, self._to_char(node.end_byte) - start

    def _text(self, node: Node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def record_problems(self, node: Node) -> None:
        if node.type == "ERROR" or node.is_missing:
            offset, length = self._span(node)
            label = f"Missing {node.type}" if node.is_missing else "Syntax error"
            self.problems.append(SyntaxProblem(offset=offset, length=length, message=label))
            if node.type == "ERROR":
                return
        for child in node.children:
            self.record_problems(child)

    def convert(self, node: Node, parent: JsonNode | None) -> JsonNode | None:
        kind = node.type
        offset, length = self._span(node)
        if kind == "object":
            result = JsonNode(type="object", offset=offset, length=length, parent=parent)
            for pair in self._pairs(node):
                prop = self._property(pair, result)
                if prop is not None:
                    result.children.append(prop)
            return result
        if kind == "array":
            result = JsonNode(type="array", offset=offset, length=length, parent=parent)
            for child in node.named_children:
                item = self.convert(child, result)
                if item is not None:
                    result.children.append(item)
            return result
        if kind == "string":
            return JsonNode(type="string", offset=offset, length=length, parent=parent, value=self._string(node))
        if kind == "number":
            return JsonNode(type="number", offset=offset, length=length, parent=parent, value=self._number(node))
        if kind in ("true", "false"):
            return JsonNode(type="boolean", offset=offset, length=length, parent=parent, value=kind == "true")
        if kind == "null":
            return JsonNode(type="null", offset=offset, length=length, parent=parent, value=None)
        return None

    def _pairs(self, node: Node) -> Iterator[Node]:
        for child in node.named_children:
            if child.type == "pair":
                yield child
            elif child.type == "ERROR":
                yield from self._pairs(child)

    def _property(self, pair: Node, parent: JsonNode) -> JsonNode | None:
        key = pair.child_by_field_name("key")
        if key is None:
            return None
        offset, length = self._span(pair)
        prop = JsonNode(type="property", offset=offset, length=length, parent=parent)
        key_offset, key_length = self._span(key)
        key_value = self._string(key) if key.type == "string" else self._text(key)
        prop.key_node = JsonNode(type="string", offset=key_offset, length=key_length, parent=prop, value=key_value)
        prop.children.append(prop.key_node)
        value = pair.child_by_field_name("value")
        if value is not None:
            prop.value_node = self.convert(value, prop)
            if prop.value_node is not None:
                prop.children.append(prop.value_node)
        return prop

    def _string(self, node: Node) -> str:
        raw = self._text(node)
        try:
            return str(json.loads(raw))
        except ValueError:
            return raw[1:-1] if len(raw) >= 2 else raw.strip('"')

    def _number(self, node: Node) -> int | float:
        raw = self._text(node)
        try:
            return cast(int | float, json.loads(raw))
        except ValueError:
            return float("nan")


def parse_document(text: str) -> JsonDocument:
    """Parse JSON text into a :class:`JsonDocument`; syntax errors are recorded, never raised."""
    parser = get_parser(cast(SupportedLanguage, "json"))
    source = text.encode("utf-8")
    tree = parser.parse(source)
    converter = _Converter(source, _char_offset_mapper(text))
    converter.record_problems(tree.root_node)

    root: JsonNode | None = None
    for child in tree.root_node.named_children:
        candidates = child.named_children if child.type == "ERROR" else [child]
        for candidate in candidates:
            root = converter.convert(candidate, None)
            if root is not None:
                break
        if root is not None:
            break
    return JsonDocument(root=root, problems=converter.problems)


def find_properties(node: JsonNode | None, key: str) -> list[JsonNode]:
    """Return every property node named ``key`` below ``node``, in document order."""
    if node is None:
        return []
    return [n for n in iter_nodes(node) if n.type == "property" and n.key == key]


def is_within(offset: int, node: JsonNode) -> bool:
    return node.offset <= offset <= node.end


def is_value_node(node: JsonNode | None) -> bool:
    if node is None:
        return False
    parent = node.parent
    if parent is None:
        return True
    if parent.type == "property":
        return parent.value_node is node
    return parent.type == "array"


def is_key_node(node: JsonNode | None) -> bool:
    if node is None or node.parent is None:
        return False
    return node.parent.type == "property" and node.parent.key_node is node


def enclosing_property(node: JsonNode | None) -> JsonNode | None:
    current = node
    while current is not None and current.type != "property":
        current = current.parent
    return current


def node_at_path(root: JsonNode | None, path: list[str | int]) -> JsonNode | None:
    """Return the deepest node reachable along ``path`` (a value node, never a property)."""
    current = root
    for segment in path:
        if current is None:
            return None
        if current.type == "object" and isinstance(segment, str):
            prop = next((p for p in current.children if p.key == segment), None)
            if prop is None or prop.value_node is None:
                return current
            current = prop.value_node
        elif current.type == "array" and isinstance(segment, int) and segment < len(current.children):
            current = current.children[segment]
        else:
            return current
    return current
