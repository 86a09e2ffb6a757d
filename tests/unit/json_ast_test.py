from sins_lens.core.json_ast import (
    find_properties,
    is_key_node,
    is_value_node,
    is_within,
    node_at_path,
    parse_document,
)

TEXT = '{"name": "x", "tags": ["a", null, 3], "nested": {"name": true}}'


def test_parse_builds_property_nodes_with_offsets() -> None:
    document = parse_document(TEXT)
    root = document.root
    assert root is not None
    assert root.type == "object"
    assert (root.offset, root.length) == (0, len(TEXT))
    assert [p.key for p in root.children] == ["name", "tags", "nested"]
    name = root.children[0]
    assert name.value_node is not None
    assert name.value_node.value == "x"
    assert name.value_node.offset == TEXT.index('"x"')
    assert name.value_node.length == 3
    assert document.problems == []


def test_to_python_round_trips_values() -> None:
    root = parse_document(TEXT).root
    assert root is not None
    assert root.to_python() == {"name": "x", "tags": ["a", None, 3], "nested": {"name": True}}


def test_node_from_offset_returns_innermost_node() -> None:
    document = parse_document(TEXT)
    node = document.get_node_from_offset(TEXT.index('"a"') + 1)
    assert node is not None
    assert node.type == "string"
    assert node.value == "a"
    assert is_value_node(node)
    key = document.get_node_from_offset(TEXT.index('"tags"') + 2)
    assert key is not None
    assert is_key_node(key)
    assert not is_value_node(key)


def test_offsets_are_counted_in_characters() -> None:
    text = '{"tëxt": "ü", "after": "v"}'
    root = parse_document(text).root
    assert root is not None
    after = root.children[1].value_node
    assert after is not None
    assert after.offset == text.index('"v"')


def test_syntax_errors_are_recorded_not_raised() -> None:
    document = parse_document('{"name": "x",, "other": 1}')
    assert document.problems
    assert document.root is not None


def test_find_properties_and_paths() -> None:
    root = parse_document(TEXT).root
    props = find_properties(root, "name")
    assert len(props) == 2
    nested_value = props[1].value_node
    assert nested_value is not None
    assert nested_value.value is True
    assert node_at_path(root, ["tags", 2]).value == 3
    assert is_within(props[1].offset, root.children[2])
    assert not is_within(props[0].offset, root.children[2])
