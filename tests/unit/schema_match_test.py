from sins_lens.core.json_ast import parse_document
from sins_lens.core.schema_match import collect_matching_schemas
from sins_lens.core.schemas import AnnotatedSchema

SCHEMA = {
    "type": "object",
    "properties": {
        "kind": {"oneOf": [{"type": "number"}, {"type": "string", "enum": ["a"]}, {"type": "string"}]},
        "items": {"type": "array", "prefixItems": [{"type": "string"}], "items": {"$ref": "#/$defs/entry"}},
    },
    "patternProperties": {"^x_": {"type": "boolean"}},
    "additionalProperties": {"type": "null"},
    "$defs": {"entry": {"type": "object", "properties": {"id": {"type": "string"}}}},
}


def _annotated() -> AnnotatedSchema:
    return AnnotatedSchema(name="t", file_match="*.t", uri="file:///t.json", schema=SCHEMA)


def test_matches_are_emitted_parent_before_child() -> None:
    root = parse_document('{"items": ["first", {"id": "z"}], "x_flag": true, "other": null}').root
    matches = collect_matching_schemas(root, [_annotated()])
    locations = [m.fragment.location for m in matches]
    assert locations == [
        "",
        "/properties/items",
        "/properties/items/prefixItems/0",
        "/$defs/entry",
        "/$defs/entry/properties/id",
        "/patternProperties/^x_",
        "/additionalProperties",
    ]
    assert matches[0].node is root


def test_one_of_takes_first_compatible_alternative() -> None:
    root = parse_document('{"kind": "a"}').root
    locations = [m.fragment.location for m in collect_matching_schemas(root, [_annotated()])]
    assert "/properties/kind/oneOf/1" in locations
    assert "/properties/kind/oneOf/2" not in locations


def test_no_root_yields_nothing() -> None:
    assert collect_matching_schemas(None, [_annotated()]) == []


def test_annotations_beside_a_ref_are_kept() -> None:
    schema = {
        "type": "object",
        "properties": {"name": {"$ref": "#/$defs/key", "description": "Display name."}},
        "$defs": {"key": {"type": "string"}},
    }
    annotated = AnnotatedSchema(name="t", file_match="*.t", uri="file:///t.json", schema=schema)
    root = parse_document('{"name": "x"}').root
    locations = [m.fragment.location for m in collect_matching_schemas(root, [annotated])]
    assert locations == ["", "/properties/name", "/$defs/key"]
