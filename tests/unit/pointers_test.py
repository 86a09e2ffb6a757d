from sins_lens.core.entities import entity_type_from_uri, identifier_from_path, is_json_document
from sins_lens.core.pointers import MANIFEST_CATEGORIES, MANIFEST_CHECKED, PointerType


def test_parse_known_and_unknown_values() -> None:
    assert PointerType.parse("weapon_tag") is PointerType.WEAPON_TAG
    assert PointerType.parse(" Unit ") is PointerType.UNIT
    assert PointerType.parse("nope") is PointerType.NONE
    assert PointerType.parse(None) is PointerType.NONE


def test_manifest_categories_cover_checked_ones() -> None:
    assert len(MANIFEST_CATEGORIES) == 14
    assert len(set(MANIFEST_CATEGORIES)) == 14
    assert MANIFEST_CHECKED <= set(MANIFEST_CATEGORIES)


def test_entity_type_from_uri() -> None:
    assert entity_type_from_uri("file:///mod/entities/trader.unit_skin") is PointerType.UNIT_SKIN
    assert entity_type_from_uri("file:///mod/localized_text/en.localized_text") is PointerType.LOCALIZED_TEXT
    assert entity_type_from_uri("file:///mod/uniforms/weapon.uniforms") is PointerType.NONE
    assert entity_type_from_uri("file:///mod/README") is PointerType.NONE


def test_identifier_is_lowercased_stem_before_first_dot(tmp_path) -> None:
    assert identifier_from_path(tmp_path / "Trader_Light.Frigate.unit") == "trader_light"
    assert is_json_document(tmp_path / "x.UNIT")
    assert not is_json_document(tmp_path / "x.png")
