from pathlib import Path

import pytest
from conftest import document_for, write_json

from sins_lens.core.engine import Engine
from sins_lens.core.validate import SOURCE, Report
from sins_lens.models import Diagnostic, DiagnosticSeverity


async def _diagnostics(engine: Engine, path: Path, text: str) -> list[Diagnostic]:
    diagnostics = await engine.do_validation(document_for(path, text))
    return [d for d in diagnostics if d.source == SOURCE]


@pytest.mark.asyncio
async def test_unknown_weapon_tag_is_an_error(ready_engine: Engine, mod_root: Path) -> None:
    text = '{"tags": ["plasma", "unknown_tag"]}'
    diagnostics = await _diagnostics(ready_engine, mod_root / "entities" / "new.weapon", text)
    assert len(diagnostics) == 1
    diagnostic = diagnostics[0]
    assert diagnostic.severity is DiagnosticSeverity.ERROR
    assert diagnostic.message == '[weapon_tag]: "unknown_tag" is missing.'
    start = text.index('"unknown_tag"')
    assert diagnostic.range.start.character == start
    assert diagnostic.range.end.character == start + len('"unknown_tag"')


@pytest.mark.asyncio
async def test_unregistered_skin_is_a_manifest_warning(ready_engine: Engine, mod_root: Path) -> None:
    text = '{"skin_groups": [{"skins": ["unregistered_skin"]}]}'
    diagnostics = await _diagnostics(ready_engine, mod_root / "entities" / "new.unit", text)
    assert [(d.severity, d.message) for d in diagnostics] == [
        (DiagnosticSeverity.WARNING, '[unit_skin]: "unregistered_skin" is missing in unit_skin.entity_manifest')
    ]


@pytest.mark.asyncio
async def test_registered_references_are_clean(ready_engine: Engine, mod_root: Path) -> None:
    text = (
        '{"name": "unit.frigate", "skin_groups": [{"skins": ["trader_light_frigate_skin"]}],'
        ' "weapons": {"weapons": [{"weapon": "Trader_Light_Frigate_Cannon"}]}}'
    )
    assert await _diagnostics(ready_engine, mod_root / "entities" / "new.unit", text) == []


@pytest.mark.asyncio
async def test_missing_weapon_and_localized_key(ready_engine: Engine, mod_root: Path) -> None:
    text = '{"name": "unit.missing", "weapons": {"weapons": [{"weapon": "ghost_cannon"}]}}'
    diagnostics = await _diagnostics(ready_engine, mod_root / "entities" / "new.unit", text)
    assert sorted(d.message for d in diagnostics) == [
        '[localized_text]: "unit.missing" is missing.',
        '[weapon]: "ghost_cannon" is missing.',
    ]
    assert {d.severity for d in diagnostics} == {DiagnosticSeverity.ERROR}


@pytest.mark.asyncio
async def test_localized_keys_are_case_sensitive(ready_engine: Engine, mod_root: Path) -> None:
    text = '{"name": "UNIT.FRIGATE"}'
    diagnostics = await _diagnostics(ready_engine, mod_root / "entities" / "new.unit", text)
    assert [d.message for d in diagnostics] == ['[localized_text]: "UNIT.FRIGATE" is missing.']


@pytest.mark.asyncio
async def test_empty_skin_description_is_informational(ready_engine: Engine, mod_root: Path) -> None:
    text = '{"name": "unit.frigate", "description": ""}'
    diagnostics = await _diagnostics(ready_engine, mod_root / "entities" / "new.unit_skin", text)
    assert [(d.severity, d.message) for d in diagnostics] == [
        (DiagnosticSeverity.INFORMATION, Report.EMPTY_DESCRIPTION)
    ]


@pytest.mark.asyncio
async def test_null_values_are_skipped(ready_engine: Engine, mod_root: Path) -> None:
    text = '{"description": null, "hud_icon": null}'
    assert await _diagnostics(ready_engine, mod_root / "entities" / "new.unit_skin", text) == []


@pytest.mark.asyncio
async def test_manifest_ids_are_checked_against_files(ready_engine: Engine, mod_root: Path) -> None:
    text = '{"ids": ["trader_light_frigate", "phantom"]}'
    diagnostics = await _diagnostics(ready_engine, mod_root / "entities" / "unit.entity_manifest", text)
    assert [d.message for d in diagnostics] == ['[unit]: "phantom" is missing.']


@pytest.mark.asyncio
async def test_same_named_key_outside_the_schema_region_is_ignored(ready_engine: Engine, mod_root: Path) -> None:
    text = '{"weapon": "ghost", "weapons": {"weapons": [{"weapon": "ghost2"}]}}'
    diagnostics = await _diagnostics(ready_engine, mod_root / "entities" / "new.unit", text)
    assert [d.message for d in diagnostics] == ['[weapon]: "ghost2" is missing.']
    assert diagnostics[0].range.start.character == text.index('"ghost2"')


@pytest.mark.parametrize(
    ("file_name", "text", "message"),
    [
        (
            "new.unit",
            '{"weapons": {"weapons": [{"weapon": "unlisted_cannon"}]}}',
            '[weapon]: "unlisted_cannon" is missing in weapon.entity_manifest',
        ),
        (
            "new.player",
            '{"buildable_units": ["unlisted_frigate"]}',
            '[unit]: "unlisted_frigate" is missing in unit.entity_manifest',
        ),
        (
            "new.unit",
            '{"item_slots": ["spare_part"]}',
            '[unit_item]: "spare_part" is missing in unit_item.entity_manifest',
        ),
    ],
    ids=["weapon", "unit", "unit_item"],
)
@pytest.mark.asyncio
async def test_existing_but_unregistered_values_warn(
    engine: Engine, mod_root: Path, file_name: str, text: str, message: str
) -> None:
    for name in ("unlisted_cannon.weapon", "unlisted_frigate.unit", "spare_part.unit_item"):
        write_json(mod_root / "entities" / name, {})
    await engine.rebuild(mod_root)
    diagnostics = await _diagnostics(engine, mod_root / "entities" / file_name, text)
    assert [(d.severity, d.message) for d in diagnostics] == [(DiagnosticSeverity.WARNING, message)]
