import asyncio
from pathlib import Path

import pytest
from conftest import write_json

from sins_lens.config import FixedLanguage
from sins_lens.core.engine import Engine, EngineState
from sins_lens.core.errors import EngineNotReadyError, InvalidStateTransitionError
from sins_lens.core.json_service import JSON_SOURCE
from sins_lens.models import Diagnostic, DiagnosticSeverity


class _Recorder:
    def __init__(self) -> None:
        self.published: list[tuple[str, list[Diagnostic]]] = []

    async def __call__(self, uri: str, diagnostics: list[Diagnostic]) -> None:
        self.published.append((uri, diagnostics))


class _BrokenLanguage:
    async def current_language(self) -> str:
        raise RuntimeError("settings unavailable")


class _SlowBrokenLanguage:
    async def current_language(self) -> str:
        await asyncio.sleep(0.01)
        raise RuntimeError("settings unavailable")


@pytest.mark.asyncio
async def test_requests_fail_before_first_rebuild(engine: Engine) -> None:
    assert engine.state is EngineState.UNINITIALIZED
    with pytest.raises(EngineNotReadyError):
        await engine.player_ids()


@pytest.mark.asyncio
async def test_requests_waiting_on_failed_rebuild_are_rejected(mod_root: Path) -> None:
    engine = Engine(language_source=_SlowBrokenLanguage())
    rebuild = asyncio.create_task(engine.rebuild(mod_root))
    await asyncio.sleep(0)
    assert engine.state is EngineState.INDEXING
    waiter = asyncio.create_task(engine.player_ids())

    with pytest.raises(RuntimeError):
        await rebuild
    with pytest.raises(EngineNotReadyError):
        await asyncio.wait_for(waiter, timeout=2)
    assert engine.state is EngineState.UNINITIALIZED


def test_invalid_transition_is_rejected(engine: Engine) -> None:
    with pytest.raises(InvalidStateTransitionError):
        engine._transition(EngineState.READY)


@pytest.mark.asyncio
async def test_rebuild_reaches_ready_and_can_repeat(engine: Engine, mod_root: Path) -> None:
    await engine.rebuild(mod_root)
    assert engine.state is EngineState.READY
    assert engine.context.root == mod_root
    write_json(mod_root / "entities" / "trader_rebel.player", {})
    await engine.rebuild(mod_root)
    assert await engine.player_ids() == ["trader_loyalist", "trader_rebel"]


@pytest.mark.asyncio
async def test_requests_wait_for_running_rebuild(engine: Engine, mod_root: Path) -> None:
    _, players = await asyncio.gather(engine.rebuild(mod_root), engine.player_ids())
    assert players == ["trader_loyalist"]


@pytest.mark.asyncio
async def test_failed_rebuild_returns_to_uninitialized(mod_root: Path) -> None:
    engine = Engine(language_source=_BrokenLanguage())
    with pytest.raises(RuntimeError):
        await engine.rebuild(mod_root)
    assert engine.state is EngineState.UNINITIALIZED


@pytest.mark.asyncio
async def test_documents_opened_early_are_validated_after_rebuild(mod_root: Path) -> None:
    recorder = _Recorder()
    engine = Engine(language_source=FixedLanguage("en"), on_diagnostics=recorder)
    uri = (mod_root / "entities" / "new.weapon").as_uri()
    await engine.open_document(uri, '{"tags": ["unknown_tag"]}')
    assert engine.deferred_documents == [uri]
    assert recorder.published == []

    await engine.rebuild(mod_root)
    assert engine.deferred_documents == []
    [(published_uri, diagnostics)] = recorder.published
    assert published_uri == uri
    assert [d.message for d in diagnostics] == ['[weapon_tag]: "unknown_tag" is missing.']


@pytest.mark.asyncio
async def test_document_lifecycle_publishes_diagnostics(mod_root: Path) -> None:
    recorder = _Recorder()
    engine = Engine(language_source=FixedLanguage("en"), on_diagnostics=recorder)
    await engine.rebuild(mod_root)
    uri = (mod_root / "entities" / "new.weapon").as_uri()

    await engine.open_document(uri, '{"tags": ["plasma"]}')
    changed = await engine.change_document(uri, '{"tags": [')
    assert changed.version == 1
    assert engine.get_document(uri) is changed
    await engine.close_document(uri)

    assert [len(diagnostics) for _, diagnostics in recorder.published][0] == 0
    syntax = recorder.published[1][1]
    assert syntax and all(d.source == JSON_SOURCE for d in syntax)
    assert DiagnosticSeverity.ERROR in {d.severity for d in syntax}
    assert recorder.published[-1] == (uri, [])
    assert engine.get_document(uri) is None


@pytest.mark.asyncio
async def test_named_requests(ready_engine: Engine, caplog: pytest.LogCaptureFixture) -> None:
    assert await ready_engine.player_ids() == ["trader_loyalist"]
    path = await ready_engine.entity_path("TRADER_LIGHT_FRIGATE_CANNON")
    assert path is not None and path.name == "trader_light_frigate_cannon.weapon"
    assert await ready_engine.entity_path("nothing_here") is None

    with caplog.at_level("WARNING"):
        ambiguous = await ready_engine.entity_path("weapon")
    assert ambiguous is not None and ambiguous.name == "weapon.entity_manifest"
    assert "matches 2 files" in caplog.text

    assert await ready_engine.localization("de", "weapon.cannon") == "Maschinenkanone"
    assert await ready_engine.localization("de", "unit.frigate") is None
