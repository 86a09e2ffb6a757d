"""Shared fixtures and helpers for tests."""

import json
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from sins_lens.config import FixedLanguage
from sins_lens.core.document import TextDocument
from sins_lens.core.engine import Engine

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=4), encoding="utf-8")
    return path


def document_for(path: Path, text: str | None = None) -> TextDocument:
    """Open ``path`` as a document, optionally overriding its text."""
    if text is None:
        return TextDocument.from_path(path)
    return TextDocument(uri=path.resolve().as_uri(), text=text)


def offset_in(text: str, needle: str, delta: int = 1) -> int:
    """Offset ``delta`` characters into the first occurrence of ``needle``."""
    index = text.index(needle)
    return index + delta


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def mod_root(tmp_path: Path) -> Path:
    """A small mod workspace with every index source represented."""
    root = tmp_path / "mod"
    entities = root / "entities"
    write_json(entities / "trader_loyalist.player", {"buildable_units": ["trader_light_frigate"]})
    write_json(
        entities / "trader_light_frigate.unit",
        {
            "name": "unit.frigate",
            "skin_groups": [{"skins": ["trader_light_frigate_skin"]}],
            "weapons": {"weapons": [{"weapon": "trader_light_frigate_cannon"}]},
        },
    )
    write_json(entities / "Trader_Carrier.unit", {"name": "unit.frigate"})
    write_json(entities / "trader_light_frigate_skin.unit_skin", {"name": "unit.frigate", "description": ""})
    write_json(entities / "unregistered_skin.unit_skin", {"name": "unit.frigate"})
    write_json(
        entities / "trader_light_frigate_cannon.weapon",
        {"name": "weapon.cannon", "damage": 12, "range": 4000, "cooldown_duration": 2.5, "tags": ["plasma"]},
    )
    write_json(entities / "weapon.entity_manifest", {"ids": ["trader_light_frigate_cannon"]})
    write_json(entities / "unit.entity_manifest", {"ids": ["trader_light_frigate", "trader_carrier"]})
    write_json(entities / "unit_skin.entity_manifest", {"ids": ["trader_light_frigate_skin"]})
    write_json(
        root / "uniforms" / "weapon.uniforms",
        {"weapon_tags": [{"name": "plasma", "localized_name": "weapon_tag.plasma"}, {"name": "kinetic"}]},
    )
    write_json(
        root / "localized_text" / "en.localized_text",
        {"weapon.cannon": "Autocannon", "weapon_tag.plasma": "Plasma", "unit.frigate": "Light Frigate"},
    )
    write_json(root / "localized_text" / "de.localized_text", {"weapon.cannon": "Maschinenkanone"})
    (root / "textures").mkdir()
    (root / "textures" / "trader_icon.png").write_bytes(PNG_BYTES)
    (root / "textures" / "hull_clr.dds").write_bytes(b"DDS ")
    (root / "meshes").mkdir()
    (root / "meshes" / "frigate_hull.mesh").write_bytes(b"")
    (root / "fonts").mkdir()
    (root / "fonts" / "title.ttf").write_bytes(b"")
    (root / ".git").mkdir()
    write_json(root / ".git" / "ignored.unit", {})
    return root


@pytest.fixture
def engine() -> Engine:
    return Engine(language_source=FixedLanguage("en"))


@pytest_asyncio.fixture
async def ready_engine(engine: Engine, mod_root: Path) -> Engine:
    await engine.rebuild(mod_root)
    return engine
