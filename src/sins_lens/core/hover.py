import asyncio
import logging
from typing import Any

from sins_lens.core.pointers import PointerType
from sins_lens.index import IndexSet
from sins_lens.index.workspace import read_json
from sins_lens.models import Hover

logger = logging.getLogger(__name__)

RULE = "------------"


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    return str(value)


class HoverProvider:
    """Markdown summaries for referenced entities, read straight from disk."""

    def __init__(self, indices: IndexSet) -> None:
        self.indices = indices

    async def hover(self, context: PointerType, key: str, language: str) -> Hover | None:
        if context is PointerType.BRUSH:
            return await self.indices.textures.hover(key)
        if context is PointerType.LOCALIZED_TEXT:
            return self.localized_text(key, language)
        if context is PointerType.WEAPON:
            return await self.weapon(key, language)
        if context is PointerType.WEAPON_TAG:
            return await self.weapon_tag(key, language)
        return None

    def localized_text(self, key: str, language: str) -> Hover | None:
        if key not in self.indices.localization.known_keys:
            return None
        text = self.indices.localization.get(language, key)
        body = text if text is not None else f"*No {language} translation.*"
        return Hover.markdown([f"**Localized Text** - *{language}.localized_text*", "", RULE, "", body])

    async def weapon(self, key: str, language: str) -> Hover | None:
        path = self.indices.paths.first_with_suffix(key, ".weapon")
        if path is None:
            return None
        contents = await asyncio.to_thread(read_json, path)
        if not isinstance(contents, dict):
            return None
        name_key = contents.get("name")
        title = (isinstance(name_key, str) and self.indices.localization.get(language, name_key)) or name_key or key
        row = [contents.get("damage"), contents.get("range"), contents.get("cooldown_duration"), contents.get("tags")]
        return Hover.markdown(
            [
                f"**{title}**",
                "",
                RULE,
                "",
                "| Damage | Range | Cooldown | Tags",
                "| :---- | :---- | :---- | :----",
                "| " + " | ".join(_cell(value) for value in row),
            ]
        )

    async def weapon_tag(self, key: str, language: str) -> Hover | None:
        uniforms = self.indices.paths.with_suffix("weapon", ".uniforms")
        if not uniforms:
            return None
        contents = await asyncio.to_thread(read_json, uniforms[0])
        tags = contents.get("weapon_tags") if isinstance(contents, dict) else None
        entry = next((t for t in tags or [] if isinstance(t, dict) and t.get("name") == key), None)
        if entry is None:
            return None
        localized_name = entry.get("localized_name")
        text = isinstance(localized_name, str) and self.indices.localization.get(language, localized_name)
        return Hover.markdown(["**Tag**", "", RULE, "", text or str(localized_name or key)])
