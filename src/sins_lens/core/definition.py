import asyncio
import logging
from pathlib import Path

from sins_lens.core.entities import LOCALIZED_TEXT_SUFFIX
from sins_lens.core.pointers import PointerType
from sins_lens.index import IndexSet
from sins_lens.models import Location, Position, Range

logger = logging.getLogger(__name__)


def find_key_range(text: str, key: str) -> Range | None:
    """Range of the first literal ``"key"`` occurrence, scanning line by line."""
    needle = f'"{key}"'
    for line_number, line in enumerate(text.split("\n")):
        column = line.find(needle)
        if column != -1:
            return Range(
                start=Position(line=line_number, character=column),
                end=Position(line=line_number, character=column + len(key) + 2),
            )
    return None


class DefinitionProvider:
    def __init__(self, indices: IndexSet) -> None:
        self.indices = indices

    async def go_to_definition(self, context: PointerType, identifier: str, language: str) -> list[Location]:
        if context is PointerType.NONE or not identifier:
            return []

        target_range = Range.empty()
        if context is PointerType.LOCALIZED_TEXT:
            if not self.indices.existence.has(PointerType.LOCALIZED_TEXT, identifier):
                return []
            paths = self.indices.paths.with_suffix(language, LOCALIZED_TEXT_SUFFIX)
            if not paths:
                return []
            try:
                text = await asyncio.to_thread(paths[0].read_text, encoding="utf-8-sig")
            except OSError as exc:
                logger.warning("Cannot read %s: %s", paths[0], exc)
            else:
                target_range = find_key_range(text, identifier) or target_range
        else:
            # Only files of the requested category; same-named files elsewhere are ignored.
            paths = self.indices.paths.with_suffix(identifier, f".{context.value}")

        return [Location(uri=_file_uri(path), range=target_range) for path in paths]


def _file_uri(path: Path) -> str:
    return path.resolve().as_uri()
