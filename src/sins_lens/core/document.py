from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from pathlib import Path

from sins_lens.core.entities import uri_to_path
from sins_lens.models import Position, Range


@dataclass(frozen=True)
class TextDocument:
    """Immutable snapshot of an open document's text.

    Characters are counted in code points; a line ends at ``\\n``, ``\\r\\n`` or ``\\r``.
    """

    uri: str
    text: str
    version: int = 0
    _line_offsets: list[int] = field(default_factory=list, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        offsets = [0]
        text = self.text
        i = 0
        while i < len(text):
            ch = text[i]
            if ch == "\r":
                if i + 1 < len(text) and text[i + 1] == "\n":
                    i += 1
                offsets.append(i + 1)
            elif ch == "\n":
                offsets.append(i + 1)
            i += 1
        object.__setattr__(self, "_line_offsets", offsets)

    @classmethod
    def from_path(cls, path: str | Path, version: int = 0) -> TextDocument:
        file_path = Path(path).resolve()
        try:
            text = file_path.read_text(encoding="utf-8-sig")
        except FileNotFoundError:
            raise FileNotFoundError(f"File not found: {path}") from None
        return cls(uri=file_path.as_uri(), text=text, version=version)

    @property
    def path(self) -> Path:
        return uri_to_path(self.uri)

    @property
    def line_count(self) -> int:
        return len(self._line_offsets)

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        line = bisect_right(self._line_offsets, offset) - 1
        return Position(line=line, character=offset - self._line_offsets[line])

    def offset_at(self, position: Position) -> int:
        if position.line >= len(self._line_offsets):
            return len(self.text)
        if position.line < 0:
            return 0
        line_offset = self._line_offsets[position.line]
        if position.line + 1 < len(self._line_offsets):
            next_line_offset = self._line_offsets[position.line + 1]
        else:
            next_line_offset = len(self.text)
        return max(min(line_offset + position.character, next_line_offset), line_offset)

    def range_of(self, offset: int, length: int) -> Range:
        return Range(start=self.position_at(offset), end=self.position_at(offset + length))

    def get_text(self, start: int | None = None, end: int | None = None) -> str:
        return self.text[start:end]
