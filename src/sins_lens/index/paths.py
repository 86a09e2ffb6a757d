import logging
from collections.abc import Iterable
from pathlib import Path

from sins_lens.core.entities import identifier_from_path

logger = logging.getLogger(__name__)


class PathIndex:
    """Identifier stem to every file carrying it, in discovery order."""

    def __init__(self) -> None:
        self._paths: dict[str, list[Path]] = {}

    def add(self, file_path: Path) -> None:
        self._paths.setdefault(identifier_from_path(file_path), []).append(file_path)

    def replace(self, files: Iterable[Path]) -> None:
        self._paths = {}
        for file_path in files:
            self.add(file_path)

    def get_paths(self, identifier: str) -> list[Path]:
        return list(self._paths.get(identifier.lower(), []))

    def with_suffix(self, identifier: str, suffix: str) -> list[Path]:
        """Paths for ``identifier`` whose extension equals ``suffix`` (case-insensitive)."""
        suffix = suffix.lower()
        return [path for path in self.get_paths(identifier) if path.suffix.lower() == suffix]

    def first_with_suffix(self, identifier: str, suffix: str) -> Path | None:
        paths = self.with_suffix(identifier, suffix)
        if len(paths) > 1:
            logger.warning("Identifier %r is ambiguous: %s", identifier, ", ".join(str(p) for p in paths))
        return paths[0] if paths else None

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and identifier.lower() in self._paths
