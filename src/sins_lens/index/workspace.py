import json
import logging
import os
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SKIPPED_DIRECTORIES = frozenset({".git", "node_modules"})


def iter_files(root: Path) -> Iterator[Path]:
    """Yield every file below ``root`` in a stable order, skipping VCS and package folders."""
    for directory, subdirectories, files in os.walk(root, onerror=_log_walk_error):
        subdirectories[:] = sorted(d for d in subdirectories if d not in SKIPPED_DIRECTORIES)
        for name in sorted(files):
            yield Path(directory) / name


def _log_walk_error(error: OSError) -> None:
    logger.warning("Cannot read directory %s: %s", error.filename, error.strerror)


class WorkspaceFiles:
    """The files of one workspace walk, bucketed by extension and by file name.

    Lookups compare case-insensitively and keep discovery order.
    """

    def __init__(self, files: Iterable[Path]) -> None:
        self._files: list[Path] = []
        self._by_suffix: dict[str, list[Path]] = {}
        self._by_name: dict[str, list[Path]] = {}
        for path in files:
            self._files.append(path)
            self._by_suffix.setdefault(path.suffix.lower(), []).append(path)
            self._by_name.setdefault(path.name.lower(), []).append(path)

    @classmethod
    def scan(cls, root: Path) -> "WorkspaceFiles":
        return cls(iter_files(root))

    def with_suffix(self, suffix: str) -> list[Path]:
        return list(self._by_suffix.get(suffix.lower(), []))

    def named(self, file_name: str) -> list[Path]:
        return list(self._by_name.get(file_name.lower(), []))

    def matching(self, predicate: Callable[[Path], bool]) -> list[Path]:
        return [path for path in self._files if predicate(path)]

    def __len__(self) -> int:
        return len(self._files)


def read_json(path: Path) -> Any | None:
    """Parse a JSON file; unreadable or malformed files are logged and yield ``None``."""
    try:
        with path.open(encoding="utf-8-sig") as handle:
            return json.load(handle)
    except (OSError, ValueError) as exc:
        logger.warning("Skipping %s: %s", path, exc)
        return None
