from collections.abc import Iterable

from sins_lens.core.pointers import PointerType


class CacheStorage:
    """Category-keyed identifier sets.

    A category that was never populated reads as empty; ``set`` replaces a
    category wholesale.
    """

    case_sensitive: frozenset[PointerType] = frozenset()

    def __init__(self) -> None:
        self._sets: dict[PointerType, frozenset[str]] = {}

    def _normalize(self, category: PointerType, identifier: str) -> str:
        return identifier if category in self.case_sensitive else identifier.lower()

    def set(self, category: PointerType, identifiers: Iterable[str]) -> None:
        self._sets[category] = frozenset(self._normalize(category, i) for i in identifiers)

    def get(self, category: PointerType) -> frozenset[str]:
        return self._sets.get(category, frozenset())

    def has(self, category: PointerType, identifier: str) -> bool:
        return self._normalize(category, identifier) in self.get(category)

    def categories(self) -> list[PointerType]:
        return list(self._sets)


class ExistenceCache(CacheStorage):
    case_sensitive = frozenset({PointerType.LOCALIZED_TEXT})


class ManifestRoster(CacheStorage):
    pass


class UniformSet(CacheStorage):
    case_sensitive = frozenset({PointerType.WEAPON_TAG})
