from collections.abc import Mapping


class LocalizationStore:
    """Localized strings per language, plus the union of every known key."""

    def __init__(self) -> None:
        self._languages: dict[str, dict[str, str]] = {}
        self._known_keys: frozenset[str] = frozenset()

    def replace(self, languages: Mapping[str, Mapping[str, str]]) -> None:
        self._languages = {lang: dict(entries) for lang, entries in languages.items()}
        self._known_keys = frozenset(key for entries in self._languages.values() for key in entries)

    @property
    def known_keys(self) -> frozenset[str]:
        return self._known_keys

    def languages(self) -> list[str]:
        return sorted(self._languages)

    def get(self, language: str, key: str) -> str | None:
        return self._languages.get(language, {}).get(key)

    def __len__(self) -> int:
        return len(self._known_keys)
