import os
from pathlib import Path

DEFAULT_LANGUAGE = "en"


def workspace_from_env() -> Path | None:
    value = os.getenv("SINS_LENS_WORKSPACE")
    return Path(value) if value else None


class EnvironmentLanguage:
    """Reads the display language from ``SINS_LENS_LANGUAGE`` on every call."""

    async def current_language(self) -> str:
        return os.getenv("SINS_LENS_LANGUAGE") or DEFAULT_LANGUAGE


class FixedLanguage:
    def __init__(self, language: str) -> None:
        self.language = language

    async def current_language(self) -> str:
        return self.language
