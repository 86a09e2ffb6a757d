from typing import Protocol


class LanguageSource(Protocol):
    async def current_language(self) -> str: ...
