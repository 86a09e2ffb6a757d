import asyncio
import base64
import logging
from collections.abc import Iterable
from pathlib import Path

from sins_lens.models import Hover

logger = logging.getLogger(__name__)


class TexturePreview:
    """Maps ``.png`` stems to their file so brush values can be previewed inline."""

    def __init__(self) -> None:
        self._files: dict[str, Path] = {}

    def replace(self, files: Iterable[Path]) -> None:
        self._files = {path.name.split(".")[0].lower(): path for path in files}

    def get(self, key: str) -> Path | None:
        return self._files.get(key.split(".")[0].lower())

    def __len__(self) -> int:
        return len(self._files)

    async def hover(self, key: str) -> Hover | None:
        path = self.get(key)
        if path is None:
            return None
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            logger.warning("Cannot read texture %s: %s", path, exc)
            return None
        uri = f"data:image/png;base64,{base64.b64encode(data).decode('ascii')}"
        return Hover.markdown(
            ["**Texture Preview**", f"[{path}]({path.resolve().as_uri()})", f"![{key}]({uri})"],
            separator="\n\n",
        )
