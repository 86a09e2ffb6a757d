from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from sins_lens.config import FixedLanguage, workspace_from_env
from sins_lens.core.document import TextDocument
from sins_lens.core.engine import Engine
from sins_lens.models import Position

console = Console()


def fail(message: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(code=1)


def resolve_root(root: Path | None, file: Path | None = None) -> Path:
    """Explicit ``--root``, else ``SINS_LENS_WORKSPACE``, else the file's directory."""
    if root is not None:
        return root
    env_root = workspace_from_env()
    if env_root is not None:
        return env_root
    if file is not None:
        return file.resolve().parent
    return Path.cwd()


def create_engine(language: str | None) -> Engine:
    return Engine(language_source=FixedLanguage(language) if language else None)


async def open_ready(file: Path, root: Path | None, language: str | None) -> tuple[Engine, TextDocument]:
    engine = create_engine(language)
    await engine.rebuild(resolve_root(root, file))
    return engine, TextDocument.from_path(file)


def offset_of(document: TextDocument, line: int, character: int) -> int:
    return document.offset_at(Position(line=line, character=character))
