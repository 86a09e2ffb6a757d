import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, TypeVar

import typer
from rich.table import Table

from sins_lens.cli.common import console, fail, offset_of, open_ready
from sins_lens.core.document import TextDocument
from sins_lens.core.engine import Engine
from sins_lens.core.errors import SinsLensError

query_app = typer.Typer(help="Ask the engine about a position in a mod file.")

T = TypeVar("T")

FileArg = Annotated[Path, typer.Argument(help="Mod file to query.", exists=True, dir_okay=False)]
LineOpt = Annotated[int, typer.Option("--line", "-l", help="Zero-based line.")]
CharacterOpt = Annotated[int, typer.Option("--character", "-c", help="Zero-based character.")]
RootOpt = Annotated[Path | None, typer.Option(help="Workspace root.")]
LanguageOpt = Annotated[str | None, typer.Option(help="Display language code.")]


def _run_at(
    file: Path,
    line: int,
    character: int,
    root: Path | None,
    language: str | None,
    request: Callable[[Engine, TextDocument, int], Awaitable[T]],
) -> T:
    async def _run() -> T:
        engine, document = await open_ready(file, root, language)
        return await request(engine, document, offset_of(document, line, character))

    try:
        return asyncio.run(_run())
    except (SinsLensError, OSError) as exc:
        raise fail(str(exc)) from exc


@query_app.command("context")
def context(
    file: FileArg, line: LineOpt, character: CharacterOpt, root: RootOpt = None, language: LanguageOpt = None
) -> None:
    """Print the pointer type governing a position."""
    pointer = _run_at(file, line, character, root, language, lambda e, d, o: e.resolve_context(d, o))
    console.print(pointer.value)


@query_app.command("complete")
def complete(
    file: FileArg, line: LineOpt, character: CharacterOpt, root: RootOpt = None, language: LanguageOpt = None
) -> None:
    """List completion candidates at a position."""
    result = _run_at(file, line, character, root, language, lambda e, d, o: e.do_completion(d, o))
    items = result.items if result else []
    table = Table(show_lines=False)
    table.add_column("label")
    table.add_column("kind")
    table.add_column("detail")
    for item in items:
        table.add_row(item.label, item.kind.name.lower(), item.detail or "")
    console.print(table)
    console.print(f"({len(items)} items)")


@query_app.command("definition")
def definition(
    file: FileArg, line: LineOpt, character: CharacterOpt, root: RootOpt = None, language: LanguageOpt = None
) -> None:
    """Print the definition locations of the value at a position."""
    locations = _run_at(file, line, character, root, language, lambda e, d, o: e.go_to_definition(d, o))
    for location in locations:
        start = location.range.start
        console.print(f"{location.uri}:{start.line + 1}:{start.character + 1}", soft_wrap=True)
    console.print(f"({len(locations)} locations)")


@query_app.command("hover")
def hover(
    file: FileArg, line: LineOpt, character: CharacterOpt, root: RootOpt = None, language: LanguageOpt = None
) -> None:
    """Print the hover markdown for a position."""
    result = _run_at(file, line, character, root, language, lambda e, d, o: e.get_hover(d, o))
    if result is None:
        console.print("(no hover)")
        return
    console.print(result.contents.value, markup=False, soft_wrap=True)
