import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from sins_lens.cli.common import console, create_engine, fail
from sins_lens.core.errors import SinsLensError


def index(
    root: Annotated[Path, typer.Argument(help="Mod workspace root.", exists=True, file_okay=False)],
    language: Annotated[str | None, typer.Option(help="Display language code.")] = None,
) -> None:
    """Scan a workspace and print the size of every index."""
    engine = create_engine(language)

    async def _run() -> None:
        indices = await engine.rebuild(root)
        table = Table(title=f"Indices for {root}")
        table.add_column("index")
        table.add_column("entries", justify="right")
        for name, count in sorted(indices.summary().items()):
            table.add_row(name, str(count))
        console.print(table)

    try:
        asyncio.run(_run())
    except SinsLensError as exc:
        raise fail(str(exc)) from exc
