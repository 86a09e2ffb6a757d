from typing import Annotated

import typer
from rich.table import Table

from sins_lens.cli.common import console, fail
from sins_lens.core.errors import SinsLensError
from sins_lens.core.schemas import configure


def schemas(
    markers: Annotated[bool, typer.Option("--markers", help="List every pointer marker.")] = False,
) -> None:
    """Show the annotated schema configuration."""
    try:
        annotated = configure()
    except SinsLensError as exc:
        raise fail(str(exc)) from exc

    table = Table(show_lines=False)
    table.add_column("file match")
    table.add_column("markers", justify="right")
    table.add_column("uri")
    for schema in annotated:
        table.add_row(schema.file_match, str(len(schema.markers)), schema.uri)
        if markers:
            for location, pointer in schema.markers.items():
                table.add_row("", pointer.value, f"  {location}")
    console.print(table)
    console.print(f"({len(annotated)} schemas)")
