import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from sins_lens.cli.common import console, fail, open_ready
from sins_lens.core.errors import SinsLensError
from sins_lens.models import DiagnosticSeverity

_STYLES = {
    DiagnosticSeverity.ERROR: "red",
    DiagnosticSeverity.WARNING: "yellow",
    DiagnosticSeverity.INFORMATION: "blue",
    DiagnosticSeverity.HINT: "dim",
}


def validate(
    file: Annotated[Path, typer.Argument(help="Mod file to validate.", exists=True, dir_okay=False)],
    root: Annotated[Path | None, typer.Option(help="Workspace root.")] = None,
    language: Annotated[str | None, typer.Option(help="Display language code.")] = None,
) -> None:
    """Validate one file; exits with 1 when any error is reported."""

    async def _run() -> bool:
        engine, document = await open_ready(file, root, language)
        diagnostics = await engine.do_validation(document)
        if not diagnostics:
            console.print(f"[green]No problems[/green] in {file}")
            return False
        table = Table(show_lines=False)
        for header in ("line", "col", "severity", "source", "message"):
            table.add_column(header)
        for diagnostic in diagnostics:
            style = _STYLES[diagnostic.severity]
            table.add_row(
                str(diagnostic.range.start.line + 1),
                str(diagnostic.range.start.character + 1),
                f"[{style}]{diagnostic.severity.name.lower()}[/{style}]",
                diagnostic.source,
                escape(diagnostic.message),
            )
        console.print(table)
        console.print(f"({len(diagnostics)} problems)")
        return any(d.severity is DiagnosticSeverity.ERROR for d in diagnostics)

    try:
        has_errors = asyncio.run(_run())
    except (SinsLensError, OSError) as exc:
        raise fail(str(exc)) from exc
    if has_errors:
        raise typer.Exit(code=1)
