import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from sins_lens.cli.index import index
from sins_lens.cli.query import query_app
from sins_lens.cli.schemas import schemas
from sins_lens.cli.serve import serve_app
from sins_lens.cli.validate import validate

app = typer.Typer(
    name="sins-lens",
    help="Sins Lens CLI: cross-reference checks for Sins of a Solar Empire II mod files.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure_logging(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


app.command("index")(index)
app.command("validate")(validate)
app.command("schemas")(schemas)
app.add_typer(query_app, name="query")
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
