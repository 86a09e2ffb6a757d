import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from sins_lens.cli.common import create_engine
from sins_lens.config import workspace_from_env

serve_app = typer.Typer(help="Start servers.")
# stdout belongs to the stdio transport.
console = Console(stderr=True)


@serve_app.command("mcp")
def mcp(
    transport: str = "stdio",
    root: Annotated[Path | None, typer.Option(help="Workspace to index before serving.")] = None,
    language: Annotated[str | None, typer.Option(help="Display language code.")] = None,
) -> None:
    """Start the MCP server."""
    from sins_lens.mcp.server import create_mcp_server

    engine = create_engine(language)
    workspace = root or workspace_from_env()
    if workspace is not None:
        asyncio.run(engine.rebuild(workspace))
    server = create_mcp_server(engine)
    console.print(f"[green]Starting MCP server (transport: {transport})[/green]")
    server.run(transport=transport)  # type: ignore[arg-type]
