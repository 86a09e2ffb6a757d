"""Tests that -h is accepted as a help flag on all CLI commands."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from sins_lens.cli.app import app

runner = CliRunner()


@pytest.mark.parametrize(
    "args",
    [
        [],
        ["index"],
        ["validate"],
        ["schemas"],
        ["query"],
        ["query", "context"],
        ["serve"],
        ["serve", "mcp"],
    ],
    ids=["root", "index", "validate", "schemas", "query", "query-context", "serve", "serve-mcp"],
)
def test_short_help_flag(args: list[str]) -> None:
    result = runner.invoke(app, [*args, "-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output
