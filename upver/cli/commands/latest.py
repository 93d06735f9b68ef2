from __future__ import annotations

import typer

from upver.cli.commands._helpers import parse_repo_or_exit, resolve_or_exit
from upver.cli.context import build_context


def latest(
    repo: str = typer.Argument(..., metavar="OWNER/NAME", help="GitHub repository."),
) -> None:
    """Print the latest stable release version of a repository."""
    ctx = build_context()
    repo_id = parse_repo_or_exit(ctx, repo)
    ctx.console.result(resolve_or_exit(ctx, repo_id))
