"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from upver.core.errors import ErrorCode
from upver.core.result import Err
from upver.upstream.github import RepoId

if TYPE_CHECKING:
    from upver.cli.context import CLIContext


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)


def parse_repo_or_exit(ctx: CLIContext, text: str) -> RepoId:
    result = RepoId.parse(text)
    if isinstance(result, Err):
        ctx.console.error(result.error)
        exit_with_code(int(ErrorCode.USER_ERROR))
    return result.value


def resolve_or_exit(ctx: CLIContext, repo: RepoId) -> str:
    """Resolve the latest stable version, or print the error and exit.

    The rendered error already names the repository and lookup URL.
    """
    result = ctx.resolver.resolve(repo)
    if isinstance(result, Err):
        ctx.console.error(str(result.error))
        exit_with_code(int(result.error.exit_code))
    return result.value
