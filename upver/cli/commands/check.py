from __future__ import annotations

import typer

from upver.cli.commands._helpers import exit_with_code, parse_repo_or_exit, resolve_or_exit
from upver.cli.context import build_context
from upver.core.errors import ErrorCode
from upver.upstream.version import VersionComparison, compare_versions


def check(
    repo: str = typer.Argument(..., metavar="OWNER/NAME", help="GitHub repository."),
    current: str = typer.Argument(..., help="Version currently in use."),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with a non-zero code when a newer version is available.",
    ),
) -> None:
    """Compare a version in use with the latest stable upstream release."""
    ctx = build_context()
    repo_id = parse_repo_or_exit(ctx, repo)
    upstream = resolve_or_exit(ctx, repo_id)

    match compare_versions(current, upstream):
        case VersionComparison.UP_TO_DATE:
            ctx.console.success(f"{repo_id} {current} is up to date")
        case VersionComparison.OUTDATED:
            ctx.console.warning(f"{repo_id} {current} -> {upstream} available")
            if strict:
                exit_with_code(int(ErrorCode.OUTDATED))
        case VersionComparison.AHEAD:
            ctx.console.info(f"{repo_id} {current} is newer than latest release {upstream}")
        case VersionComparison.UNKNOWN:
            ctx.console.warning(f"{repo_id}: cannot compare {current!r} with latest {upstream!r}")
