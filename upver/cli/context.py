from __future__ import annotations

from dataclasses import dataclass

import typer

from upver.core.config import Config, default_config_path, load_config_or_default
from upver.core.errors import ErrorCode
from upver.core.result import Err
from upver.output.console import ConsoleProtocol, RichConsole
from upver.upstream.github import GitHubResolver
from upver.upstream.http import RealHttpClient


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    resolver: GitHubResolver


def build_context() -> CLIContext:
    config_result = load_config_or_default(default_config_path())
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config = config_result.value
    http = RealHttpClient(timeout=config.http.timeout, user_agent=config.http.user_agent)

    return CLIContext(
        config=config,
        console=RichConsole(),
        resolver=GitHubResolver(http, token=config.credential(), api_url=config.github.api_url),
    )
