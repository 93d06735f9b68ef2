"""Typed configuration loading and access.

This module provides dataclasses for the config.toml structure. Every key is
optional; a missing file means defaults. The GitHub credential itself never
lives in the file: the file only names the environment variable holding it.
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from upver import __version__

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "GitHubConfig",
    "HttpConfig",
    "default_config_path",
    "load_config",
    "load_config_or_default",
    "CONFIG_PATH_ENV",
    "DEFAULT_API_URL",
    "DEFAULT_TOKEN_ENV",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
]

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TOKEN_ENV = "GITHUB_TOKEN"
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = f"upver/{__version__}"

CONFIG_PATH_ENV = "UPVER_CONFIG"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """GitHub API endpoint and credential source."""

    api_url: str = DEFAULT_API_URL
    token_env: str = DEFAULT_TOKEN_ENV


@dataclass(frozen=True, slots=True)
class HttpConfig:
    """Transport settings for the real HTTP client."""

    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    github: GitHubConfig = field(default_factory=GitHubConfig)
    http: HttpConfig = field(default_factory=HttpConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        github: StrDict = get_table(data, "github") or {}
        http: StrDict = get_table(data, "http") or {}

        timeout = get_float(http, "timeout")
        if timeout is not None and not (math.isfinite(timeout) and timeout > 0):
            raise ValueError(f"http.timeout must be a positive number, got {timeout}")

        return cls(
            github=GitHubConfig(
                api_url=(get_str(github, "api_url") or DEFAULT_API_URL).rstrip("/"),
                token_env=get_str(github, "token_env") or DEFAULT_TOKEN_ENV,
            ),
            http=HttpConfig(
                timeout=timeout or DEFAULT_TIMEOUT,
                user_agent=get_str(http, "user_agent") or DEFAULT_USER_AGENT,
            ),
        )

    def credential(self, environ: Mapping[str, str] | None = None) -> str | None:
        """Return the GitHub token from the configured variable, or None.

        An unset or empty variable means unauthenticated requests.
        """
        env = os.environ if environ is None else environ
        token = env.get(self.github.token_env, "")
        return token or None


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Config path from $UPVER_CONFIG, else ~/.config/upver/config.toml."""
    env = os.environ if environ is None else environ
    override = env.get(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "upver" / "config.toml"


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to config.toml file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config from file, or defaults if the file doesn't exist.

    Unlike a missing file, a file that exists but can't be parsed is an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
