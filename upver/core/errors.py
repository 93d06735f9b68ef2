"""Error codes for CLI exit status.

This module provides a simple enum of error codes that map to shell exit codes.
Commands map every failure to one of these so scripts can branch on the kind
of failure without parsing output.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad repository identifier, invalid arguments)
    - 2: Environment error (unreadable config file)
    - 3: Release error (no stable release: missing, pre-release or draft)
    - 4: Network error (unreachable API, rate limit, unexpected payload)
    - 5: Outdated (``check --strict`` found a newer upstream version)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    RELEASE_ERROR = 3
    NETWORK_ERROR = 4
    OUTDATED = 5

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
