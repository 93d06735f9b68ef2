from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from upver.core.errors import ErrorCode

if TYPE_CHECKING:
    from upver.upstream.github import RepoId

ResolveErrorKind = Literal[
    "request_failed",
    "transport_failed",
    "rate_limited",
    "not_found",
    "malformed_body",
    "prerelease",
    "draft",
]

_RELEASE_KINDS = frozenset({"not_found", "prerelease", "draft"})


@dataclass(frozen=True, slots=True)
class ResolveError:
    """Why a latest-release lookup produced no version.

    ``cause`` holds the underlying reason for wrapped kinds (transport error,
    decode error, service message). ``release`` names the rejected release for
    ``prerelease`` and ``draft``.
    """

    kind: ResolveErrorKind
    repo: RepoId
    url: str
    cause: str = ""
    release: str = ""

    def __str__(self) -> str:
        match self.kind:
            case "not_found":
                return f"No GitHub release found for {self.repo} on {self.url}"
            case "prerelease":
                return f"Ignoring GitHub pre-release {self.release} for {self.repo} ({self.url})"
            case "draft":
                return f"Ignoring GitHub release draft {self.release} for {self.repo} ({self.url})"
            case _:
                prefix = f"Failed to obtain GitHub release for {self.repo} from {self.url}"
                return f"{prefix}: {self.cause}" if self.cause else prefix

    @property
    def exit_code(self) -> ErrorCode:
        if self.kind in _RELEASE_KINDS:
            return ErrorCode.RELEASE_ERROR
        return ErrorCode.NETWORK_ERROR
