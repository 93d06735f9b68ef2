"""Version normalization and comparison.

Normalization is a plain character trim: every leading ``v`` or ``V`` goes,
so ``"vv1.2.3"`` becomes ``"1.2.3"`` and ``"version1.0"`` becomes
``"ersion1.0"``. This is not a semantic-version parser.
"""

from __future__ import annotations

import re
from enum import Enum

__all__ = [
    "VersionComparison",
    "compare_versions",
    "strip_version_prefix",
]

_PREFIX_CHARS = "vV"
_NUMERIC_RE = re.compile(r"^\d+(\.\d+)*$")


def strip_version_prefix(raw: str) -> str:
    """Remove all leading v/V characters."""
    return raw.lstrip(_PREFIX_CHARS)


class VersionComparison(Enum):
    """How a current version relates to the latest upstream one."""

    UP_TO_DATE = "up-to-date"
    OUTDATED = "outdated"
    AHEAD = "ahead"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


def _numeric_key(version: str) -> tuple[int, ...] | None:
    if not _NUMERIC_RE.match(version):
        return None
    return tuple(int(p) for p in version.split("."))


def _pad(key: tuple[int, ...], size: int) -> tuple[int, ...]:
    return key + (0,) * (size - len(key))


def compare_versions(current: str, latest: str) -> VersionComparison:
    """Compare a pinned version against the latest upstream version.

    Both sides are normalized first. Dotted-numeric versions compare
    component-wise with missing components as 0 ("1.2" == "1.2.0"); any
    other pair is only known to be equal or not.
    """
    current = strip_version_prefix(current.strip())
    latest = strip_version_prefix(latest.strip())

    current_key = _numeric_key(current)
    latest_key = _numeric_key(latest)
    if current_key is None or latest_key is None:
        return VersionComparison.UP_TO_DATE if current == latest else VersionComparison.UNKNOWN

    size = max(len(current_key), len(latest_key))
    a, b = _pad(current_key, size), _pad(latest_key, size)
    if a == b:
        return VersionComparison.UP_TO_DATE
    if a < b:
        return VersionComparison.OUTDATED
    return VersionComparison.AHEAD
