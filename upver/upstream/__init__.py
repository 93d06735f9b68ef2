"""Upstream release lookup.

This package provides:
- GitHubResolver: latest stable release of a GitHub repository
- HttpClient protocol with real (urllib) and mock implementations
- Version normalization and comparison helpers
"""

from upver.upstream.errors import ResolveError
from upver.upstream.github import GitHubResolver, RepoId
from upver.upstream.http import HttpClient, HttpError, HttpResponse, MockHttpClient, RealHttpClient
from upver.upstream.version import VersionComparison, compare_versions, strip_version_prefix

__all__ = [
    "GitHubResolver",
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
    "RepoId",
    "ResolveError",
    "VersionComparison",
    "compare_versions",
    "strip_version_prefix",
]
