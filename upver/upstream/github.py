"""Latest stable release lookup on GitHub.

One GET to ``/repos/{owner}/{repo}/releases/latest`` per call. API docs:
https://docs.github.com/en/rest/releases/releases#get-the-latest-release

The response is classified by status before any release parsing:
- 403: rate limit (or forbidden); the body carries the service message
- 404: no published release
- anything else: the body must be a release object

A decoded release is then accepted or rejected in a fixed order: pre-releases
and drafts are rejected, otherwise the release name wins over the tag name.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import TYPE_CHECKING

from upver.core.config import DEFAULT_API_URL
from upver.core.result import Err, Ok, Result
from upver.core.structured import StrDict, as_str_dict, read_bool, read_str
from upver.upstream.errors import ResolveError, ResolveErrorKind
from upver.upstream.version import strip_version_prefix

if TYPE_CHECKING:
    from upver.upstream.http import HttpClient, HttpResponse

__all__ = [
    "GitHubMessage",
    "GitHubRelease",
    "GitHubResolver",
    "RepoId",
    "ResponseOutcome",
    "classify_status",
    "decode_message",
    "decode_release",
    "select_version",
]

_NAME_RE = re.compile(r"^[A-Za-z0-9._-]+$")


@dataclass(frozen=True, slots=True)
class RepoId:
    """GitHub repository identifier."""

    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, text: str) -> Result[RepoId, str]:
        """Parse "owner/name" as typed on the command line."""
        parts = text.strip().split("/")
        if len(parts) != 2:
            return Err(f"expected OWNER/NAME, got {text!r}")
        owner, name = parts
        for label, part in (("owner", owner), ("name", name)):
            if not part:
                return Err(f"empty repository {label} in {text!r}")
            if part in (".", "..") or not _NAME_RE.match(part):
                return Err(f"invalid repository {label} {part!r}")
        return Ok(cls(owner=owner, name=name))

    def releases_url(self, api_url: str = DEFAULT_API_URL) -> str:
        return f"{api_url}/repos/{self.owner}/{self.name}/releases/latest"


@dataclass(frozen=True, slots=True)
class GitHubRelease:
    url: str = ""
    name: str = ""
    tag_name: str = ""
    prerelease: bool = False
    draft: bool = False
    published_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class GitHubMessage:
    """Error payload GitHub sends alongside 4xx statuses."""

    message: str = ""
    documentation_url: str = ""


class ResponseOutcome(Enum):
    FORBIDDEN = auto()
    NOT_FOUND = auto()
    RECORD = auto()


def classify_status(status: int) -> ResponseOutcome:
    match status:
        case 403:
            return ResponseOutcome.FORBIDDEN
        case 404:
            return ResponseOutcome.NOT_FOUND
        case _:
            return ResponseOutcome.RECORD


def _decode_object(body: bytes) -> Result[StrDict, str]:
    """Decode a JSON object body. A literal ``null`` decodes as an empty object."""
    try:
        data: object = json.loads(body.decode("utf-8"))
    except UnicodeDecodeError as e:
        return Err(f"invalid UTF-8 in response body: {e}")
    except json.JSONDecodeError as e:
        return Err(f"invalid JSON in response body: {e}")

    if data is None:
        return Ok({})
    obj = as_str_dict(data)
    if obj is None:
        return Err(f"expected JSON object, got {type(data).__name__}")
    return Ok(obj)


def _read_timestamp(table: StrDict, key: str) -> Result[datetime | None, str]:
    value = table.get(key)
    if value is None:
        return Ok(None)
    if not isinstance(value, str):
        return Err(f"field {key!r}: expected timestamp string")
    try:
        return Ok(datetime.fromisoformat(value))
    except ValueError as e:
        return Err(f"field {key!r}: {e}")


def decode_release(body: bytes) -> Result[GitHubRelease, str]:
    """Decode a release object. Missing fields take their zero value."""
    decoded = _decode_object(body)
    if isinstance(decoded, Err):
        return decoded
    data = decoded.value

    strings: dict[str, str] = {}
    for key in ("url", "name", "tag_name"):
        field_result = read_str(data, key)
        if isinstance(field_result, Err):
            return field_result
        strings[key] = field_result.value

    flags: dict[str, bool] = {}
    for key in ("prerelease", "draft"):
        flag_result = read_bool(data, key)
        if isinstance(flag_result, Err):
            return flag_result
        flags[key] = flag_result.value

    published = _read_timestamp(data, "published_at")
    if isinstance(published, Err):
        return published

    return Ok(
        GitHubRelease(
            url=strings["url"],
            name=strings["name"],
            tag_name=strings["tag_name"],
            prerelease=flags["prerelease"],
            draft=flags["draft"],
            published_at=published.value,
        )
    )


def decode_message(body: bytes) -> Result[GitHubMessage, str]:
    decoded = _decode_object(body)
    if isinstance(decoded, Err):
        return decoded

    message = read_str(decoded.value, "message")
    if isinstance(message, Err):
        return message
    doc_url = read_str(decoded.value, "documentation_url")
    if isinstance(doc_url, Err):
        return doc_url
    return Ok(GitHubMessage(message=message.value, documentation_url=doc_url.value))


def select_version(release: GitHubRelease) -> Result[str, tuple[ResolveErrorKind, str]]:
    """Pick the version string of a decoded release.

    Returns Err((kind, label)) when the release is rejected; the label is the
    release name, or its tag when the name is empty.
    """
    label = release.name or release.tag_name
    if release.prerelease:
        return Err(("prerelease", label))
    if release.draft:
        return Err(("draft", label))

    version = strip_version_prefix(label)
    if not version:
        # Covers both empty fields and a name made only of "v"s
        return Err(("not_found", release.name))
    return Ok(version)


class GitHubResolver:
    """Resolve the latest stable release version of a GitHub repository.

    The resolver is stateless: each call issues exactly one request, with no
    retries and no caching.
    """

    def __init__(
        self,
        http: HttpClient,
        token: str | None = None,
        api_url: str = DEFAULT_API_URL,
    ) -> None:
        """
        Args:
            http: HTTP client used for the lookup
            token: GitHub token; None or "" sends unauthenticated requests
            api_url: API base URL (GitHub Enterprise hosts differ)
        """
        self.http = http
        self.token = token or None
        self.api_url = api_url.rstrip("/")

    def releases_url(self, repo: RepoId) -> str:
        return repo.releases_url(self.api_url)

    def request_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    def resolve(self, repo: RepoId) -> Result[str, ResolveError]:
        """Return the normalized latest stable version of ``repo``."""
        url = self.releases_url(repo)

        response = self.http.get(url, headers=self.request_headers())
        if isinstance(response, Err):
            kind: ResolveErrorKind = (
                "request_failed" if response.error.kind == "request" else "transport_failed"
            )
            return Err(ResolveError(kind, repo, url, cause=response.error.message))

        return self._interpret(repo, url, response.value)

    def _interpret(
        self, repo: RepoId, url: str, response: HttpResponse
    ) -> Result[str, ResolveError]:
        match classify_status(response.status):
            case ResponseOutcome.FORBIDDEN:
                message = decode_message(response.body)
                if isinstance(message, Err):
                    return Err(ResolveError("rate_limited", repo, url, cause=message.error))
                cause = message.value.message or "HTTP 403 Forbidden"
                return Err(ResolveError("rate_limited", repo, url, cause=cause))
            case ResponseOutcome.NOT_FOUND:
                return Err(ResolveError("not_found", repo, url))
            case ResponseOutcome.RECORD:
                release = decode_release(response.body)
                if isinstance(release, Err):
                    return Err(ResolveError("malformed_body", repo, url, cause=release.error))
                selected = select_version(release.value)
                if isinstance(selected, Err):
                    kind, name = selected.error
                    return Err(ResolveError(kind, repo, url, release=name))
                return selected
