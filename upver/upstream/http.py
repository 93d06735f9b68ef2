"""HTTP client abstraction for upstream API lookups.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing

Unlike a typical "raise on 4xx" client, every status the server answers with
is returned as an HttpResponse: resolvers need the body of a 403 to explain a
rate limit. HttpError is reserved for calls that never got an answer.
"""

from __future__ import annotations

import http.client
import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable

from upver.core.config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from upver.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]

HttpErrorKind = Literal["request", "transport"]


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """A fully read HTTP response.

    Attributes:
        status: HTTP status code
        body: Raw response body
        headers: Response headers (lower-cased names)
    """

    status: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass(frozen=True, slots=True)
class HttpError:
    """A request that produced no HTTP response.

    Attributes:
        url: The URL that failed
        kind: "request" if the URL or request settings are unusable,
            "transport" for DNS/TLS/connection/timeout and protocol failures
        message: Human-readable error message
    """

    url: str
    kind: HttpErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    This abstraction allows injecting mock clients for testing,
    avoiding real network calls in unit tests.
    """

    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        """GET a URL.

        Args:
            url: URL to fetch
            headers: Extra request headers

        Returns:
            Ok with the response (any status), or Err with HttpError
        """
        ...


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - Non-2xx responses returned with their body
    - Timeout handling
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            user_agent: Default User-Agent header value
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _build(self, url: str, headers: Mapping[str, str] | None) -> urllib.request.Request:
        merged = {"User-Agent": self.user_agent}
        if headers:
            merged.update(headers)
        return urllib.request.Request(url, headers=merged, method="GET")

    def _fetch(self, req: urllib.request.Request) -> HttpResponse:
        """Send req and read the whole body; non-2xx statuses are responses too."""
        try:
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return HttpResponse(
                    status=response.status,
                    body=response.read(),
                    headers={k.lower(): v for k, v in response.headers.items()},
                )
        except urllib.error.HTTPError as e:
            # HTTPError is itself the response; the context closes its body
            with e:
                return HttpResponse(
                    status=e.code,
                    body=e.read(),
                    headers={k.lower(): v for k, v in (e.headers or {}).items()},
                )

    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        try:
            req = self._build(url, headers)
        except ValueError as e:
            return Err(HttpError(url=url, kind="request", message=str(e)))

        try:
            return Ok(self._fetch(req))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, kind="transport", message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, kind="transport", message="Request timed out"))
        except OSError as e:
            return Err(HttpError(url=url, kind="transport", message=str(e)))
        except http.client.InvalidURL as e:
            return Err(HttpError(url=url, kind="request", message=str(e)))
        except http.client.HTTPException as e:
            return Err(HttpError(url=url, kind="transport", message=f"HTTP protocol error: {e!r}"))
        except ValueError as e:
            return Err(HttpError(url=url, kind="request", message=str(e)))


@dataclass(frozen=True, slots=True)
class RecordedCall:
    """A single request seen by MockHttpClient."""

    url: str
    headers: dict[str, str]


class MockHttpClient:
    """Mock HTTP client for testing.

    Allows setting predefined responses for specific URLs.

    Usage:
        client = MockHttpClient()
        client.set_json(url, {"tag_name": "v1.0.0"})
        client.set_response(url, 404, b'{"message": "Not Found"}')
        client.set_error(url, HttpError(url=url, kind="transport", message="refused"))
    """

    def __init__(self) -> None:
        self._responses: dict[str, HttpResponse | HttpError] = {}
        self.calls: list[RecordedCall] = []

    def set_response(self, url: str, status: int, body: bytes | str = b"") -> None:
        """Set a raw response for URL."""
        data = body.encode("utf-8") if isinstance(body, str) else body
        self._responses[url] = HttpResponse(status=status, body=data)

    def set_json(self, url: str, payload: object, status: int = 200) -> None:
        """Set a JSON response for URL."""
        self.set_response(url, status, json.dumps(payload))

    def set_error(self, url: str, error: HttpError) -> None:
        """Make requests to URL fail without a response."""
        self._responses[url] = error

    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        self.calls.append(RecordedCall(url=url, headers=dict(headers or {})))

        response = self._responses.get(url)
        if response is None:
            return Ok(HttpResponse(status=404, body=b'{"message": "Not Found"}'))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
