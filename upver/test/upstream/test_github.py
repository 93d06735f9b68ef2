"""Tests for upstream/github.py - latest stable release resolution."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from upver.core.result import Err, Ok
from upver.upstream.github import (
    GitHubRelease,
    GitHubResolver,
    RepoId,
    ResponseOutcome,
    classify_status,
    decode_message,
    decode_release,
    select_version,
)
from upver.upstream.http import HttpError, MockHttpClient

REPO = RepoId("ninja-build", "ninja")
URL = "https://api.github.com/repos/ninja-build/ninja/releases/latest"


def _resolver(client: MockHttpClient, token: str | None = None) -> GitHubResolver:
    return GitHubResolver(client, token=token)


# =============================================================================
# RepoId
# =============================================================================


class TestRepoId:
    def test_str(self) -> None:
        assert str(REPO) == "ninja-build/ninja"

    @pytest.mark.parametrize(
        ("owner", "name"),
        [("ninja-build", "ninja"), ("Kitware", "CMake"), ("a", "b.c_d-e")],
    )
    def test_releases_url(self, owner: str, name: str) -> None:
        assert (
            RepoId(owner, name).releases_url()
            == f"https://api.github.com/repos/{owner}/{name}/releases/latest"
        )

    def test_releases_url_custom_host(self) -> None:
        url = REPO.releases_url("https://ghe.example.com/api/v3")
        assert url == "https://ghe.example.com/api/v3/repos/ninja-build/ninja/releases/latest"

    def test_parse(self) -> None:
        assert RepoId.parse("ninja-build/ninja") == Ok(REPO)
        assert RepoId.parse("  Kitware/CMake ") == Ok(RepoId("Kitware", "CMake"))

    @pytest.mark.parametrize(
        "text",
        ["ninja", "a/b/c", "/ninja", "ninja-build/", "own er/repo", "owner/..", "owner/re?po"],
    )
    def test_parse_rejects(self, text: str) -> None:
        assert isinstance(RepoId.parse(text), Err)


# =============================================================================
# Decoding and classification
# =============================================================================


class TestClassifyStatus:
    def test_forbidden(self) -> None:
        assert classify_status(403) is ResponseOutcome.FORBIDDEN

    def test_not_found(self) -> None:
        assert classify_status(404) is ResponseOutcome.NOT_FOUND

    @pytest.mark.parametrize("status", [200, 201, 301, 401, 422, 500, 502])
    def test_everything_else_is_a_record(self, status: int) -> None:
        assert classify_status(status) is ResponseOutcome.RECORD


class TestDecodeRelease:
    def test_full_record(self) -> None:
        body = (
            b'{"url": "https://api.github.com/repos/o/r/releases/1", "name": "v1.0",'
            b' "tag_name": "v1.0.0", "prerelease": false, "draft": false,'
            b' "published_at": "2024-03-01T12:00:00Z", "assets": []}'
        )

        result = decode_release(body)

        assert isinstance(result, Ok)
        release = result.value
        assert release.url == "https://api.github.com/repos/o/r/releases/1"
        assert release.name == "v1.0"
        assert release.tag_name == "v1.0.0"
        assert release.prerelease is False
        assert release.draft is False
        assert release.published_at == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_missing_fields_are_zero(self) -> None:
        assert decode_release(b"{}") == Ok(GitHubRelease())

    def test_null_published_at(self) -> None:
        result = decode_release(b'{"tag_name": "v1", "published_at": null}')
        assert isinstance(result, Ok)
        assert result.value.published_at is None

    def test_null_body(self) -> None:
        assert decode_release(b"null") == Ok(GitHubRelease())

    @pytest.mark.parametrize(
        "body",
        [
            b"",
            b"<html>rate limited</html>",
            b"[]",
            b'"v1.0"',
            b'{"prerelease": "yes"}',
            b'{"name": 12}',
            b'{"published_at": "yesterday"}',
            b"\xff\xfe",
        ],
    )
    def test_malformed(self, body: bytes) -> None:
        assert isinstance(decode_release(body), Err)


class TestDecodeMessage:
    def test_message(self) -> None:
        result = decode_message(
            b'{"message": "API rate limit exceeded", "documentation_url": "https://docs"}'
        )
        assert isinstance(result, Ok)
        assert result.value.message == "API rate limit exceeded"
        assert result.value.documentation_url == "https://docs"

    def test_invalid(self) -> None:
        assert isinstance(decode_message(b"nope"), Err)


class TestSelectVersion:
    def test_prerelease_wins_over_everything(self) -> None:
        release = GitHubRelease(name="v2.0.0", tag_name="v2.0.0", prerelease=True, draft=True)
        assert select_version(release) == Err(("prerelease", "v2.0.0"))

    def test_draft(self) -> None:
        assert select_version(GitHubRelease(name="Next", draft=True)) == Err(("draft", "Next"))

    def test_unnamed_prerelease_is_labelled_by_tag(self) -> None:
        release = GitHubRelease(tag_name="v2.0.0-rc1", prerelease=True)
        assert select_version(release) == Err(("prerelease", "v2.0.0-rc1"))

    def test_unnamed_draft_is_labelled_by_tag(self) -> None:
        release = GitHubRelease(tag_name="v2.1.0", draft=True)
        assert select_version(release) == Err(("draft", "v2.1.0"))

    def test_name_over_tag(self) -> None:
        assert select_version(GitHubRelease(name="v2.3.1", tag_name="v2.3.0")) == Ok("2.3.1")

    def test_tag_when_name_empty(self) -> None:
        assert select_version(GitHubRelease(tag_name="v1.0.0")) == Ok("1.0.0")

    def test_nothing_usable(self) -> None:
        assert select_version(GitHubRelease()) == Err(("not_found", ""))

    def test_name_of_only_vs_is_not_a_version(self) -> None:
        result = select_version(GitHubRelease(name="v", tag_name="v1.0"))
        assert isinstance(result, Err)
        assert result.error[0] == "not_found"


# =============================================================================
# GitHubResolver
# =============================================================================


class TestGitHubResolverRequest:
    def test_url(self) -> None:
        assert _resolver(MockHttpClient()).releases_url(REPO) == URL

    def test_calls_latest_release_endpoint_once(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"tag_name": "v1.12.1"})

        _resolver(client).resolve(REPO)

        assert [c.url for c in client.calls] == [URL]

    def test_token_sent(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"tag_name": "v1.12.1"})

        _resolver(client, token="secret-token").resolve(REPO)

        assert client.calls[0].headers["Authorization"] == "token secret-token"

    @pytest.mark.parametrize("token", [None, ""])
    def test_no_token_no_header(self, token: str | None) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"tag_name": "v1.12.1"})

        result = _resolver(client, token=token).resolve(REPO)

        assert result == Ok("1.12.1")
        assert "Authorization" not in client.calls[0].headers

    def test_api_url_trailing_slash(self) -> None:
        resolver = GitHubResolver(MockHttpClient(), api_url="https://api.github.com/")
        assert resolver.releases_url(REPO) == URL


class TestGitHubResolverResponses:
    def test_success_name_priority(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"name": "v2.3.1", "tag_name": "v2.3.0"})

        assert _resolver(client).resolve(REPO) == Ok("2.3.1")

    def test_success_tag_fallback(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"name": "", "tag_name": "v1.0.0"})

        assert _resolver(client).resolve(REPO) == Ok("1.0.0")

    def test_empty_name_and_tag(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"name": "", "tag_name": ""})

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "not_found"
        assert str(result.error) == f"No GitHub release found for ninja-build/ninja on {URL}"

    @pytest.mark.parametrize(
        "body",
        [b"", b'{"name": "v9.9.9", "tag_name": "v9.9.9"}', b'{"message": "Not Found"}'],
    )
    def test_404_ignores_body(self, body: bytes) -> None:
        client = MockHttpClient()
        client.set_response(URL, 404, body)

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "not_found"

    def test_403_rate_limit_message(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"message": "API rate limit exceeded"}, status=403)

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "rate_limited"
        assert "API rate limit exceeded" in str(result.error)
        assert "ninja-build/ninja" in str(result.error)
        assert URL in str(result.error)

    def test_403_never_parses_a_release(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"name": "v1.0.0", "tag_name": "v1.0.0"}, status=403)

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "rate_limited"

    def test_403_undecodable_body(self) -> None:
        client = MockHttpClient()
        client.set_response(URL, 403, "<html>Forbidden</html>")

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "rate_limited"
        assert "invalid JSON" in result.error.cause

    def test_403_empty_message(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {}, status=403)

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "rate_limited"
        assert result.error.cause == "HTTP 403 Forbidden"

    def test_prerelease_rejected(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"name": "v2.0.0-rc.1", "tag_name": "v2.0.0", "prerelease": True})

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "prerelease"
        assert result.error.release == "v2.0.0-rc.1"
        assert "pre-release v2.0.0-rc.1" in str(result.error)

    def test_draft_rejected(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"name": "v3.0.0", "draft": True, "published_at": None})

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "draft"
        assert "release draft v3.0.0" in str(result.error)

    def test_unnamed_prerelease_message_names_the_tag(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"name": "", "tag_name": "v2.0.0-rc1", "prerelease": True})

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.release == "v2.0.0-rc1"
        assert str(result.error) == (
            f"Ignoring GitHub pre-release v2.0.0-rc1 for ninja-build/ninja ({URL})"
        )

    def test_malformed_body(self) -> None:
        client = MockHttpClient()
        client.set_response(URL, 200, "not json")

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "malformed_body"
        assert str(result.error).startswith(
            f"Failed to obtain GitHub release for ninja-build/ninja from {URL}: "
        )

    def test_error_body_under_other_status_is_empty_release(self) -> None:
        # A JSON error object decodes as a release with no usable field
        client = MockHttpClient()
        client.set_json(URL, {"message": "Server Error"}, status=500)

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "not_found"

    def test_v_stripping(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"name": "vv1.2.3"})

        assert _resolver(client).resolve(REPO) == Ok("1.2.3")

    def test_character_trim_quirk(self) -> None:
        client = MockHttpClient()
        client.set_json(URL, {"name": "version1.0"})

        assert _resolver(client).resolve(REPO) == Ok("ersion1.0")


class TestGitHubResolverTransport:
    def test_transport_failure(self) -> None:
        client = MockHttpClient()
        client.set_error(URL, HttpError(url=URL, kind="transport", message="Connection refused"))

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "transport_failed"
        assert str(result.error) == (
            f"Failed to obtain GitHub release for ninja-build/ninja from {URL}: Connection refused"
        )

    def test_request_failure(self) -> None:
        client = MockHttpClient()
        client.set_error(URL, HttpError(url=URL, kind="request", message="unknown url type"))

        result = _resolver(client).resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "request_failed"

    def test_real_client_bad_api_url_is_request_failure(self) -> None:
        from upver.upstream.http import RealHttpClient

        resolver = GitHubResolver(RealHttpClient(timeout=1.0), api_url="no-scheme")

        result = resolver.resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "request_failed"
        assert "no-scheme/repos/ninja-build/ninja/releases/latest" in str(result.error)

    def test_real_client_non_numeric_port_is_request_failure(self) -> None:
        from upver.upstream.http import RealHttpClient

        resolver = GitHubResolver(RealHttpClient(timeout=1.0), api_url="https://api.github.com:abc")

        result = resolver.resolve(REPO)

        assert isinstance(result, Err)
        assert result.error.kind == "request_failed"
        assert "nonnumeric port" in str(result.error)
        assert "ninja-build/ninja" in str(result.error)
        assert "https://api.github.com:abc/repos/ninja-build/ninja/releases/latest" in str(result.error)
