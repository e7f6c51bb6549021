"""Tests for repository URL parsing and the access pre-flight."""

import pytest

from repopush.exceptions import (
    InvalidCredentialError,
    InvalidReferenceError,
    NotFoundOrNoAccessError,
    RemoteError,
)
from repopush.services.access_validator import RepositoryRef, parse_repository_url, validate_access
from repopush.services.github_client import GitHubAPIError
from tests.fakes import FakeGitHubClient


class TestParseRepositoryUrl:

    @pytest.mark.parametrize("url", [
        "https://github.com/octo/demo",
        "https://github.com/octo/demo.git",
        "https://github.com/octo/demo/",
        "https://github.com/octo/demo/tree/main/src",
        "http://www.github.com/octo/demo",
        "HTTPS://GitHub.com/octo/demo?tab=readme",
        "git@github.com:octo/demo.git",
    ])
    def test_accepted_shapes(self, url):
        assert parse_repository_url(url) == RepositoryRef(owner="octo", repo="demo")

    def test_only_trailing_git_is_stripped(self):
        ref = parse_repository_url("https://github.com/octo/my.github.io.git")
        assert ref.repo == "my.github.io"

    def test_full_name(self):
        assert parse_repository_url("https://github.com/octo/demo").full_name == "octo/demo"

    @pytest.mark.parametrize("url", [
        "",
        "https://gitlab.com/octo/demo",
        "https://github.com/octo",
        "https://github.com/",
        "not a url",
        "https://notgithub.com/octo/demo",
        "https://example.com/github.com/octo/demo",
        "https://github.com.evil.test/octo/demo",
        "ftp://github.com/octo/demo",
        "git@gitlab.com:octo/demo.git",
        "https://github.com/octo/.git",
        "http://[github.com/octo/demo",
    ])
    def test_rejected_shapes(self, url):
        with pytest.raises(InvalidReferenceError):
            parse_repository_url(url)


class TestValidateAccess:

    def test_success_returns_ref(self):
        client = FakeGitHubClient()
        ref = validate_access(client, "https://github.com/octo/demo.git")
        assert ref == RepositoryRef("octo", "demo")
        assert client.ops("get_repository") == [{"op": "get_repository", "owner": "octo", "repo": "demo"}]

    def test_bad_url_makes_no_remote_call(self):
        client = FakeGitHubClient()
        with pytest.raises(InvalidReferenceError):
            validate_access(client, "https://example.com/nope")
        assert client.calls == []

    def test_unauthorized(self):
        client = FakeGitHubClient(repo_error=GitHubAPIError("Bad credentials", 401))
        with pytest.raises(InvalidCredentialError):
            validate_access(client, "https://github.com/octo/demo")

    def test_not_found(self):
        client = FakeGitHubClient(repo_error=GitHubAPIError("Not Found", 404))
        with pytest.raises(NotFoundOrNoAccessError) as exc_info:
            validate_access(client, "https://github.com/octo/demo")
        assert exc_info.value.details == {"owner": "octo", "repo": "demo"}

    @pytest.mark.parametrize("status", [0, 403, 500])
    def test_other_failures_carry_remote_message(self, status):
        client = FakeGitHubClient(repo_error=GitHubAPIError("API rate limit exceeded", status))
        with pytest.raises(RemoteError) as exc_info:
            validate_access(client, "https://github.com/octo/demo")
        assert "API rate limit exceeded" in exc_info.value.message

    def test_error_codes_are_distinct(self):
        codes = {
            InvalidReferenceError("x").error_code,
            InvalidCredentialError().error_code,
            NotFoundOrNoAccessError("o", "r").error_code,
            RemoteError("m").error_code,
        }
        assert len(codes) == 4
