"""
Unit tests for credential handling.
"""

import base64

import httpx
import pytest

from service_github_auth.app.validation.credentials import (
    TokenAuth,
    build_auth,
    credential_digest,
    validate_mode,
)
from shared.config import AuthMode
from shared.errors import UnsupportedAuthModeError


def authorization_header(auth: httpx.Auth) -> str:
    request = httpx.Request("GET", "https://api.github.test/user")
    flow = auth.sync_auth_flow(request)
    return next(flow).headers["Authorization"]


class TestValidateMode:

    @pytest.mark.parametrize("mode,expected", [
        ("token", AuthMode.TOKEN),
        ("basic", AuthMode.BASIC),
        (" Basic ", AuthMode.BASIC),
        (AuthMode.TOKEN, AuthMode.TOKEN),
    ])
    def test_known_modes(self, mode, expected):
        assert validate_mode(mode) is expected

    @pytest.mark.parametrize("mode", ["oauth", "", "jwt"])
    def test_unknown_mode_is_fatal(self, mode):
        with pytest.raises(UnsupportedAuthModeError) as exc_info:
            validate_mode(mode)

        assert exc_info.value.code == "UNSUPPORTED_AUTH_MODE"
        assert exc_info.value.mode == mode


class TestBuildAuth:

    def test_token_mode_ignores_username(self):
        auth = build_auth("token", "octocat", "ghp_secret")

        assert isinstance(auth, TokenAuth)
        assert authorization_header(auth) == "token ghp_secret"

    def test_basic_mode_uses_username_and_password(self):
        auth = build_auth("basic", "octocat", "hunter2")

        expected = base64.b64encode(b"octocat:hunter2").decode()
        assert authorization_header(auth) == f"Basic {expected}"

    def test_unsupported_mode(self):
        with pytest.raises(UnsupportedAuthModeError):
            build_auth("oauth", "octocat", "secret")

    def test_each_call_returns_a_new_auth(self):
        first = build_auth("token", "a", "one")
        second = build_auth("token", "b", "two")

        assert authorization_header(first) == "token one"
        assert authorization_header(second) == "token two"


class TestCredentialDigest:

    def test_digest_is_stable_for_same_key(self):
        key = b"k" * 32
        assert credential_digest(key, "octocat", "pw") == credential_digest(key, "octocat", "pw")

    def test_digest_depends_on_credential_and_key(self):
        key = b"k" * 32
        base = credential_digest(key, "octocat", "pw")

        assert credential_digest(key, "octocat", "other") != base
        assert credential_digest(b"x" * 32, "octocat", "pw") != base

    def test_digest_does_not_contain_secret(self):
        assert "pw-secret" not in credential_digest(b"k" * 32, "octocat", "pw-secret")
