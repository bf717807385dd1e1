"""
Credential handling for GitHub requests.
"""

import hashlib
import hmac
from typing import Any, Dict, Generator

import httpx

from shared.config import AuthMode
from shared.errors import UnsupportedAuthModeError
from shared.logging import get_logger
from ..github.client import GitHubClient

logger = get_logger("github_auth.credentials")


class TokenAuth(httpx.Auth):
    """Personal access token auth (``Authorization: token <value>``)."""

    def __init__(self, token: str):
        self._auth_header = f"token {token}"

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = self._auth_header
        yield request


def validate_mode(mode) -> AuthMode:
    """Return the AuthMode for ``mode`` or raise UnsupportedAuthModeError."""
    if isinstance(mode, AuthMode):
        return mode
    try:
        return AuthMode(str(mode).strip().lower())
    except ValueError:
        logger.error("Unsupported authentication mode configured", mode=mode)
        raise UnsupportedAuthModeError(str(mode)) from None


def build_auth(mode, username: str, credential: str) -> httpx.Auth:
    """Build the auth object for one request.

    In token mode the credential is the token and the username is ignored.
    """
    auth_mode = validate_mode(mode)
    if auth_mode is AuthMode.TOKEN:
        return TokenAuth(credential)
    if auth_mode is AuthMode.BASIC:
        return httpx.BasicAuth(username, credential)
    raise UnsupportedAuthModeError(str(mode))


def credential_digest(key: bytes, username: str, credential: str) -> str:
    # HMAC(username || "\0" || credential)
    msg = f"{username}\0{credential}".encode()
    return hmac.new(key, msg, hashlib.sha256).hexdigest()


async def fetch_identity(client: GitHubClient) -> Dict[str, Any]:
    """Cheap "who am I" call; raises ExternalServiceError when rejected."""
    return await client.get_authenticated_user()
