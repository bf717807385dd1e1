"""
Test helper functions and factory methods for the GitHub auth service.
"""

import asyncio
import base64
import zlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import httpx

from shared.config import GitHubClientOptions

TEST_BASE_URL = "https://api.github.test"


@dataclass
class FakeAccount:
    """A GitHub account known to the fake API."""
    login: str
    secret: str
    teams: List[Dict[str, Any]] = field(default_factory=list)


def make_team(slug: str, org: str, team_id: Optional[int] = None) -> Dict[str, Any]:
    """Build a team payload shaped like `GET /user/teams` items."""
    return {
        "id": team_id if team_id is not None else zlib.crc32(f"{org}/{slug}".encode()),
        "slug": slug,
        "name": slug.replace("-", " ").title(),
        "organization": {"login": org, "id": zlib.crc32(org.encode())},
    }


def make_teams(count: int, org: str, prefix: str = "team") -> List[Dict[str, Any]]:
    return [make_team(f"{prefix}-{i}", org, team_id=i) for i in range(count)]


class FakeGitHub:
    """In-memory GitHub API served through httpx.MockTransport.

    Accepts ``token <secret>`` and HTTP basic credentials, paginates
    ``/user/teams`` with Link headers, and records every request.
    """

    def __init__(self, accounts: List[FakeAccount], base_url: str = TEST_BASE_URL, yield_between_requests: bool = False):
        self.accounts = accounts
        self.base_url = base_url
        self.yield_between_requests = yield_between_requests
        self.requests: List[Tuple[str, Optional[str]]] = []
        self.fail_paths: Dict[str, int] = {}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client_options(self, **overrides) -> GitHubClientOptions:
        return GitHubClientOptions(base_url=self.base_url, **overrides)

    def count(self, path: str) -> int:
        return sum(1 for p, _ in self.requests if p == path)

    def _account_for(self, authorization: Optional[str]) -> Optional[FakeAccount]:
        if not authorization:
            return None
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "token":
            return next((a for a in self.accounts if a.secret == value), None)
        if scheme.lower() == "basic":
            login, _, secret = base64.b64decode(value).decode().partition(":")
            return next((a for a in self.accounts if a.login == login and a.secret == secret), None)
        return None

    async def handle(self, request: httpx.Request) -> httpx.Response:
        authorization = request.headers.get("Authorization")
        path = request.url.path
        self.requests.append((path, authorization))

        if self.yield_between_requests:
            await asyncio.sleep(0)

        if path in self.fail_paths:
            return httpx.Response(self.fail_paths[path], json={"message": "Server Error"})

        account = self._account_for(authorization)
        if account is None:
            return httpx.Response(401, json={"message": "Bad credentials"})

        if path == "/user":
            return httpx.Response(200, json={"login": account.login, "id": zlib.crc32(account.login.encode())})

        if path == "/user/teams":
            per_page = int(request.url.params.get("per_page", 30))
            page = int(request.url.params.get("page", 1))
            start = (page - 1) * per_page
            items = account.teams[start:start + per_page]
            headers = {}
            if start + per_page < len(account.teams):
                query = urlencode({"per_page": per_page, "page": page + 1})
                headers["Link"] = f'<{self.base_url}/user/teams?{query}>; rel="next"'
            return httpx.Response(200, json=items, headers=headers)

        return httpx.Response(404, json={"message": "Not Found"})
