"""
GitHub REST client used for identity checks and team listing.
"""

import httpx
from typing import Any, Dict, List, Optional
from pydantic import BaseModel

from shared.config import GitHubClientOptions
from shared.errors import ExternalServiceError
from shared.logging import get_logger


class TeamMembership(BaseModel):
    """One team the caller belongs to."""
    slug: str
    organization_login: str

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "TeamMembership":
        return cls(slug=item["slug"], organization_login=item["organization"]["login"])


class TeamPage(BaseModel):
    """One page of `GET /user/teams`."""
    items: List[TeamMembership]
    next_url: Optional[str] = None

    @property
    def has_next_page(self) -> bool:
        return self.next_url is not None


class GitHubClient:
    """Async GitHub client bound to a single credential.

    Build one per request and close it afterwards, either with
    ``async with`` or :meth:`aclose`.
    """

    def __init__(
        self,
        options: GitHubClientOptions,
        auth: httpx.Auth,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.options = options
        self.logger = get_logger("github_auth.client")
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": options.user_agent,
        }
        headers.update(options.headers)
        self._client = httpx.AsyncClient(
            base_url=options.base_url,
            auth=auth,
            headers=headers,
            timeout=options.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            self.logger.warning("GitHub request rejected", url=str(e.request.url), status_code=status_code)
            raise ExternalServiceError(
                "github",
                f"HTTP {status_code}",
                details={"status_code": status_code, "url": str(e.request.url)}
            ) from e
        except httpx.HTTPError as e:
            self.logger.error("GitHub request failed", url=url, error=str(e))
            raise ExternalServiceError(
                "github",
                str(e) or type(e).__name__,
                details={"url": url}
            ) from e
        return response

    async def get_authenticated_user(self) -> Dict[str, Any]:
        """Return the profile of the user the credential belongs to."""
        response = await self._get("/user")
        try:
            identity = response.json()
        except ValueError as e:
            raise ExternalServiceError(
                "github",
                "Malformed identity response",
                details={"url": str(response.url), "error": str(e)}
            ) from e

        if not isinstance(identity, dict):
            raise ExternalServiceError(
                "github",
                "Malformed identity response",
                details={"url": str(response.url)}
            )
        return identity

    async def list_teams(self, per_page: Optional[int] = None) -> TeamPage:
        """Fetch the first page of the caller's teams."""
        params = {"per_page": per_page or self.options.page_size}
        response = await self._get("/user/teams", params=params)
        return self._parse_page(response)

    async def next_page(self, page: TeamPage) -> TeamPage:
        """Fetch the page following ``page``."""
        if page.next_url is None:
            raise ValueError("No next page to fetch")

        # The credential rides along, so only follow links back to the API host
        next_url = httpx.URL(page.next_url)
        base_url = self._client.base_url
        if next_url.is_absolute_url and (next_url.scheme, next_url.host, next_url.port) != (
            base_url.scheme, base_url.host, base_url.port
        ):
            self.logger.error("Pagination link points to a foreign host", url=page.next_url)
            raise ExternalServiceError(
                "github",
                "Refusing to follow pagination link to foreign host",
                details={"url": page.next_url}
            )

        response = await self._get(page.next_url)
        return self._parse_page(response)

    def _parse_page(self, response: httpx.Response) -> TeamPage:
        try:
            items = [TeamMembership.from_api(item) for item in response.json()]
        except (ValueError, KeyError, TypeError) as e:
            raise ExternalServiceError(
                "github",
                "Malformed team listing",
                details={"url": str(response.url), "error": str(e)}
            ) from e

        next_link = response.links.get("next") or {}
        return TeamPage(items=items, next_url=next_link.get("url"))
