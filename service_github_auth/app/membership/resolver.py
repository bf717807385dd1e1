"""
Team membership resolution.
"""

from typing import Iterable, List, Optional

from shared.errors import ExternalServiceError, ResolutionFailureError
from shared.logging import get_logger
from shared.metrics import MetricsCollector, get_metrics_collector
from ..cache.membership_cache import MembershipCache
from ..github.client import GitHubClient, TeamMembership

ORG_GROUP_PREFIX = "org:"


def organization_groups(memberships: Iterable[TeamMembership]) -> List[str]:
    """Unique ``org:<login>`` groups in order of first appearance."""
    return list(dict.fromkeys(f"{ORG_GROUP_PREFIX}{m.organization_login}" for m in memberships))


class MembershipResolver:
    """Turns a user's GitHub teams into authorization groups."""

    def __init__(
        self,
        cache: MembershipCache,
        org: str = "",
        orgmode: bool = False,
        page_size: int = 100,
        max_pages: int = 1000,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.cache = cache
        self.org = org
        self.orgmode = orgmode
        self.page_size = page_size
        self.max_pages = max_pages
        self.metrics = metrics or get_metrics_collector("github_auth")
        self.logger = get_logger("github_auth.resolver")

    def cached_groups(self, username: str, credential_digest: Optional[str] = None) -> Optional[List[str]]:
        """Groups from a live cache entry, or None on a miss."""
        entry = self.cache.get(username, credential_digest)
        self.metrics.record_cache_lookup(hit=entry is not None)
        if entry is None:
            return None
        self.logger.debug("Membership cache hit", username=username)
        return list(entry.groups)

    async def resolve_groups(
        self,
        username: str,
        client: GitHubClient,
        bypass_cache: bool = False,
        credential_digest: Optional[str] = None,
    ) -> List[str]:
        """Return the groups for ``username``, from cache when possible.

        Raises ResolutionFailureError when the team listing cannot be
        fetched. A user without teams resolves to ``[username]``.
        """
        if not bypass_cache:
            groups = self.cached_groups(username, credential_digest)
            if groups is not None:
                return groups

        with self.metrics.time_operation("membership_resolution_duration_seconds"):
            memberships = await self.fetch_memberships(client)

        groups = self.build_groups(username, memberships)
        self.cache.set(username, groups, credential_digest)

        self.logger.info(
            "Memberships resolved",
            username=username,
            teams=len(memberships),
            groups=len(groups)
        )
        return groups

    async def fetch_memberships(self, client: GitHubClient) -> List[TeamMembership]:
        """Collect every page of the caller's teams."""
        try:
            page = await client.list_teams(per_page=self.page_size)
            self.metrics.record_page_fetched()
            memberships = list(page.items)
            pages = 1

            while page.has_next_page:
                if pages >= self.max_pages:
                    self.logger.error("Team listing did not terminate", pages=pages)
                    raise ResolutionFailureError(
                        f"Team listing exceeded {self.max_pages} pages",
                        details={"pages": pages}
                    )
                page = await client.next_page(page)
                self.metrics.record_page_fetched()
                memberships.extend(page.items)
                pages += 1

        except ExternalServiceError as e:
            self.logger.warning("Team listing failed", error=e.message)
            self.metrics.record_error("team_listing")
            raise ResolutionFailureError(details={"cause": e.message, **e.details}) from e

        return memberships

    def build_groups(self, username: str, memberships: List[TeamMembership]) -> List[str]:
        groups = [m.slug for m in memberships if self._in_scope(m)]
        groups.append(username)

        # Org pseudo-groups come from the unfiltered list
        if self.orgmode:
            groups.extend(organization_groups(memberships))

        return groups

    def _in_scope(self, membership: TeamMembership) -> bool:
        if not self.org:
            return True
        return membership.organization_login == self.org
