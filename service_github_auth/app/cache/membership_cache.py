"""
In-process membership cache keyed by username.
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from shared.logging import get_logger


@dataclass(frozen=True)
class MembershipCacheEntry:
    """Resolved groups for one user."""
    groups: Tuple[str, ...]
    expires_at: float
    credential_digest: Optional[str] = None

    def is_valid(self, now: float) -> bool:
        return self.expires_at > now


class MembershipCache:
    """TTL cache of resolved groups with an LRU capacity bound.

    Expired entries are not removed on read; they stay until overwritten
    or evicted, and are reported as misses.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.time,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, MembershipCacheEntry]" = OrderedDict()
        self.logger = get_logger("github_auth.membership_cache")

    def get(self, username: str, credential_digest: Optional[str] = None) -> Optional[MembershipCacheEntry]:
        """Return the live entry for ``username``, or None.

        When ``credential_digest`` is given, an entry stored under another
        credential is a miss.
        """
        entry = self._entries.get(username)
        if entry is None:
            return None
        if not entry.is_valid(self._clock()):
            return None
        if credential_digest is not None and entry.credential_digest != credential_digest:
            return None
        self._entries.move_to_end(username)
        return entry

    def set(
        self,
        username: str,
        groups: Iterable[str],
        credential_digest: Optional[str] = None,
    ) -> MembershipCacheEntry:
        entry = MembershipCacheEntry(
            groups=tuple(groups),
            expires_at=self._clock() + self.ttl_seconds,
            credential_digest=credential_digest,
        )
        self._entries[username] = entry
        self._entries.move_to_end(username)

        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self.logger.debug("Membership cache entry evicted", username=evicted)

        return entry

    def invalidate(self, username: str) -> bool:
        return self._entries.pop(username, None) is not None

    def clear(self) -> None:
        self._entries.clear()
        self.logger.info("Membership cache cleared")

    def __contains__(self, username: object) -> bool:
        return username in self._entries

    def __len__(self) -> int:
        return len(self._entries)
