"""
Usernames whose credentials failed verification.
"""

from typing import Set

from shared.logging import get_logger


class NegativeResultCache:
    """Set of usernames known to fail validation since their last success.

    Entries never expire; a username leaves the set only when its
    credential is verified again.
    """

    def __init__(self):
        self._usernames: Set[str] = set()
        self.logger = get_logger("github_auth.negative_cache")

    def add(self, username: str) -> None:
        if username not in self._usernames:
            self._usernames.add(username)
            self.logger.info("User marked as bad", username=username)

    def discard(self, username: str) -> None:
        if username in self._usernames:
            self._usernames.discard(username)
            self.logger.info("User cleared from bad list", username=username)

    def clear(self) -> None:
        self._usernames.clear()

    def __contains__(self, username: object) -> bool:
        return username in self._usernames

    def __len__(self) -> int:
        return len(self._usernames)
