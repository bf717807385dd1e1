"""
Cache package for the authenticator.

Provides the in-process membership cache (TTL plus LRU bound) and the
negative-result cache of usernames whose credentials last failed.
"""

from .membership_cache import MembershipCache, MembershipCacheEntry
from .negative_cache import NegativeResultCache

__all__ = ["MembershipCache", "MembershipCacheEntry", "NegativeResultCache"]
