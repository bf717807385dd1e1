"""
Membership resolution package.
"""

from .resolver import MembershipResolver, organization_groups

__all__ = ["MembershipResolver", "organization_groups"]
