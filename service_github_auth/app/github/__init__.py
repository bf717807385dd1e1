"""
GitHub client package.

Wraps the small slice of the GitHub REST API the authenticator needs:
the identity check (`GET /user`) and the paginated team listing
(`GET /user/teams`, followed through `Link: rel="next"`).
"""

from .client import GitHubClient, TeamMembership, TeamPage

__all__ = ["GitHubClient", "TeamMembership", "TeamPage"]
