"""
Authenticator exposed to the host system.
"""

import secrets
import time
from typing import Callable, List, Optional

import httpx
from pydantic import BaseModel

from shared.config import GitHubAuthConfig, get_config
from shared.errors import (
    ErrorResponse,
    ExternalServiceError,
    GitHubAuthException,
    InvalidCredentialsError,
    ResolutionFailureError,
    UnsupportedAuthModeError,
    VerificationConflictError,
)
from shared.logging import configure_logging, get_logger, request_context
from shared.metrics import MetricsCollector, get_metrics_collector
from .cache.membership_cache import MembershipCache
from .cache.negative_cache import NegativeResultCache
from .github.client import GitHubClient
from .membership.resolver import MembershipResolver
from .validation.credentials import build_auth, credential_digest, fetch_identity, validate_mode

ClientFactory = Callable[[httpx.Auth], GitHubClient]


class AuthenticationResponse(BaseModel):
    """Outcome of an authentication attempt."""
    authenticated: bool
    groups: Optional[List[str]] = None
    error: Optional[ErrorResponse] = None


class VerificationResponse(BaseModel):
    """Outcome of a credential verification (add user)."""
    verified: bool
    error: Optional[ErrorResponse] = None


class GitHubAuthenticator:
    """Authenticates users against GitHub and resolves their teams.

    The negative-result cache and membership cache live as long as the
    authenticator. Every request gets a fresh GitHub client bound to the
    caller's credential.
    """

    def __init__(
        self,
        config: Optional[GitHubAuthConfig] = None,
        *,
        client_factory: Optional[ClientFactory] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or get_config()
        # Misconfigured mode must stop the service before it serves anything
        self.mode = validate_mode(self.config.mode)
        self.logger = get_logger("github_auth.authenticator")
        self.metrics = metrics or get_metrics_collector("github_auth")

        self.bad_users = NegativeResultCache()
        self.membership_cache = MembershipCache(
            ttl_seconds=self.config.cache_ttl_seconds,
            max_entries=self.config.cache_max_entries,
            clock=clock,
        )
        self.resolver = MembershipResolver(
            self.membership_cache,
            org=self.config.org,
            orgmode=self.config.orgmode,
            page_size=self.config.client.page_size,
            max_pages=self.config.client.max_pages,
            metrics=self.metrics,
        )

        self._client_factory = client_factory or self._default_client_factory
        self._digest_key = secrets.token_bytes(32)

    def _default_client_factory(self, auth: httpx.Auth) -> GitHubClient:
        return GitHubClient(self.config.client, auth)

    def _client_for(self, username: str, credential: str) -> GitHubClient:
        return self._client_factory(build_auth(self.mode, username, credential))

    async def authenticate(self, username: str, credential: str) -> List[str]:
        """Authenticate ``username`` and return its groups.

        Raises InvalidCredentialsError for known bad users or missing input,
        and ResolutionFailureError when GitHub rejects the team listing.
        """
        with request_context():
            return await self._authenticate(username, credential)

    async def _authenticate(self, username: str, credential: str) -> List[str]:
        log = self.logger.bind(username=username)

        if not username or not credential:
            self.metrics.record_authentication("rejected")
            raise InvalidCredentialsError("Username and credential are required.")

        # Skip GitHub entirely for users whose credential last failed
        if username in self.bad_users:
            log.info("Authentication short-circuited for bad user")
            self.metrics.record_authentication("rejected")
            raise InvalidCredentialsError()

        digest = credential_digest(self._digest_key, username, credential)
        groups = self.resolver.cached_groups(username, digest)
        if groups is None:
            async with self._client_for(username, credential) as client:
                try:
                    groups = await self.resolver.resolve_groups(
                        username, client, bypass_cache=True, credential_digest=digest
                    )
                except ResolutionFailureError as e:
                    log.warning("Authentication failed", error=e.message)
                    self.metrics.record_authentication("failure")
                    raise

        log.info("User authenticated", groups=len(groups))
        self.metrics.record_authentication("success")
        return groups

    async def verify_credential(self, username: str, credential: str) -> bool:
        """Confirm GitHub accepts the credential.

        On success the user is cleared from the bad-user list; on failure it
        is added and VerificationConflictError is raised.
        """
        with request_context():
            return await self._verify_credential(username, credential)

    async def _verify_credential(self, username: str, credential: str) -> bool:
        log = self.logger.bind(username=username)

        if not username or not credential:
            if username:
                self.bad_users.add(username)
            self.metrics.record_verification("failure")
            raise VerificationConflictError(details={"reason": "missing username or credential"})

        async with self._client_for(username, credential) as client:
            try:
                identity = await fetch_identity(client)
            except ExternalServiceError as e:
                # Remember the failure so authenticate() does not call GitHub again
                self.bad_users.add(username)
                log.warning("Credential verification failed", error=e.message)
                self.metrics.record_verification("failure")
                raise VerificationConflictError(details={"cause": e.message, **e.details}) from e

        self.bad_users.discard(username)
        log.info("Credential verified", login=identity.get("login"))
        self.metrics.record_verification("success")
        return True

    async def check_authentication(self, username: str, credential: str) -> AuthenticationResponse:
        """Host-facing wrapper around authenticate() that reports errors instead of raising.

        UnsupportedAuthModeError still propagates.
        """
        try:
            groups = await self.authenticate(username, credential)
        except UnsupportedAuthModeError:
            raise
        except GitHubAuthException as e:
            return AuthenticationResponse(authenticated=False, error=e.to_response())
        return AuthenticationResponse(authenticated=True, groups=groups)

    async def check_credential(self, username: str, credential: str) -> VerificationResponse:
        """Host-facing wrapper around verify_credential()."""
        try:
            verified = await self.verify_credential(username, credential)
        except UnsupportedAuthModeError:
            raise
        except GitHubAuthException as e:
            return VerificationResponse(verified=False, error=e.to_response())
        return VerificationResponse(verified=verified)


def create_authenticator(config: Optional[GitHubAuthConfig] = None, **overrides) -> GitHubAuthenticator:
    """Load configuration, set up logging, and build an authenticator."""
    config = config or get_config(**overrides)
    configure_logging("github_auth", config.log_level)
    return GitHubAuthenticator(config)
