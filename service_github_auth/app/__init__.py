"""
GitHub team authentication package.

Authenticates a username/credential pair against GitHub and resolves the
caller's team memberships into authorization groups for a host system.

- app.authenticator: Entry points used by the host (authenticate, verify).
- app.github: Async GitHub REST client, one instance per request.
- app.validation: Credential handling (auth mode, identity check).
- app.membership: Paginated team listing and group-name transformation.
- app.cache: Membership TTL cache and the bad-credential cache.

Design notes:
- Module import must not perform network calls.
- Use the shared/ utilities for logging, metrics, config, and errors.
- Never share a GitHub client between requests; each request gets its
  own client bound to its own credential.
"""
