"""
Shared utilities for the GitHub auth service.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- test_helpers: Fake GitHub API and payload factories for tests

Do not import from service packages into shared/.
"""
