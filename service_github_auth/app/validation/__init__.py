"""
Credential validation package.

Turns the configured auth mode plus a caller's credential into an httpx
auth object and asks GitHub to confirm the credential is accepted.
"""

from .credentials import TokenAuth, build_auth, credential_digest, fetch_identity, validate_mode

__all__ = ["TokenAuth", "build_auth", "credential_digest", "fetch_identity", "validate_mode"]
