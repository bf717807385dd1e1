"""
Shared error handling for the GitHub auth service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    status_code: int
    details: Dict[str, Any] = {}


class GitHubAuthException(Exception):
    """Base exception for the GitHub auth service."""

    status_code: int = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            status_code=self.status_code,
            details=self.details
        )


class InvalidCredentialsError(GitHubAuthException):
    """Username/credential pair rejected; access denied."""

    status_code = 403

    def __init__(self, message: str = "Bad Username/Password.", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_CREDENTIALS", message, details)


class VerificationConflictError(GitHubAuthException):
    """Credential could not be verified while adding a user."""

    status_code = 409

    def __init__(self, message: str = "Bad Username/Password", details: Optional[Dict[str, Any]] = None):
        super().__init__("VERIFICATION_CONFLICT", message, details)


class UnsupportedAuthModeError(GitHubAuthException):
    """Configured validation mode is unknown. Not a per-request failure."""

    status_code = 500

    def __init__(self, mode: str, details: Optional[Dict[str, Any]] = None):
        self.mode = mode
        super().__init__(
            "UNSUPPORTED_AUTH_MODE",
            f"Unsupported authentication mode: {mode!r}",
            details or {"mode": mode},
        )


class ResolutionFailureError(GitHubAuthException):
    """Team membership could not be resolved after the credential was accepted locally."""

    status_code = 403

    def __init__(self, message: str = "Could not resolve team memberships", details: Optional[Dict[str, Any]] = None):
        super().__init__("RESOLUTION_FAILURE", message, details)


class ExternalServiceError(GitHubAuthException):
    """External service errors."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)
