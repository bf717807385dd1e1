"""
Unit tests for the shared logging, metrics, and error helpers.
"""

import pytest

from shared.errors import (
    ExternalServiceError,
    InvalidCredentialsError,
    ResolutionFailureError,
    UnsupportedAuthModeError,
    VerificationConflictError,
)
from shared.logging import (
    add_correlation_context,
    add_service_context,
    redact_secrets,
    request_context,
    request_id_var,
)
from shared.metrics import MetricsCollector


class TestLoggingProcessors:

    def test_redact_secrets(self):
        event = {"event": "login", "credential": "ghp_x", "password": "pw", "username": "octocat"}

        result = redact_secrets(None, "info", event)

        assert result["credential"] == "***"
        assert result["password"] == "***"
        assert result["username"] == "octocat"

    def test_request_id_added_to_events(self):
        with request_context() as request_id:
            event = add_correlation_context(None, "info", {"event": "x"})
            assert event["request_id"] == request_id

        assert "request_id" not in add_correlation_context(None, "info", {"event": "x"})

    def test_nested_request_context_keeps_outer_id(self):
        with request_context("outer") as outer:
            with request_context() as inner:
                assert inner == outer == "outer"
            assert request_id_var.get() == "outer"

        assert request_id_var.get() is None

    def test_service_from_logger_name(self):
        event = add_service_context(None, "info", {"logger": "github_auth.resolver"})

        assert event["service"] == "github_auth"


class TestErrors:

    @pytest.mark.parametrize("error,code,status", [
        (InvalidCredentialsError(), "INVALID_CREDENTIALS", 403),
        (VerificationConflictError(), "VERIFICATION_CONFLICT", 409),
        (UnsupportedAuthModeError("oauth"), "UNSUPPORTED_AUTH_MODE", 500),
        (ResolutionFailureError(), "RESOLUTION_FAILURE", 403),
        (ExternalServiceError("github"), "EXTERNAL_SERVICE_ERROR", 502),
    ])
    def test_to_response(self, error, code, status):
        response = error.to_response()

        assert response.code == code
        assert response.status_code == status
        assert response.trace_id is None

    def test_unsupported_mode_details(self):
        error = UnsupportedAuthModeError("oauth")

        assert error.details == {"mode": "oauth"}
        assert "oauth" in error.message


class TestMetricsCollector:

    def test_collectors_do_not_share_series(self):
        first = MetricsCollector("github_auth")
        second = MetricsCollector("github_auth")

        first.record_authentication("success")

        assert first.get_sample_value("authentications_total", {"status": "success"}) == 1
        assert second.get_sample_value("authentications_total", {"status": "success"}) is None

    def test_time_operation_observes_histogram(self):
        metrics = MetricsCollector("github_auth")

        with metrics.time_operation("membership_resolution_duration_seconds"):
            pass

        assert metrics.get_sample_value("membership_resolution_duration_seconds_count") == 1
        assert metrics.get_metric("membership_resolution_duration_seconds") is not None

    def test_record_error(self):
        metrics = MetricsCollector("github_auth")

        metrics.record_error("team_listing")

        assert metrics.get_sample_value("errors_total", {"error_type": "team_listing", "service": "github_auth"}) == 1
