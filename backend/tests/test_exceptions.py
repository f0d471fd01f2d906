"""
Unit tests for custom exception hierarchy.

Tests exception mapping, status codes, and error serialization including:
- Base AppError functionality (to_dict, context handling)
- Client errors (400-level): ValidationError, NotFoundError, RateLimitError
- Server errors (500-level): StorageError, ConfigurationError, TurnProcessingError
- External service errors (503): ExternalServiceError with service context
"""

import pytest

from finviz_assistant.core.exceptions import (
    AppError,
    ConfigurationError,
    ExternalServiceError,
    NotFoundError,
    RateLimitError,
    StorageError,
    TurnProcessingError,
    ValidationError,
)

# ===== Base AppError Tests =====


class TestAppError:
    """Test base AppError functionality"""

    def test_create_app_error(self):
        """Test creating basic AppError"""
        # Act
        error = AppError("Something went wrong")

        # Assert
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.status_code == 500  # Default
        assert error.error_type == "internal_error"

    def test_app_error_with_context(self):
        """Test AppError with additional context"""
        error = AppError("Session operation failed", session_id="abc", action="delete")

        assert error.context == {"session_id": "abc", "action": "delete"}

    def test_app_error_to_dict(self):
        """Test AppError serialization to dict"""
        error = AppError("Error occurred", session_id="abc")

        assert error.to_dict() == {
            "error_type": "internal_error",
            "message": "Error occurred",
            "status_code": 500,
            "session_id": "abc",
        }


# ===== Status Code Mapping =====


class TestStatusCodes:
    """Each subclass maps to its HTTP status and error_type"""

    @pytest.mark.parametrize(
        "error_cls, status_code, error_type",
        [
            (ValidationError, 400, "validation_error"),
            (NotFoundError, 404, "not_found_error"),
            (RateLimitError, 429, "rate_limit_error"),
            (StorageError, 500, "storage_error"),
            (ConfigurationError, 500, "configuration_error"),
            (TurnProcessingError, 500, "turn_processing_error"),
        ],
    )
    def test_status_code_mapping(self, error_cls, status_code, error_type):
        error = error_cls("boom")

        assert isinstance(error, AppError)
        assert error.status_code == status_code
        assert error.error_type == error_type
        assert error.to_dict()["status_code"] == status_code

    def test_not_found_keeps_session_context(self):
        error = NotFoundError("Session not found.", session_id="missing")

        assert error.to_dict()["session_id"] == "missing"


# ===== External Service Errors =====


class TestExternalServiceError:
    """Test 503 errors carrying the failing service"""

    def test_service_in_context(self):
        error = ExternalServiceError("DashScope timeout", service="dashscope", model="qwen-plus")

        assert error.status_code == 503
        assert error.error_type == "external_service_error"
        assert error.context == {"service": "dashscope", "model": "qwen-plus"}

    def test_can_be_caught_as_app_error(self):
        with pytest.raises(AppError):
            raise ExternalServiceError("quota exhausted", service="dashscope")
