"""
Custom exception hierarchy for proper error categorization and HTTP status mapping.

This module maps internal errors to appropriate HTTP status codes, clearly
distinguishing:
- User errors (400-level): Client sent bad data or asked for a missing session
- Server errors (500-level): A turn or the session store failed
- External errors (503): The generative model failed

Usage:
    from finviz_assistant.core.exceptions import NotFoundError, ExternalServiceError

    # Unknown session → 404 Not Found
    raise NotFoundError("Session not found.", session_id=session_id)

    # Model errors → 503 Service Unavailable (always caught by the agent fallbacks)
    raise ExternalServiceError("DashScope timeout", service="dashscope")
"""

from typing import Any


class AppError(Exception):
    """
    Base application error with HTTP status mapping.

    All custom exceptions inherit from this to enable consistent error handling.
    """

    # Default status code (subclasses override)
    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str, **context: Any):
        """
        Initialize error with message and optional context.

        Args:
            message: Human-readable error description
            **context: Additional key-value pairs for logging (e.g., session_id)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON response and structured logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "status_code": self.status_code,
            **self.context,
        }


# ===== 400-level: Client Errors =====


class ValidationError(AppError):
    """User provided invalid input (e.g., missing session id)."""

    status_code = 400
    error_type = "validation_error"


class NotFoundError(AppError):
    """Requested resource does not exist."""

    status_code = 404
    error_type = "not_found_error"


class RateLimitError(AppError):
    """User exceeded rate limit."""

    status_code = 429
    error_type = "rate_limit_error"


# ===== 500-level: Server Errors =====


class StorageError(AppError):
    """
    Session store operation failed (file write, Redis command).

    The chat service logs these and keeps serving from memory; they only
    reach the client when raised outside a turn.
    """

    status_code = 500
    error_type = "storage_error"


class ConfigurationError(AppError):
    """
    Application misconfigured (e.g., missing env vars, invalid settings).

    Should be caught during startup, not during request handling.
    """

    status_code = 500
    error_type = "configuration_error"


class TurnProcessingError(AppError):
    """
    A chat turn raised past every fallback.

    The session keeps everything persisted up to the failure, plus a bot
    message describing the error.
    """

    status_code = 500
    error_type = "turn_processing_error"


# ===== 502/503: External Service Errors =====


class ExternalServiceError(AppError):
    """
    External service unavailable or returned error.

    Examples:
        - DashScope model timeout
        - Quota exhausted
        - Empty completion

    Maps to 503 Service Unavailable (third-party problem, retry may help).
    """

    status_code = 503
    error_type = "external_service_error"

    def __init__(self, message: str, service: str, **context: Any):
        """
        Initialize with service name for easier debugging.

        Args:
            message: Error description
            service: Service identifier (e.g., "dashscope", "redis")
            **context: Additional context (e.g., model, timeout)
        """
        super().__init__(message, service=service, **context)
