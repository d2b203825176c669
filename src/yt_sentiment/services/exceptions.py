"""
Service Exceptions
Error taxonomy shared by the service layer and the HTTP API
"""

from typing import Any, Dict, Iterable, Optional

DEFAULT_OVERLOAD_MARKERS = ("503", "overloaded")


# ============================================================================
# Base Exception
# ============================================================================


class ServiceError(Exception):
    """Base class for every error raised by the service layer"""

    error_code = "service_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error for API responses"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(ServiceError):
    """Invalid caller input"""

    error_code = "validation_error"

    def __init__(
        self, message: str, field: Optional[str] = None, value: Any = None
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """No video or channel identifier could be extracted from a URL"""

    error_code = "invalid_url"

    def __init__(self, url: str, kind: str = "video"):
        super().__init__(f"Invalid YouTube {kind} URL", field=f"{kind}Url", value=url)
        self.url = url
        self.kind = kind


# ============================================================================
# External Service Errors
# ============================================================================


class ExternalServiceError(ServiceError):
    """An upstream API failed"""

    error_code = "external_service_error"

    def __init__(
        self,
        service_name: str,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {"service": service_name}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.service_name = service_name
        self.status_code = status_code
        self.original_error = original_error


class YouTubeAPIError(ExternalServiceError):
    """YouTube Data API request failed"""

    error_code = "youtube_api_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__("youtube", message, status_code, original_error)
        self.reason = reason
        if reason:
            self.details["reason"] = reason


class InferenceServiceError(ExternalServiceError):
    """Inference provider call failed; the message preserves the upstream one"""

    error_code = "inference_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__("gemini", message, status_code, original_error)


# ============================================================================
# Processing Errors
# ============================================================================


class AnalysisError(ServiceError):
    """Analysis flow could not produce a result"""

    error_code = "analysis_error"


class RetryExhaustedError(ServiceError):
    """Every attempt of a retried operation failed with a retryable error"""

    error_code = "retry_exhausted"

    def __init__(self, attempts: int, last_error: BaseException):
        super().__init__(
            f"Gave up after {attempts} attempts: {last_error}",
            {"attempts": attempts},
        )
        self.attempts = attempts
        self.last_error = last_error


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(ServiceError):
    """Required configuration is missing or invalid"""

    error_code = "configuration_error"


# ============================================================================
# Utility Functions
# ============================================================================


def is_retryable_error(
    error: BaseException, markers: Iterable[str] = DEFAULT_OVERLOAD_MARKERS
) -> bool:
    """
    Check whether an inference error signals transient overload

    Only the error message is inspected, so the check works the same for
    wrapped provider errors and raw client exceptions.
    """
    message = str(error)
    return any(marker in message for marker in markers)


def error_to_http_status(error: ServiceError) -> int:
    """Map a service error to the HTTP status the API returns"""
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, ConfigurationError):
        return 500
    if isinstance(error, YouTubeAPIError) and error.status_code == 404:
        return 404
    if isinstance(error, ExternalServiceError):
        if error.status_code in (429, 503):
            return 503
        return 502
    return 500
