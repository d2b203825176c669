"""
Services Package
Business logic layer for YouTube comment sentiment analysis
"""

from .base_service import BaseService
from .exceptions import (
    # Base
    ServiceError,

    # Validation Errors
    ValidationError,
    InvalidURLError,

    # External Service Errors
    ExternalServiceError,
    YouTubeAPIError,
    InferenceServiceError,

    # Processing Errors
    AnalysisError,
    RetryExhaustedError,

    # Configuration Errors
    ConfigurationError,

    # Utility Functions
    is_retryable_error,
    error_to_http_status,
)
from .retry import RetryPolicy, linear_backoff, overload_predicate
from .analysis_service import SentimentAnalysisService
from .comment_filter import filter_comments, flatten_comments, sentiment_breakdown

__all__ = [
    # Base Classes
    "BaseService",

    # Services
    "SentimentAnalysisService",
    "RetryPolicy",
    "linear_backoff",
    "overload_predicate",
    "filter_comments",
    "flatten_comments",
    "sentiment_breakdown",

    # Base Exception
    "ServiceError",

    # Validation Errors
    "ValidationError",
    "InvalidURLError",

    # External Service Errors
    "ExternalServiceError",
    "YouTubeAPIError",
    "InferenceServiceError",

    # Processing Errors
    "AnalysisError",
    "RetryExhaustedError",

    # Configuration Errors
    "ConfigurationError",

    # Utility Functions
    "is_retryable_error",
    "error_to_http_status",
]

# Package metadata
__version__ = "0.1.0"
__description__ = "Service layer for YouTube comment sentiment analysis"
