"""
Base Service
Shared logging, validation and caching helpers for services
"""

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from yt_sentiment.services.exceptions import AnalysisError, ServiceError, ValidationError


class BaseService(ABC):
    """
    Base class for services

    Provides:
    - Namespaced logger per service
    - Cache key building and cache access
    - Input validation helpers
    - Error wrapping
    """

    def __init__(self, cache=None, config=None):
        self.cache = cache
        self.config = config
        self.logger = logging.getLogger(f"yt_sentiment.services.{self.get_service_name()}")

    @abstractmethod
    def get_service_name(self) -> str:
        """Short name used for logging"""

    # ========================================================================
    # Logging
    # ========================================================================

    def log_debug(self, message: str) -> None:
        self.logger.debug(message)

    def log_info(self, message: str) -> None:
        self.logger.info(message)

    def log_warning(self, message: str) -> None:
        self.logger.warning(message)

    def log_error(self, message: str, error: Optional[BaseException] = None) -> None:
        if error is not None:
            self.logger.error(f"{message}: {error}")
        else:
            self.logger.error(message)

    # ========================================================================
    # Caching
    # ========================================================================

    def get_cache_key(self, namespace: str, identifier: str) -> str:
        """Build a namespaced cache key, e.g. ``video_abc12345678``"""
        return f"{namespace}_{identifier}"

    def get_from_cache(self, key: str) -> Optional[Any]:
        """Copy of the cached value, so callers cannot alter the stored entry"""
        if self.cache is None:
            return None
        return copy.deepcopy(self.cache.lookup(key))

    def set_in_cache(self, key: str, value: Any) -> None:
        """Store a copy of ``value``, detached from the one handed to the caller"""
        if self.cache is not None:
            self.cache.store(key, copy.deepcopy(value))

    # ========================================================================
    # Validation
    # ========================================================================

    def validate_required(self, value: Any, field_name: str) -> None:
        if value is None or (isinstance(value, str) and not value):
            raise ValidationError(f"{field_name} is required", field=field_name)

    # ========================================================================
    # Error Handling
    # ========================================================================

    def handle_error(
        self,
        error: Exception,
        operation: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> ServiceError:
        """
        Log an error and convert it to a ServiceError

        Service errors pass through unchanged; anything else is wrapped in
        AnalysisError so callers only ever see the service taxonomy.
        """
        self.log_error(f"{operation} failed (context={context or {}})", error=error)

        if isinstance(error, ServiceError):
            return error

        return AnalysisError(
            f"{operation} failed: {error}",
            {"operation": operation, **(context or {})},
        )
