"""
Custom exceptions for the Tiered Job Feed
Organized by pipeline stage with detailed error information
"""

from typing import Any, Optional


class FeedException(Exception):
    """Base exception for all job feed errors"""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        self.recoverable = recoverable
        self.status_code = status_code or (400 if recoverable else 500)
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# ===========================================
# Source Exceptions
# ===========================================


class SourceException(FeedException):
    """Base exception for job-board source errors"""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.source = source
        if source:
            self.details["source"] = source


class SourceFetchError(SourceException):
    """Source request timed out, failed, or returned a non-2xx status"""

    def __init__(self, source: str, reason: str, status: Optional[int] = None):
        super().__init__(
            message=f"Fetch failed for {source}: {reason}",
            source=source,
            code="SOURCE_FETCH_ERROR",
            details={"reason": reason, "status": status},
            recoverable=True,
        )
        self.status = status


class MalformedPayloadError(SourceException):
    """Source responded with a payload that does not match its schema"""

    def __init__(self, source: str, reason: str):
        super().__init__(
            message=f"Malformed payload from {source}: {reason}",
            source=source,
            code="SOURCE_MALFORMED_PAYLOAD",
            details={"reason": reason},
            recoverable=True,
        )


# ===========================================
# Pipeline Exceptions
# ===========================================


class AggregationError(FeedException):
    """Aggregation pass could not complete"""

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "AGGREGATION_ERROR")
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class PersistenceError(FeedException):
    """Job store read or write failed"""

    def __init__(self, operation: str, error: str):
        super().__init__(
            message=f"Persistence failed during {operation}",
            code="PERSISTENCE_ERROR",
            details={"operation": operation, "error": error},
            recoverable=False,
        )
        self.operation = operation


# ===========================================
# Feed Exceptions
# ===========================================


class FeedQueryError(FeedException):
    """Feed query could not be served"""

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "FEED_QUERY_ERROR")
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class InvalidFilterError(FeedQueryError):
    """Feed filter value is not acceptable"""

    def __init__(self, field: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid value for '{field}': {reason}",
            code="INVALID_FILTER",
            details={"field": field, "value": str(value), "reason": reason},
            recoverable=True,
            status_code=422,
        )


# ===========================================
# Configuration Exceptions
# ===========================================


class ConfigurationError(FeedException):
    """Configuration error"""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details={"config_key": config_key} if config_key else {},
            recoverable=False,
        )
