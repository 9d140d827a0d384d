# trip_ingest/utils/exceptions.py
"""
Custom exceptions for the trip record bulk uploader
"""

from typing import Optional, Dict, Any, List


class PipelineError(Exception):
    """
    Base exception for all pipeline errors

    Carries structured context so failures can be logged and
    summarised without losing the original cause
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize pipeline error

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code for categorization
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context,
            'cause': str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        """String representation of the error"""
        base_msg = f"{self.error_code}: {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" (Context: {context_str})"
        if self.cause:
            base_msg += f" (Caused by: {self.cause})"
        return base_msg


class ConfigurationError(PipelineError):
    """
    Raised when the configuration cannot be loaded

    Examples:
    - Configuration file missing or not valid JSON
    - Required keys absent
    - Column indices that are not non-negative integers
    """
    pass


class ExtractionError(PipelineError):
    """
    Raised when the input file cannot be read

    Examples:
    - Input file missing or unreadable
    - Header row missing
    - Malformed delimited record mid-file
    """
    pass


class TranslationError(PipelineError):
    """Raised when a single raw row cannot be turned into a record"""
    pass


class TimeParseError(TranslationError):
    """Raised when a pickup/dropoff time does not match the configured format"""
    pass


class CoordinateParseError(TranslationError):
    """Raised when a latitude/longitude column is not a number"""
    pass


class MalformedRowError(TranslationError):
    """Raised when a row is shorter than the configured column indices require"""
    pass


class EncodingError(PipelineError):
    """Raised when a record cannot be serialized into the bulk body"""
    pass


class UploadError(PipelineError):
    """
    Raised when a bulk request cannot be delivered

    Examples:
    - Connection refused or reset
    - DNS failures
    - Invalid endpoint URL
    """
    pass


class ErrorCollector:
    """
    Collects recoverable errors across a run

    Every error is counted; only the first ``max_stored`` are kept
    so a file full of bad rows does not grow memory without bound
    """

    def __init__(self, max_stored: int = 100):
        self.max_stored = max_stored
        self.errors: List[PipelineError] = []
        self._error_count = 0
        self._counts_by_type: Dict[str, int] = {}

    def add_error(self, error: PipelineError, context: Optional[Dict[str, Any]] = None):
        """Add an error to the collection, merging in extra context"""
        if context:
            error.context.update(context)

        self._error_count += 1
        error_type = error.__class__.__name__
        self._counts_by_type[error_type] = self._counts_by_type.get(error_type, 0) + 1

        if len(self.errors) < self.max_stored:
            self.errors.append(error)

    @property
    def has_errors(self) -> bool:
        """Check if any errors were collected"""
        return self._error_count > 0

    @property
    def error_count(self) -> int:
        """Get total number of errors, including ones not stored"""
        return self._error_count

    def count_of(self, error_type: type) -> int:
        """Number of collected errors of exactly ``error_type``"""
        return self._counts_by_type.get(error_type.__name__, 0)

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of collected errors"""
        return {
            'error_count': self.error_count,
            'errors_by_type': dict(self._counts_by_type),
            'errors': [error.to_dict() for error in self.errors]
        }
