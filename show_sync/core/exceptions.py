"""
Exception classes for show-sync.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus an optional details
dictionary, so callers can log context without parsing strings.

Exception Hierarchy:
    ShowSyncError (base)
        ConfigError - Configuration file / environment issues
        CatalogError - Source catalog API issues
        CmsError - Destination CMS API issues
        UploadError - Image download / media upload issues
        IndexBuildError - Destination index could not be built
        RetryExhaustedError - All retry attempts of an operation failed
"""


class ShowSyncError(Exception):
    """
    Base exception for all show-sync errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., URLs, ids).

    Example:
        try:
            # some operation
        except ShowSyncError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional context.
                     Common keys include:
                     - 'url': URL that caused the error
                     - 'status_code': HTTP status returned by the API
                     - 'original_error': The underlying exception text
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(ShowSyncError):
    """
    Raised when the configuration is missing or invalid.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml has invalid YAML syntax
        - CMS credentials missing from both config.yaml and environment
        - Invalid field values (e.g., zero workers)
    """
    pass


class HttpStatusError(ShowSyncError):
    """
    Base for errors raised because an API answered with an unexpected status.

    Attributes:
        status_code: HTTP status code, or None when no response was read.
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        status_code: int | None = None
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class CatalogError(HttpStatusError):
    """
    Raised when the source catalog API fails.

    NON-CRITICAL: the page is logged and skipped, the run continues.

    Note:
        A 404 on a catalog page is NOT an error. It marks the end of the
        catalog and is reported by the fetcher as a None page.
    """
    pass


class CmsError(HttpStatusError):
    """
    Raised when the destination CMS API fails.

    Writes failing with this error are retried by the RetryPolicy.
    During root discovery and index construction it is fatal.
    """
    pass


class UploadError(ShowSyncError):
    """
    Raised when an image cannot be downloaded or uploaded as CMS media.

    NON-CRITICAL: the entity is still created/updated without an image.

    Example:
        raise UploadError(
            "Failed to download image",
            details={'url': 'https://static.tvmaze.com/...', 'status_code': 503}
        )
    """
    pass


class IndexBuildError(ShowSyncError):
    """
    Raised when the destination index cannot be built completely.

    This is a CRITICAL error. Reconciling against a partial index would
    re-create entities that already exist in the CMS.
    """
    pass


class RetryExhaustedError(ShowSyncError):
    """
    Raised by RetryPolicy.run() when every attempt failed.

    Attributes:
        attempts: Number of attempts that were made.
        last_error: The exception raised by the final attempt.
    """

    def __init__(self, attempts: int, last_error: BaseException, description: str = "") -> None:
        label = f"{description}: " if description else ""
        super().__init__(
            f"{label}all {attempts} retry attempts failed: {last_error}",
            details={"attempts": attempts, "original_error": str(last_error)}
        )
        self.attempts = attempts
        self.last_error = last_error
