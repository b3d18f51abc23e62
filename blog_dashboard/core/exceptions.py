"""Custom exceptions for the blog dashboard data layer."""


class CMSError(Exception):
    """Base exception for CMS access errors."""

    def __init__(self, message: str, operation: str = "unknown") -> None:
        """Initialize error.

        Args:
            message: Error message
            operation: Operation that failed (e.g. "fetch", "create")
        """
        self.operation = operation
        super().__init__(f"[{operation}] {message}")


class DocumentStoreError(CMSError):
    """Raised when the remote document store returns an error response."""

    def __init__(
        self,
        message: str,
        operation: str = "unknown",
        status_code: int = 0,
        response_body: str = "",
    ) -> None:
        """Initialize error.

        Args:
            message: Error message
            operation: Operation that failed
            status_code: HTTP status code (0 when no response was received)
            response_body: Raw response body, if any
        """
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, operation=operation)


class AuthenticationError(DocumentStoreError):
    """Raised on 401/403 responses."""

    pass


class NotFoundError(DocumentStoreError):
    """Raised on 404 responses."""

    pass


class RateLimitError(DocumentStoreError):
    """Raised when the store keeps throttling after all retries."""

    def __init__(
        self,
        message: str,
        operation: str = "unknown",
        retry_after: int | None = None,
    ) -> None:
        """Initialize error.

        Args:
            message: Error message
            operation: Operation that failed
            retry_after: Seconds to wait before retrying
        """
        self.retry_after = retry_after
        super().__init__(message, operation=operation, status_code=429)


class TimeoutError(CMSError):
    """Raised when a request to the store times out."""

    pass


class DemoModeError(CMSError):
    """Raised when a mutation is attempted while running on demo data."""

    pass


class StorageError(Exception):
    """Raised when the local key-value storage cannot be written."""

    pass
