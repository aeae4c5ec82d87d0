"""Error taxonomy for the layout sidecar.

Every failure a request can hit is a ``LayoutServiceError`` carrying the
HTTP status it maps to at the request boundary.
"""

from typing import Optional


class LayoutServiceError(Exception):
    """Base class for all request-level failures."""

    status_code = 400
    default_message = "layout_failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class GraphValidationError(LayoutServiceError):
    """Raised when a layout request does not match the graph schema."""

    def __init__(self, message: str, location: str = ""):
        self.location = location
        super().__init__(f"{location}: {message}" if location else message)


class UnauthorizedError(LayoutServiceError):
    """Raised when the shared-secret header does not match."""

    status_code = 401
    default_message = "unauthorized"


class LayoutTimeoutError(LayoutServiceError):
    """Raised when the engine misses its deadline."""

    default_message = "layout_timeout"

    def __init__(self, timeout_ms: Optional[int] = None):
        self.timeout_ms = timeout_ms
        super().__init__()


class EngineError(LayoutServiceError):
    """Raised when the layout engine itself rejects or fails."""


class EngineUnavailableError(EngineError):
    """Raised when an engine cannot be constructed or reached."""


class RequestTooLargeError(LayoutServiceError):
    """Raised when the request body exceeds the configured limit."""

    status_code = 413
    default_message = "request_too_large"
