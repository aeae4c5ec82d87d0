"""Response envelopes for the HTTP surface."""

from typing import Any, Dict

from fastapi.responses import JSONResponse

from layout_sidecar.errors import LayoutServiceError


def error_body(message: str) -> Dict[str, Any]:
    """Create the single-field error payload.

    Args:
        message: Human-readable error message

    Returns:
        ``{"error": message}``
    """
    return {"error": message}


def error_response(error: LayoutServiceError) -> JSONResponse:
    """Render a service error as a JSON response with its status code."""
    return JSONResponse(status_code=error.status_code, content=error_body(error.message))
