# core/errors.py

from typing import Any, Optional

from fastapi import HTTPException


class ApiError(Exception):
    """
    Raised by the platform API client for any failed call.
    status_code is the remote HTTP status (503 when the API was unreachable).
    """

    def __init__(self, status_code: int, detail: str, payload: Any = None):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.payload = payload


class AuthError(Exception):
    """Login failed, or the logged-in user may not use the console."""

    def __init__(self, detail: str, status_code: int = 401):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


def extract_api_error(error: Exception) -> str:
    """
    Safely extract readable details from platform API errors.
    Handles:
      • ApiError with a JSON body ({"message": ...} / {"detail": ...})
      • ApiError without a body
      • Generic Python exceptions
    """

    # Case 1: remote body carries a message
    payload = getattr(error, "payload", None)
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value

    # Case 2: ApiError / AuthError detail
    detail = getattr(error, "detail", None)
    if isinstance(detail, str) and detail:
        return detail

    # Case 3: plain string fallback
    text = str(error)
    return text or "Unknown platform API error"


def handle_api_error(error: Exception, operation: str = "Platform API call", status_code: Optional[int] = None) -> HTTPException:
    """
    Handle platform API errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what failed (e.g., "Failed to load roles")
        status_code: Force a status code instead of deriving it from the error

    Returns:
        HTTPException with standardized error message
    """
    from core.logging_config import logger

    error_detail = extract_api_error(error)
    remote_status = getattr(error, "status_code", None)
    logger.error(f"{operation}: {error_detail} (remote status {remote_status})")

    if status_code is not None:
        return HTTPException(status_code=status_code, detail=f"{operation} failed")

    # Client-side mistakes keep their meaning; everything else is a bad gateway
    if remote_status == 404:
        return HTTPException(status_code=404, detail=f"{operation}: Resource not found")
    if remote_status in (400, 409, 422):
        return HTTPException(status_code=400, detail=f"{operation}: {error_detail}")
    if remote_status in (401, 403):
        return HTTPException(status_code=remote_status, detail=f"{operation}: {error_detail}")
    return HTTPException(status_code=502, detail=f"{operation} failed")
