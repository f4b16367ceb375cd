"""
Custom Exception Classes for the intake API.

Every error leaves the service as ``{"success": false, "message": ...}``;
these exceptions carry the status code and the user-facing message.
"""
from typing import Optional

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Exception raised when a submission fails validation."""

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class RateLimitError(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Too many submissions. Please wait a moment before trying again.",
        retry_after: Optional[int] = None,
    ):
        headers = {"Retry-After": str(retry_after)} if retry_after is not None else None
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=message, headers=headers)
