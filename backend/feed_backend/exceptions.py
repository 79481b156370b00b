"""
Feed Backend — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions, each carrying an explicit HTTP
       status, a message, and an optional data payload.
Why:   A single error translator (registered in main.py) matches these
       classes and renders the `{ message, data }` envelope. Routes and
       services raise; they never build error responses themselves.
How:   Each subclass fixes a default status code. `data` is returned to
       the client; `context` is logged server-side only.

Exception Hierarchy:
    FeedError (base)
    ├── ValidationError          → 422 Unprocessable Entity
    ├── PersistenceError         → 500 (or the attached status)
    ├── UnsupportedImageError    → 415 Unsupported Media Type
    ├── ImageStorageError        → 500 Internal Server Error
    ├── AuthNotImplementedError  → 501 Not Implemented
    └── UnhandledError           → 500 (wraps anything else at the boundary)
"""

from typing import Any, Dict, List, Optional


class FeedError(Exception):
    """
    Base exception for all feed application errors.

    Attributes:
        message:      User-facing error description (returned in the envelope)
        status_code:  HTTP status used by the error translator
        data:         Optional payload returned to the client
        context:      Additional debug info (logged but NOT returned)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        status_code: Optional[int] = None,
        data: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.data = data
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(FeedError):
    """
    Raised when request fields fail validation.

    HTTP:    422 Unprocessable Entity
    Payload: list of per-field errors, rendered under `errors`:
        {
            "message": "Validation failed, entered data is incorrect.",
            "errors": [
                {"type": "field", "value": "", "msg": "...", "path": "title", "location": "body"}
            ]
        }
    """

    status_code = 422

    def __init__(
        self,
        errors: List[Dict[str, Any]],
        message: str = "Validation failed, entered data is incorrect.",
    ):
        super().__init__(message=message, data=errors)

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return self.data


class PersistenceError(FeedError):
    """
    Raised when the post store is unavailable or a write fails.

    HTTP:    500 unless a status was attached by the caller
    Recovery: None. The session is rolled back and the request fails;
              callers retry on their own.
    """

    def __init__(
        self,
        message: str = "The post store is unavailable",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=status_code, context=context)


class UnsupportedImageError(FeedError):
    """
    Raised for non-image uploads when IMAGE_REJECT_UNSUPPORTED is enabled.

    HTTP:    415 Unsupported Media Type
    """

    status_code = 415

    def __init__(self, content_type: Optional[str], allowed: List[str]):
        super().__init__(
            message=f"File type '{content_type}' is not supported. Allowed: {', '.join(allowed)}",
            data={"contentType": content_type, "allowed": allowed},
        )


class ImageStorageError(FeedError):
    """
    Raised when an accepted image cannot be written to the images directory.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Failed to save uploaded image",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthNotImplementedError(FeedError):
    """Answer for the placeholder /auth routes."""

    status_code = 501

    def __init__(self, action: str):
        super().__init__(
            message=f"Authentication action '{action}' is not available",
            data={"action": action},
        )


class UnhandledError(FeedError):
    """
    Wraps any exception that is not a FeedError at the error boundary.

    HTTP:    500 Internal Server Error
    The original message is passed through verbatim.
    """

    def __init__(self, original: BaseException):
        super().__init__(
            message=str(original) or type(original).__name__,
            context={"error_type": type(original).__name__},
        )
        self.original = original
