from __future__ import annotations

from typing import Any, Dict, Optional


class ConnectionServiceError(Exception):
    """Base error for connection operations, shaped like an API error body."""

    code: str = "error"
    status: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class Unauthorized(ConnectionServiceError):
    code = "unauthorized"
    status = 401
    default_message = "Sign-in required"


class BadRequest(ConnectionServiceError):
    code = "validation_error"
    status = 400
    default_message = "Invalid request body"


class NotFound(ConnectionServiceError):
    code = "not_found"
    status = 404
    default_message = "Connection not found"


class DuplicateEmail(ConnectionServiceError):
    code = "duplicate_email"
    status = 409
    default_message = "A contact with this email already exists"


class ValidationFailed(ConnectionServiceError):
    code = "validation_error"
    status = 422
    default_message = "Validation failed"
