"""
Error taxonomy shared by services and the HTTP layer.

Every failure is translated into one of these close to where it happens; the
exception handlers in `quiz_api.main` render them as a JSON error envelope.
"""
from typing import Any, Dict, Optional
from fastapi import status

class QuizAPIError(Exception):
    """Base class: a `kind` for callers and a human readable message."""

    kind = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message, "type": self.kind, "status_code": self.status_code}
        if self.details is not None:
            body["details"] = self.details
        return body

class AuthError(QuizAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED

class Unauthenticated(AuthError):
    kind = "unauthenticated"

    def __init__(self):
        super().__init__("Not authenticated")

class InvalidCredentials(AuthError):
    kind = "invalid_credentials"

    # Same message for unknown email and wrong password.
    def __init__(self):
        super().__init__("Invalid email or password")

class InvalidSession(AuthError):
    kind = "invalid_session"

    # Same message for unknown, revoked and expired sessions.
    def __init__(self):
        super().__init__("Invalid or expired session")

class NotFoundError(QuizAPIError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
        self.entity = entity

class ValidationError(QuizAPIError):
    kind = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, field: str, message: str):
        super().__init__(message, details=[{"field": field, "message": message}])
        self.field = field

class ConflictError(QuizAPIError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, constraint: str, message: Optional[str] = None):
        super().__init__(message or f"{constraint} already exists")
        self.constraint = constraint

class StoreError(QuizAPIError):
    kind = "store_error"

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)
