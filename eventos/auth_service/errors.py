"""
Error taxonomy for the authentication service.

Routes and workflows raise these; the gateway registers a Flask error
handler that turns any ApiError into a JSON response:

    {"error": <message>, "name": <error class name>, ...extra}
"""

from typing import Any, Dict, List, Optional


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.message, "name": self.name}
        payload.update({k: v for k, v in self.extra.items() if v is not None})
        return payload


class ValidationError(ApiError):
    """One or more fields failed validation. Carries every failing field."""

    status_code = 400

    def __init__(self, errors: List[Dict[str, str]], message: str = "Validation failed") -> None:
        super().__init__(message, errors=errors)
        self.errors = errors


class DuplicateKeyError(ApiError):
    status_code = 400

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message, field=field)
        self.field = field

    @classmethod
    def for_field(cls, field: str, value: Any) -> "DuplicateKeyError":
        label = "username" if field == "userName" else "Email"
        return cls(f"User already exists with the '{value}' {label}.", field=field)


class InvalidRoleError(ApiError):
    status_code = 400

    def __init__(self, role: Any) -> None:
        super().__init__(f"Invalid role: {role}", role=str(role))
        self.role = role


class NotFoundError(ApiError):
    status_code = 404


class AuthenticationError(ApiError):
    status_code = 401


class InternalError(ApiError):
    """
    Unexpected persistence or runtime failure.

    Only a one-line summary of the underlying cause reaches the client;
    the full traceback stays in the server log.
    """

    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message, cause=summarize_cause(cause))
        self.cause = cause


def summarize_cause(cause: Optional[BaseException]) -> Optional[str]:
    if cause is None:
        return None
    # SQLAlchemy wraps the DBAPI error; its first line is the useful part.
    text = str(getattr(cause, "orig", None) or cause).strip()
    first_line = text.splitlines()[0] if text else ""
    return f"{type(cause).__name__}: {first_line}" if first_line else type(cause).__name__


def format_error(error: BaseException) -> Dict[str, Any]:
    """
    Sanitized payload for any exception.

    ApiErrors render themselves; anything else becomes an InternalError
    payload with the exception's name and message as the cause summary.
    """
    if isinstance(error, ApiError):
        return error.to_dict()
    return InternalError("An unexpected error occurred.", cause=error).to_dict()
