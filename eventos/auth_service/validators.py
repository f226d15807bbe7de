"""
Request body validation for the authentication routes.

Each endpoint declares its input as a pydantic model. validate_* functions
run the model against the raw JSON body and, on failure, raise
ValidationError with one {field, message} entry per failing field.
Nothing here touches the database.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field
from pydantic import ValidationError as PydanticValidationError

from eventos.auth_service.errors import ValidationError

# --- MESSAGES PER FIELD ---
FIELD_MESSAGES = {
    "email": "Must be a valid email",
    "userName": "Username is required",
    "password": "Password must be at least 6 characters long",
    "role": "Role must be either organizer or attendee",
    "name": "Name is required",
}
MISSING_CREDENTIALS_MESSAGE = "Password or username is required"
PASSWORD_MIN_LENGTH = 6
CREDENTIAL_KEYS = ("password", "userName", "user_name")


def _bare_address(value: Any) -> Any:
    # EmailStr alone accepts "Name <addr>" and keeps only addr
    if isinstance(value, str) and ("<" in value or ">" in value or any(c.isspace() for c in value)):
        raise ValueError("email must be a bare address")
    return value


Email = Annotated[EmailStr, BeforeValidator(_bare_address)]


class _RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AttendeeRequest(_RequestModel):
    """Body of POST /attendee: registration with the role fixed to attendee."""

    email: Email
    user_name: str = Field(alias="userName", min_length=1)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    name: str = Field(min_length=1)
    phone: Optional[str] = None


class RegisterRequest(AttendeeRequest):
    """Body of POST /user."""

    role: Literal["attendee", "organizer"]
    organization: Optional[str] = None

    def user_fields(self, password_hash: str) -> Dict[str, Any]:
        return {
            "email": self.email,
            "user_name": self.user_name,
            "password": password_hash,
            "name": self.name,
            "role": self.role,
        }

    def profile_fields(self) -> Dict[str, Any]:
        fields = {"name": self.name, "phone": self.phone}
        if self.role == "organizer":
            fields["organization"] = self.organization
        return fields


class LoginRequest(_RequestModel):
    """Body of POST /login."""

    email: Email
    user_name: Optional[str] = Field(default=None, alias="userName")
    password: Optional[str] = None


Model = TypeVar("Model", bound=_RequestModel)


def _field_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    """Collapse pydantic's error list into one entry per field."""
    errors: List[Dict[str, str]] = []
    seen = set()
    for err in exc.errors():
        loc = err.get("loc") or ("body",)
        field = str(loc[0])
        message = FIELD_MESSAGES.get(field, err.get("msg", "Invalid value"))
        if field in seen:
            continue
        seen.add(field)
        errors.append({"field": field, "message": message})
    return errors


def _as_body(payload: Any) -> Dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


def _check(model: Type[Model], body: Dict[str, Any]) -> Tuple[Optional[Model], List[Dict[str, str]]]:
    try:
        return model.model_validate(body), []
    except PydanticValidationError as exc:
        return None, _field_errors(exc)


def _validate(model: Type[Model], payload: Any) -> Model:
    data, errors = _check(model, _as_body(payload))
    if errors:
        raise ValidationError(errors)
    return data


def validate_registration(payload: Any) -> RegisterRequest:
    return _validate(RegisterRequest, payload)


def validate_attendee(payload: Any) -> RegisterRequest:
    """Validate a POST /attendee body and return it as an attendee registration."""
    attendee = _validate(AttendeeRequest, payload)
    return RegisterRequest(role="attendee", **attendee.model_dump())


def validate_login(payload: Any) -> LoginRequest:
    """
    Validate a POST /login body.

    Field errors and the "password or username" rule are reported together,
    so an empty body yields both an email and a password entry.
    """
    body = _as_body(payload)
    data, errors = _check(LoginRequest, body)

    if not any(body.get(key) for key in CREDENTIAL_KEYS):
        if all(err["field"] != "password" for err in errors):
            errors.append({"field": "password", "message": MISSING_CREDENTIALS_MESSAGE})

    if errors:
        raise ValidationError(errors)
    return data
