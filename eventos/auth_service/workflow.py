"""
Registration and login workflows.

Both run as a straight line of steps and stop at the first failure by
raising an ApiError subclass; the route turns that into the response.

register:  validate -> check uniqueness -> hash password -> insert -> respond
login:     validate -> lookup -> verify password -> issue tokens -> respond
"""

import logging
from typing import Any, Callable, Dict

from sqlalchemy.exc import SQLAlchemyError

from eventos.auth_service.errors import (
    AuthenticationError,
    DuplicateKeyError,
    InternalError,
    NotFoundError,
)
from eventos.auth_service.repository import UserRepository
from eventos.auth_service.utils import CredentialHasher, TokenIssuer
from eventos.auth_service.validators import (
    RegisterRequest,
    validate_login,
    validate_registration,
)


def register_user(
    payload: Any,
    repository: UserRepository,
    hasher: CredentialHasher,
    validate: Callable[[Any], RegisterRequest] = validate_registration,
) -> Dict[str, Any]:
    """
    Create a user plus its role profile.

    validate turns the raw JSON body into a RegisterRequest; POST /attendee
    passes validate_attendee to pin the role.

    Returns:
        dict: The created Attendee/Organizer record.

    Raises:
        ValidationError: the body failed validation.
        DuplicateKeyError: email or username already taken.
        InvalidRoleError: role has no profile table.
        InternalError: any other database failure.
    """
    data = validate(payload)

    try:
        existing = repository.find_existing(data.email, data.user_name)
    except SQLAlchemyError as exc:
        logging.exception("[Auth] Uniqueness check failed")
        raise InternalError("Failed to create user", cause=exc) from exc

    if existing:
        field = "email" if existing.email == data.email else "userName"
        value = existing.email if field == "email" else existing.user_name
        logging.info(f"[Auth] Registration rejected, duplicate {field}")
        raise DuplicateKeyError.for_field(field, value)

    password_hash = hasher.hash(data.password)

    try:
        profile = repository.create_user_with_profile(
            data.user_fields(password_hash), data.profile_fields()
        )
    except SQLAlchemyError as exc:
        logging.exception("[Auth] Error creating user")
        raise InternalError("Failed to create user", cause=exc) from exc

    return profile.to_dict()


def login_user(
    payload: Any,
    repository: UserRepository,
    hasher: CredentialHasher,
    tokens: TokenIssuer,
) -> Dict[str, Any]:
    """
    Authenticate by email (or username) and password.

    Returns:
        dict: {"data": <user without password>, "tokens": {...}}

    Raises:
        ValidationError, NotFoundError, AuthenticationError, InternalError
    """
    data = validate_login(payload)

    try:
        user = repository.find_for_login(data.email, data.user_name)
    except SQLAlchemyError as exc:
        logging.exception("[Auth] Login lookup failed")
        raise InternalError("Login failed", cause=exc) from exc

    if not user:
        raise NotFoundError("User not found")

    if not hasher.verify(data.password, user.password):
        logging.warning(f"[Auth] Invalid password for user {user.id}")
        raise AuthenticationError("Invalid password")

    claims = user.claims()
    return {
        "data": user.to_dict(include_profiles=True),
        "tokens": {
            "accessToken": tokens.issue_access_token(claims),
            "refreshToken": tokens.issue_refresh_token(claims),
        },
    }
