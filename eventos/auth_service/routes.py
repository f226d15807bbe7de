"""
Authentication service route handlers.

Provides routes for:
- User registration (attendee or organizer)
- Attendee registration shortcut
- User login
- Profile retrieval (/me)

Workflow logic lives in `auth_service.workflow`; errors raised there are
rendered by the handlers registered in the gateway.
"""

import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, Response, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from eventos.auth_service.errors import InternalError, NotFoundError
from eventos.auth_service.utils import verify_token_from_request
from eventos.auth_service.validators import validate_attendee
from eventos.auth_service.workflow import login_user, register_user

auth_bp = Blueprint("auth", __name__)


def get_services() -> Dict[str, Any]:
    """Repository, hasher and token issuer wired up by create_app."""
    return current_app.extensions["eventos"]


def _json_body() -> Any:
    return request.get_json(silent=True) or {}


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Auth] Response {response.status}")
    return response


# --- REGISTER ---
@auth_bp.route("/user", methods=["POST"])
def create_user() -> Tuple[Response, int]:
    """
    Register a new user together with its role profile.

    Expects a JSON body with:
    - email (str): Unique, valid email address.
    - userName (str): Unique username.
    - password (str): Minimum 6 characters.
    - role (str): "attendee" or "organizer".
    - name (str)
    - phone, organization (str, optional): Profile fields.

    Returns:
        201: The created Attendee or Organizer record.
        400: Validation errors, duplicate email/username, or invalid role.
        500: Database error.
    """
    services = get_services()
    profile = register_user(_json_body(), services["users"], services["hasher"])
    return jsonify(profile), 201


@auth_bp.route("/attendee", methods=["POST"])
def create_attendee() -> Tuple[Response, int]:
    """
    Register a new attendee. Same body as POST /user without `role`.

    Returns:
        201: The created Attendee record.
        400: Validation errors or duplicate email/username.
        500: Database error.
    """
    services = get_services()
    attendee = register_user(
        _json_body(), services["users"], services["hasher"], validate=validate_attendee
    )
    return jsonify(attendee), 201


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return an access/refresh token pair.

    Expects a JSON body with:
    - email (str)
    - userName (str, optional)
    - password (str)

    Returns:
        200: {"data": user, "tokens": {"accessToken", "refreshToken"}}
        400: Validation errors.
        401: Wrong password.
        404: No user with that email or username.
        500: Database error.
    """
    services = get_services()
    result = login_user(_json_body(), services["users"], services["hasher"], services["tokens"])
    return jsonify(result), 200


# --- GET CURRENT USER ---
@auth_bp.route("/me", methods=["GET"])
def get_current_user() -> Tuple[Response, int]:
    """
    Retrieve the current user with its profile rows.

    Requires Authorization header: Bearer <accessToken>

    Returns:
        200: User object.
        401: Missing, invalid or expired token.
        404: User no longer exists.
        500: Database error.
    """
    services = get_services()
    claims = verify_token_from_request(services["tokens"])

    try:
        user = services["users"].find_by_id(claims.get("sub"), with_profiles=True)
    except SQLAlchemyError as exc:
        logging.exception("[Auth] Could not retrieve current user")
        raise InternalError("Could not retrieve user", cause=exc) from exc

    if not user:
        raise NotFoundError("User not found")

    return jsonify(user.to_dict(include_profiles=True)), 200
