"""
Users service routes: read-only listing of users and attendees.
"""

import logging
from typing import Tuple

from flask import Blueprint, Response, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from eventos.auth_service.errors import InternalError, NotFoundError
from eventos.auth_service.routes import get_services

users_bp = Blueprint("users", __name__)


@users_bp.before_request
def before_request() -> None:
    logging.info(f"[Users] Incoming {request.method} {request.path}")


@users_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Users] Response {response.status}")
    return response


@users_bp.route("/users", methods=["GET"])
def list_users() -> Tuple[Response, int]:
    """
    Get all users along with their profile (attendee/organizer).

    Returns:
        200: List of user objects, each with `attendee` and `organizer` keys.
        500: Database error.
    """
    try:
        users = get_services()["users"].list_all()
    except SQLAlchemyError as exc:
        logging.exception("[Users] Error listing users")
        raise InternalError("Failed to fetch users", cause=exc) from exc

    return jsonify([u.to_dict(include_profiles=True) for u in users]), 200


@users_bp.route("/user/<user_id>", methods=["GET"])
def get_user(user_id: str) -> Tuple[Response, int]:
    """
    Get a single user by ID.

    Returns:
        200: User object.
        404: User not found.
        500: Database error.
    """
    try:
        user = get_services()["users"].find_by_id(user_id)
    except SQLAlchemyError as exc:
        logging.exception("[Users] Error fetching user")
        raise InternalError("Failed to fetch user", cause=exc) from exc

    if not user:
        raise NotFoundError("User not found")

    return jsonify(user.to_dict()), 200


@users_bp.route("/attendees", methods=["GET"])
def list_attendees() -> Tuple[Response, int]:
    """
    Get all attendees with their user details.

    Returns:
        200: List of attendee objects with a nested `user`.
        500: Database error.
    """
    try:
        attendees = get_services()["users"].list_attendees()
    except SQLAlchemyError as exc:
        logging.exception("[Users] Error listing attendees")
        raise InternalError("Failed to fetch attendees", cause=exc) from exc

    return jsonify([a.to_dict(include_user=True) for a in attendees]), 200
