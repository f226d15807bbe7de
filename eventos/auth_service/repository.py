"""
Persistence boundary for users and their role profiles.

UserRepository is constructed with a Database and opens a short-lived
session per call. Reads eager-load whatever relationships the caller will
serialize, because the session is closed by the time the object is used.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from eventos.auth_service.errors import DuplicateKeyError, InvalidRoleError
from eventos.auth_service.models import PROFILE_MODELS, Attendee, User
from eventos.database.db_connection import Database


def _identity_filter(email: Optional[str], user_name: Optional[str]):
    conditions = []
    if email:
        conditions.append(User.email == email)
    if user_name:
        conditions.append(User.user_name == user_name)
    return or_(*conditions) if conditions else None


UNIQUE_COLUMNS = {"email": "email", "user_name": "userName"}

# Constraint/index names: ix_users_email, users_user_name_key, ...
_CONSTRAINT_NAME = re.compile(r"^(?:ix_)?users_(email|user_name)(?:_key)?$")
# First line of the driver message only; later lines may echo the value.
_MESSAGE_PATTERNS = (
    re.compile(r"UNIQUE constraint failed: users\.(email|user_name)\b"),  # SQLite
    re.compile(r'"(?:ix_)?users_(email|user_name)(?:_key)?"'),            # PostgreSQL
)
_DETAIL_KEY = re.compile(r"Key \((email|user_name)\)=")


def _duplicate_field(error: IntegrityError) -> Optional[str]:
    """
    Work out which unique column an IntegrityError is about.

    Args:
        error (IntegrityError): The wrapped driver error.

    Returns:
        str | None: "email" or "userName", or None when the violation is
                    not one of the users unique columns.
    """
    diag = getattr(error.orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        match = _CONSTRAINT_NAME.match(constraint.lower())
        return UNIQUE_COLUMNS[match.group(1)] if match else None

    text = str(error.orig)
    first_line = text.splitlines()[0] if text else ""
    for pattern in _MESSAGE_PATTERNS:
        match = pattern.search(first_line)
        if match:
            return UNIQUE_COLUMNS[match.group(1)]

    match = _DETAIL_KEY.search(text)
    return UNIQUE_COLUMNS[match.group(1)] if match else None


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.db = database

    def find_existing(self, email: Optional[str], user_name: Optional[str]) -> Optional[User]:
        """
        Return the first user matching the email OR the username.

        Args:
            email (str): Email to look for. Ignored when empty.
            user_name (str): Username to look for. Ignored when empty.

        Returns:
            User | None: Oldest matching user, or None.
        """
        criteria = _identity_filter(email, user_name)
        if criteria is None:
            return None
        with self.db.session() as session:
            return session.scalars(
                select(User).where(criteria).order_by(User.created_at).limit(1)
            ).first()

    def find_for_login(self, email: Optional[str], user_name: Optional[str]) -> Optional[User]:
        """Same lookup as find_existing, with both profile rows loaded."""
        criteria = _identity_filter(email, user_name)
        if criteria is None:
            return None
        with self.db.session() as session:
            return session.scalars(
                select(User)
                .where(criteria)
                .options(selectinload(User.attendee), selectinload(User.organizer))
                .order_by(User.created_at)
                .limit(1)
            ).first()

    def find_by_id(self, user_id: str, with_profiles: bool = False) -> Optional[User]:
        """
        Fetch a user by primary key.

        Args:
            user_id (str): UUID of the user.
            with_profiles (bool): Also load the attendee/organizer rows.

        Returns:
            User | None: The user, or None if no row has that id.
        """
        with self.db.session() as session:
            options = []
            if with_profiles:
                options = [selectinload(User.attendee), selectinload(User.organizer)]
            return session.get(User, user_id, options=options)

    def list_all(self) -> List[User]:
        """
        Returns:
            list[User]: Every user, oldest first, with profiles loaded.
        """
        with self.db.session() as session:
            return list(session.scalars(
                select(User)
                .options(selectinload(User.attendee), selectinload(User.organizer))
                .order_by(User.created_at)
            ))

    def list_attendees(self) -> List[Attendee]:
        """
        Returns:
            list[Attendee]: Every attendee, oldest first, with its user loaded.
        """
        with self.db.session() as session:
            return list(session.scalars(
                select(Attendee).options(selectinload(Attendee.user)).order_by(Attendee.created_at)
            ))

    def create_user_with_profile(self, user_fields: Dict[str, Any], profile_fields: Dict[str, Any]):
        """
        Insert a user and its role profile in one transaction.

        Both rows are committed together or not at all.

        Args:
            user_fields (dict): User columns; password already hashed.
            profile_fields (dict): Columns for the role's profile table.

        Returns:
            Attendee | Organizer: The new profile row.

        Raises:
            InvalidRoleError: role is not attendee/organizer. Nothing is written.
            DuplicateKeyError: the database rejected a duplicate email/username.
        """
        role = user_fields.get("role")
        with self.db.session() as session:
            try:
                with session.begin():
                    profile_model = PROFILE_MODELS.get(role)
                    if profile_model is None:
                        raise InvalidRoleError(role)

                    user = User(**user_fields)
                    session.add(user)
                    session.flush()

                    profile = profile_model(user_id=user.id, **profile_fields)
                    session.add(profile)
            except IntegrityError as exc:
                field = _duplicate_field(exc)
                if field is None:
                    raise
                logging.warning(f"[Users] Unique constraint hit on {field} during insert")
                value = user_fields.get("user_name" if field == "userName" else "email")
                raise DuplicateKeyError.for_field(field, value) from exc

        logging.info(f"[Users] Created {role} profile {profile.id} for user {user.id}")
        return profile

