"""
Create the schema and run a quick integrity check.

Creates the users/attendees/organizers tables on the database named by
DATABASE_URL, then inserts a throwaway organizer through the repository,
reads it back through the relationship, and removes it again.

    python -m eventos.database.init_db
"""

import sys
import uuid

from sqlalchemy import delete

from eventos.auth_service.models import Organizer, User
from eventos.auth_service.repository import UserRepository
from eventos.database.db_connection import Database
from eventos.gateway.config import load_config


def main() -> int:
    config = load_config()
    database = Database(config["DATABASE_URL"])
    repository = UserRepository(database)

    print("--- Running Database Quick Test ---")

    user_id = None
    marker = uuid.uuid4().hex[:8]

    try:
        database.init_db()
        print("Tables created (or already present).")

        # 1. Insert a user with its organizer profile in one transaction
        profile = repository.create_user_with_profile(
            {
                "email": f"check-{marker}@example.com",
                "user_name": f"check-{marker}",
                "password": "not-a-real-hash",
                "name": "Schema Check",
                "role": "organizer",
            },
            {"name": "Schema Check", "organization": "Eventos"},
        )
        user_id = profile.user_id
        print(f"Data insertion complete: user_id={user_id}, organizer_id={profile.id}")

        # 2. Query data back through the relationship
        user = repository.find_by_id(user_id, with_profiles=True)
        if not user or not user.organizer or user.attendee is not None:
            raise RuntimeError("Failed to retrieve joined data. Relationships may be incorrect.")
        print(f"Found user '{user.user_name}' with organizer profile '{user.organizer.name}'")

        print("\nDatabase test PASSED successfully!")
        return 0

    except Exception as e:
        print("\nDatabase test FAILED:")
        print(f" Error: {e}")
        return 1

    finally:
        # 3. Mandatory Cleanup
        if user_id:
            print("\nCleaning up test data...")
            with database.session() as session, session.begin():
                session.execute(delete(Organizer).where(Organizer.user_id == user_id))
                session.execute(delete(User).where(User.id == user_id))
            print("Cleanup complete.")
        database.dispose()
        print("Database connection closed.")


if __name__ == "__main__":
    sys.exit(main())
