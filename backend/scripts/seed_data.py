"""Seed the database with lookup data and a first administrator."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from todolist.config import settings
from todolist.database import SessionLocal, engine, Base
import todolist.models  # noqa: F401

from todolist.models.lookup import Department, Role, TaskStatus
from todolist.models.user import User
from todolist.services.auth_service import get_password_hash

ADMIN_USERNAME = os.environ.get("TODOLIST_ADMIN_USERNAME", "admin")
# The first administrator must change this password on first sign-in.
ADMIN_PASSWORD = os.environ.get("TODOLIST_ADMIN_PASSWORD", "ChangeMe!123")


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        admin_role = Role(name=settings.ADMIN_ROLE_NAME)
        db.add_all([admin_role, Role(name="User")])

        departments = [Department(name="Administration"), Department(name="Operations"), Department(name="Finance")]
        db.add_all(departments)

        db.add_all([TaskStatus(name="Open"), TaskStatus(name="In Progress"), TaskStatus(name="Completed")])
        db.flush()

        db.add(User(
            username=ADMIN_USERNAME,
            first_name="System",
            last_name="Administrator",
            department_id=departments[0].department_id,
            role_id=admin_role.role_id,
            hashed_password=get_password_hash(ADMIN_PASSWORD),
            must_change_password=True,
        ))
        db.commit()
        print(f"Seeded lookups and administrator '{ADMIN_USERNAME}'.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
