"""Create the first super admin account: python -m app.create_admin"""
import os

from app.core.database import SessionLocal
from app.services.auth_service import create_user, get_user_by_email

ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@heritage.example")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "ChangeMe123")


def main():
    db = SessionLocal()
    try:
        if get_user_by_email(db, ADMIN_EMAIL):
            print(f"already exists: {ADMIN_EMAIL}")
            return

        create_user(db, name="Super Admin", email=ADMIN_EMAIL, password=ADMIN_PASSWORD, role="super_admin")
        print(f"super admin created: email={ADMIN_EMAIL}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
