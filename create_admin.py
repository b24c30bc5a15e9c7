"""
Create the first admin account, or promote an existing user to admin.

Run after `alembic upgrade head`. Values come from ADMIN_EMAIL, ADMIN_PASSWORD
and ADMIN_NAME when set, otherwise from the command line or a prompt.

    python create_admin.py --email ops@vcxmart.com --name "Ops"
"""
import argparse
import getpass
import sys
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from app.config import settings
from app.database import SessionLocal
from app.models.user import User, UserRole
from app.utils.security import get_password_hash

MIN_PASSWORD_LENGTH = 6


def ask(value: str, prompt: str, secret: bool = False) -> str:
    value = (value or "").strip()
    if value:
        return value
    reader = getpass.getpass if secret else input
    return reader(prompt).strip()


def promote_or_create(db, email: str, name: str, password: str) -> str:
    user = db.query(User).filter(User.email == email).first()
    if user is not None:
        if user.role == UserRole.ADMIN:
            return f"{email} is already an admin"
        user.role = UserRole.ADMIN
        db.commit()
        return f"promoted {email} (id {user.id}) to admin"

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not name:
        raise ValueError("name is required")

    user = User(
        email=email,
        name=name,
        password_hash=get_password_hash(password),
        role=UserRole.ADMIN,
        is_active=True
    )
    db.add(user)
    db.commit()
    return f"created admin {email} (id {user.id}); log in via POST /api/v1/auth/login"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote a VCX Mart admin")
    parser.add_argument("--email", default=settings.ADMIN_EMAIL)
    parser.add_argument("--name", default=settings.ADMIN_NAME)
    args = parser.parse_args(argv)

    email = ask(args.email, "Admin email: ").lower()
    if not email:
        print("[ERROR] email is required")
        return 1

    db = SessionLocal()
    try:
        exists = db.query(User.id).filter(User.email == email).first() is not None
        password = "" if exists else ask(settings.ADMIN_PASSWORD, "Admin password: ", secret=True)
        name = "" if exists else ask(args.name, "Admin name: ")
        print(f"[SUCCESS] {promote_or_create(db, email, name, password)}")
        return 0
    except OperationalError as e:
        db.rollback()
        print(f"[ERROR] {e.orig}. Has `alembic upgrade head` been run?")
        return 1
    except (SQLAlchemyError, ValueError) as e:
        db.rollback()
        print(f"[ERROR] {e}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
