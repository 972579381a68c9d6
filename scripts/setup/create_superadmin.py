# scripts/setup/create_superadmin.py
"""
Create (or promote) a superadmin account.
Superadmins live in the users table with role='superadmin' and receive every
superadmin-broadcast notification.
Usage: python scripts/setup/create_superadmin.py
"""

import sys
import os
from datetime import datetime
from getpass import getpass
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables
from app.models.agent import Agent
from app.models.user import User
from app.services.auth_service import hash_password


def _ask(prompt: str, default: str = "") -> str:
    value = input(f"   {prompt}{f' [{default}]' if default else ''}: ").strip()
    return value or default


def create_superadmin() -> bool:
    print("👑 KarHub superadmin setup")
    print("=" * 40)
    create_tables()
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.role == "superadmin").count()
        if existing:
            print(f"   ℹ️  {existing} superadmin(s) already present")

        email = _ask("Email").lower()
        if not email:
            print("   ❌ Email required")
            return False
        if db.query(Agent).filter(Agent.email == email).first():
            print("   ❌ This email belongs to an agent account")
            return False

        user = db.query(User).filter(User.email == email).first()
        now = datetime.utcnow()
        if user:
            if user.role == "superadmin":
                print("   ℹ️  Already a superadmin — nothing to do")
                return True
            answer = _ask(f"Promote {user.first_name} {user.last_name} to superadmin? (y/N)", "n")
            if answer.lower() not in ("y", "yes"):
                print("   Cancelled")
                return False
            user.role = "superadmin"
            user.is_active = True
            user.is_email_verified = True
            user.updated_at = now
        else:
            password = getpass("   Password (min 8 chars): ")
            if len(password) < 8 or password != getpass("   Confirm password: "):
                print("   ❌ Passwords must match and be at least 8 characters")
                return False
            user = User(
                email=email,
                password_hash=hash_password(password),
                first_name=_ask("First name", "Super"),
                last_name=_ask("Last name", "Admin"),
                phone=_ask("Phone", "-"),
                city=_ask("City", "-"),
                role="superadmin",
                is_active=True,
                is_email_verified=True,
                date_created=now,
                updated_at=now,
            )
            db.add(user)

        db.commit()
        print(f"   ✅ Superadmin ready: {email}")
        return True
    except Exception as e:
        db.rollback()
        print(f"   ❌ Failed: {e}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(0 if create_superadmin() else 1)
