"""
Promote an existing user to admin by email.

Usage:
    python scripts/make_admin.py <email>

When no user has that email, the registered users are listed instead.
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from qrify import create_app
from qrify.extensions import db
from qrify.models.user import User
from qrify.repositories.user_repository import get_user_by_email


def make_admin(email):
    user = get_user_by_email(email)
    if not user:
        print(f"❌ User with email \"{email}\" not found")
        users = User.query.order_by(User.created_at.desc()).all()
        if users:
            print("\nRegistered users:")
            for u in users:
                print(f"   - {u.email} ({u.name or 'N/A'}) role={u.role}")
        else:
            print("\nNo users registered yet.")
        return None

    user.role = "admin"
    db.session.commit()

    print("✓ Successfully made user admin!")
    print(f"   Name: {user.name or 'N/A'}")
    print(f"   Email: {user.email}")
    print(f"   Role: {user.role}")
    return user


def main(argv):
    if len(argv) < 2:
        print(__doc__)
        return 1

    app = create_app()
    with app.app_context():
        return 0 if make_admin(argv[1]) else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
