"""
Create an admin account, or promote an existing user to admin.

Usage:
    python scripts/create_admin.py <email> <password> [name]

Change the password after the first login.
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from qrify import create_app
from qrify.extensions import db
from qrify.repositories.user_repository import get_user_by_email
from qrify.services.user_service import create_user
from qrify.utils.passwords import is_strong_enough


def create_admin(email, password, name="Admin User"):
    """Returns "exists", "promoted" or "created"."""
    user = get_user_by_email(email)
    if user:
        print(f"⚠️  User with email \"{user.email}\" already exists")
        print(f"   Current role: {user.role}")
        if user.role == "admin":
            print("\n✓ This user is already an admin!")
            return "exists"

        user.role = "admin"
        db.session.commit()
        print("\n✓ Updated existing user to admin!")
        print("   Password: (their existing password)")
        return "promoted"

    if not is_strong_enough(password):
        raise ValueError("Password must be at least 6 characters")

    admin = create_user(name, email, password, role="admin")
    print("✓ Admin account created successfully!")
    print(f"   Email: {admin.email}")
    print(f"   Name: {admin.name}")
    print(f"   Role: {admin.role}")
    print("\n⚠️  IMPORTANT: Change the password after first login!")
    return "created"


def main(argv):
    if len(argv) < 3:
        print(__doc__)
        return 1

    email, password = argv[1], argv[2]
    name = argv[3] if len(argv) > 3 else "Admin User"

    app = create_app()
    with app.app_context():
        try:
            create_admin(email, password, name)
        except Exception as e:
            db.session.rollback()
            print(f"❌ Error: {e}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
