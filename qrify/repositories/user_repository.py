from typing import Optional
from ..extensions import db
from ..models.user import User


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def get_user_by_email(email: str) -> Optional[User]:
    return User.query.filter_by(email=normalize_email(email)).first()


def get_user_by_id(user_id) -> Optional[User]:
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None
