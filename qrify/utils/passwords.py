from werkzeug.security import check_password_hash, generate_password_hash

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(stored_password: str | None, provided_password: str | None) -> bool:
    """Check a provided password against a stored werkzeug hash.

    Accounts created through Google have no stored password and never match.
    """
    if not stored_password or not provided_password:
        return False
    try:
        return check_password_hash(stored_password, provided_password)
    except ValueError:
        # Stored string is not a valid werkzeug hash
        return False


def is_strong_enough(password: str | None) -> bool:
    return bool(password) and len(password) >= MIN_PASSWORD_LENGTH
