import datetime

from flask import current_app
from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token

from ..extensions import db
from ..models.qr_code import QRCode
from ..models.scan_log import ScanLog
from ..models.subscription import Subscription
from ..models.user import User
from ..repositories.user_repository import get_user_by_email, normalize_email
from ..schemas.qr_schema import serialize_qr, serialize_scan
from ..utils.passwords import hash_password
from .storage import delete_static_file


class GoogleAuthError(Exception):
    pass


def create_user(name, email, password=None, provider="email", role="user") -> User:
    user = User(
        name=name,
        email=normalize_email(email),
        password=hash_password(password) if password else None,
        provider=provider,
        role=role,
        subscription_plan="free",
    )
    db.session.add(user)
    db.session.commit()
    return user


def verify_google_id_token(token: str) -> dict:
    """Check a Google ID token's signature, issuer and audience against our client id."""
    client_id = current_app.config.get("GOOGLE_CLIENT_ID")
    if not client_id:
        raise GoogleAuthError("Google sign-in is not configured")

    try:
        claims = google_id_token.verify_oauth2_token(token, google_requests.Request(), client_id)
    except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
        raise GoogleAuthError(f"Invalid Google token: {e}") from e

    if not claims.get("email_verified"):
        raise GoogleAuthError("Google account email is not verified")
    if not claims.get("email"):
        raise GoogleAuthError("Google token has no email")
    return claims


def get_or_create_google_user(claims: dict) -> User:
    user = get_user_by_email(claims["email"])
    if user:
        return user
    current_app.logger.info(f"Creating account for Google user {claims['email']}")
    return create_user(claims.get("name"), claims["email"], provider="google")


def delete_account(user: User) -> None:
    """Remove the user's scan logs, QR codes (and their images), subscriptions and the user."""
    qrs = QRCode.query.filter_by(user_id=user.id).all()
    qr_ids = [qr.id for qr in qrs]

    if qr_ids:
        ScanLog.query.filter(ScanLog.qr_code_id.in_(qr_ids)).delete(synchronize_session=False)
        current_app.logger.info(f"Deleted scan logs of {len(qr_ids)} QR codes for user {user.id}")

    for qr in qrs:
        delete_static_file(qr.qr_image_url)

    if qr_ids:
        QRCode.query.filter(QRCode.id.in_(qr_ids)).delete(synchronize_session=False)

    Subscription.query.filter_by(user_id=user.id).delete(synchronize_session=False)

    db.session.delete(user)
    db.session.commit()
    current_app.logger.info(f"Deleted user account {user.id}")


def export_user_data(user: User) -> dict:
    qrs = QRCode.query.filter_by(user_id=user.id).order_by(QRCode.created_at.asc()).all()
    qr_ids = [qr.id for qr in qrs]
    scans = ScanLog.query.filter(ScanLog.qr_code_id.in_(qr_ids)).all() if qr_ids else []

    return {
        "user": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "subscriptionPlan": user.subscription_plan,
            "exportDate": datetime.datetime.utcnow().isoformat() + "Z",
        },
        "qrCodes": [serialize_qr(qr) for qr in qrs],
        "analytics": [serialize_scan(s) for s in scans],
        "summary": {
            "totalQRCodes": len(qrs),
            "totalScans": len(scans),
            "activeQRCodes": sum(1 for qr in qrs if qr.is_active),
        },
    }
