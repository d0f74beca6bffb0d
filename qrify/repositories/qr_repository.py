from typing import Optional
from ..models.qr_code import QRCode


def parse_qr_id(qr_id) -> Optional[int]:
    try:
        value = int(str(qr_id))
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def get_qr_by_short_url(short_url: str) -> Optional[QRCode]:
    return QRCode.query.filter_by(short_url=short_url).first()


def get_owned_qr(qr_id, user_id) -> Optional[QRCode]:
    parsed = parse_qr_id(qr_id)
    if parsed is None:
        return None
    return QRCode.query.filter_by(id=parsed, user_id=user_id).first()


def list_user_qrs(user_id):
    return QRCode.query.filter_by(user_id=user_id).order_by(QRCode.created_at.desc(), QRCode.id.desc()).all()
