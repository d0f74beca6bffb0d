import secrets
import string

from ..models.qr_code import QRCode

SHORT_CODE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
SHORT_CODE_LENGTH = 7
PREVIEW_PREFIX = "preview-"


def _random_code(length: int = SHORT_CODE_LENGTH) -> str:
    return "".join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(length))


def generate_short_code() -> str:
    """Return a short code no QR record uses yet."""
    while True:
        code = _random_code()
        exists = QRCode.query.with_entities(QRCode.id).filter_by(short_url=code).first()
        if not exists:
            return code


def is_preview_code(code: str | None) -> bool:
    return bool(code) and code.startswith(PREVIEW_PREFIX)
