import re
from urllib.parse import urlparse

_HTTP_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*$")


def sanitize_url_scheme(destination: str) -> str:
    if not _HTTP_SCHEME.match(destination) and not destination.startswith(("mailto:", "tel:")):
        return f"https://{destination}"
    return destination


def resolve_destination(qr_type: str | None, original_data: str) -> str:
    """Rewrite stored QR data into the URL a scan should land on."""
    destination = original_data

    if qr_type == "email" and not destination.startswith("mailto:"):
        destination = f"mailto:{destination}"
    elif qr_type == "phone" and not destination.startswith("tel:"):
        destination = f"tel:{destination}"
    elif qr_type == "whatsapp" and not destination.startswith(("https://wa.me/", "whatsapp://")):
        clean_number = re.sub(r"[^\d]", "", destination)
        destination = f"https://wa.me/{clean_number}"
    elif qr_type == "url" or not qr_type:
        destination = sanitize_url_scheme(destination)

    return destination


def is_valid_destination(destination: str) -> bool:
    """A destination needs a scheme plus a host (http/https) or a non-empty body."""
    destination = (destination or "").strip()
    if not destination:
        return False
    try:
        parsed = urlparse(destination)
    except ValueError:
        return False

    if not parsed.scheme or not _SCHEME.match(parsed.scheme):
        return False
    if parsed.scheme.lower() in ("http", "https"):
        return bool(parsed.netloc) and not any(ch.isspace() for ch in parsed.netloc)
    return bool(parsed.netloc or parsed.path or parsed.query)
