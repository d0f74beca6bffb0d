import os
from dotenv import load_dotenv

load_dotenv()


def _require_env(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {key}")
    return value


def _env_flag(key: str, default: str = "true") -> bool:
    return os.getenv(key, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = _require_env("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = _require_env("DATABASE_URL")
    BASE_URL = _require_env("BASE_URL").rstrip("/")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", 7))

    # Generated QR images, previews and uploaded logos live here
    STATIC_FOLDER = os.getenv("STATIC_FOLDER") or os.path.join(
        os.path.dirname(os.path.abspath(__file__)), "..", "static"
    )

    REDIS_URL = os.getenv("REDIS_URL")
    if not REDIS_URL:
        REDIS_URL = "redis://localhost:6379/0"

    # Scan analytics
    GEOIP_ENABLED = _env_flag("GEOIP_ENABLED")
    GEOIP_URL = os.getenv("GEOIP_URL", "https://ipwho.is/{ip}")
    SCAN_LOG_ASYNC = _env_flag("SCAN_LOG_ASYNC")
    SCAN_LOG_WORKERS = int(os.getenv("SCAN_LOG_WORKERS", 4))
    DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "Asia/Kolkata")

    # QR rendering
    QR_IMAGE_SIZE = int(os.getenv("QR_IMAGE_SIZE", 1000))
    MAX_LOGO_BYTES = int(os.getenv("MAX_LOGO_BYTES", 2 * 1024 * 1024))
    PREVIEW_RATE_LIMIT = int(os.getenv("PREVIEW_RATE_LIMIT", 5))
    PREVIEW_RATE_WINDOW = int(os.getenv("PREVIEW_RATE_WINDOW", 60))

    # Payments
    RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID")
    RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET")
    RAZORPAY_WEBHOOK_SECRET = os.getenv("RAZORPAY_WEBHOOK_SECRET")
    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
    STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")

    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
    GOOGLE_SITE_VERIFICATION_CONTENT = os.getenv(
        "GOOGLE_SITE_VERIFICATION_CONTENT", "google-site-verification-placeholder"
    )
