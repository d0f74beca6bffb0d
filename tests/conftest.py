"""
Pytest configuration and fixtures for QRify tests
"""

import os
import sys

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Config reads these at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BASE_URL", "http://qr.test")

from qrify import create_app  # noqa: E402
from qrify.config import Config  # noqa: E402
from qrify.extensions import db  # noqa: E402
from qrify.models.qr_code import QRCode  # noqa: E402
from qrify.services.user_service import create_user  # noqa: E402
from qrify.utils.jwt_helper import encode_token  # noqa: E402


def build_test_config(tmp_path, **overrides):
    settings = {
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "BASE_URL": "http://qr.test",
        "STATIC_FOLDER": str(tmp_path / "static"),
        "REDIS_URL": None,
        "GEOIP_ENABLED": False,
        "SCAN_LOG_ASYNC": False,
        "QR_IMAGE_SIZE": 200,
        "RAZORPAY_KEY_ID": "rzp_test_key",
        "RAZORPAY_KEY_SECRET": "rzp_test_secret",
        "RAZORPAY_WEBHOOK_SECRET": "rzp_webhook_secret",
        "STRIPE_SECRET_KEY": "sk_test_123",
        "STRIPE_WEBHOOK_SECRET": "whsec_test",
        "GOOGLE_CLIENT_ID": "client-123.apps.googleusercontent.com",
    }
    settings.update(overrides)
    return type("TestConfig", (Config,), settings)


@pytest.fixture
def app(tmp_path):
    app = create_app(build_test_config(tmp_path))

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def make_app(tmp_path):
    """Build an extra app with config overrides; the caller pushes its context."""
    def _make_app(**overrides):
        return create_app(build_test_config(tmp_path, **overrides))
    return _make_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(email="user@example.com", password="secret123", name="Test User", **fields):
        user = create_user(name, email, password, role=fields.pop("role", "user"))
        for key, value in fields.items():
            setattr(user, key, value)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", name="Admin", role="admin")


def auth_header(user):
    return {"Authorization": f"Bearer {encode_token(user.id, user.role)}"}


@pytest.fixture
def auth(user):
    return auth_header(user)


@pytest.fixture
def auth_for():
    return auth_header


@pytest.fixture
def make_qr(app):
    """Insert a QR record directly, skipping image rendering."""
    counter = {"n": 0}

    def _make_qr(user, **fields):
        counter["n"] += 1
        values = {
            "qr_name": f"QR {counter['n']}",
            "qr_type": "url",
            "original_data": "example.com",
            "short_url": f"code{counter['n']:03d}",
            "is_dynamic": True,
        }
        values.update(fields)
        qr = QRCode(user_id=user.id, **values)
        db.session.add(qr)
        db.session.commit()
        return qr
    return _make_qr
