# tests/test_utils.py
"""Destination rewriting, client parsing, short codes, plan guard and the rate limiter"""

import pytest
from limits.storage import MemoryStorage

from qrify import extensions
from qrify.utils import client_info
from qrify.utils.client_info import get_client_info, get_client_ip, get_location_from_ip
from qrify.utils.destination import resolve_destination, is_valid_destination
from qrify.utils.plan_checker import subscription_guard, PlanLimitError
from qrify.utils.short_codes import generate_short_code, is_preview_code, SHORT_CODE_ALPHABET

ANDROID_TABLET_UA = (
    "Mozilla/5.0 (Linux; Android 13; SM-X700) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
)
DESKTOP_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
BOT_UA = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"


@pytest.mark.parametrize("qr_type, data, expected", [
    ("url", "example.com", "https://example.com"),
    ("url", "HTTP://Example.com", "HTTP://Example.com"),
    (None, "mailto:a@b.co", "mailto:a@b.co"),
    ("email", "a@b.co", "mailto:a@b.co"),
    ("email", "mailto:a@b.co", "mailto:a@b.co"),
    ("phone", "+1 555 0100", "tel:+1 555 0100"),
    ("whatsapp", "+91-98765 43210", "https://wa.me/919876543210"),
    ("whatsapp", "whatsapp://send?phone=1", "whatsapp://send?phone=1"),
    ("wifi", "WIFI:S:home;T:WPA;P:pw;;", "WIFI:S:home;T:WPA;P:pw;;"),
])
def test_resolve_destination(qr_type, data, expected):
    assert resolve_destination(qr_type, data) == expected


@pytest.mark.parametrize("destination, valid", [
    ("https://example.com", True),
    ("mailto:a@b.co", True),
    ("tel:+15550100", True),
    ("upi://pay?pa=x@okbank", True),
    ("https://", False),
    ("https://exa mple.com", False),
    ("plain words", False),
    ("", False),
])
def test_is_valid_destination(destination, valid):
    assert is_valid_destination(destination) is valid


def test_client_ip_prefers_first_forwarded():
    assert get_client_ip({"X-Forwarded-For": "9.9.9.9, 10.0.0.1"}, "10.0.0.2") == "9.9.9.9"
    assert get_client_ip({}, "10.0.0.2") == "10.0.0.2"
    assert get_client_ip({}, None) == "127.0.0.1"


@pytest.mark.parametrize("ua, device_type", [
    (ANDROID_TABLET_UA, "tablet"),
    (DESKTOP_UA, "desktop"),
    (BOT_UA, "bot"),
])
def test_client_device_type(app, ua, device_type):
    info = get_client_info({"User-Agent": ua}, "1.2.3.4")

    assert info["device"]["type"] == device_type
    assert info["referrer"] == "Direct"
    assert info["geo"]["country"] == "Unknown"


def test_geo_lookup(app, monkeypatch):
    app.config["GEOIP_ENABLED"] = True

    class Resp:
        def json(self):
            return {"success": True, "country": "India", "region": "Karnataka", "city": "Bengaluru"}

    monkeypatch.setattr(client_info.requests, "get", lambda url, timeout=None: Resp())

    geo = get_location_from_ip("49.207.0.1")

    assert geo["country"] == "India"
    assert geo["city"] == "Bengaluru"


def test_geo_lookup_failure_is_unknown(app, monkeypatch):
    app.config["GEOIP_ENABLED"] = True

    def boom(*args, **kwargs):
        raise ConnectionError("offline")

    monkeypatch.setattr(client_info.requests, "get", boom)

    assert get_location_from_ip("49.207.0.1")["country"] == "Unknown"


def test_short_codes(app):
    code = generate_short_code()

    assert len(code) == 7
    assert all(ch in SHORT_CODE_ALPHABET for ch in code)
    assert is_preview_code("preview-x")
    assert not is_preview_code(code)


def test_short_code_skips_taken_codes(app, user, make_qr, monkeypatch):
    make_qr(user, short_url="AAAAAAA")
    codes = iter(["AAAAAAA", "BBBBBBB"])
    monkeypatch.setattr("qrify.utils.short_codes._random_code", lambda: next(codes))

    assert generate_short_code() == "BBBBBBB"


def test_subscription_guard_counts_active_codes(app, user, make_qr):
    make_qr(user)
    make_qr(user, is_active=False)

    result = subscription_guard(user)

    assert result == {"authorized": True, "plan": "free", "remaining": 2}


def test_subscription_guard_unknown_plan(app, make_user):
    odd = make_user(email="odd@example.com", subscription_plan="platinum")

    with pytest.raises(PlanLimitError) as exc:
        subscription_guard(odd)
    assert exc.value.message == "Invalid pricing plan configuration"


def test_limiter_uses_memory_storage_without_redis(app):
    assert extensions.redis_client is None
    assert app.config["RATELIMIT_STORAGE_URI"] == "memory://"
    assert isinstance(extensions.limiter.storage, MemoryStorage)


def test_limiter_keys_on_first_forwarded_ip(app):
    with app.test_request_context("/", headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}):
        assert extensions._client_ip_key() == "203.0.113.9"
