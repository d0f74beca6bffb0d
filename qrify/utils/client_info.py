import requests
from flask import current_app
from user_agents import parse

UNKNOWN_LOCATION = {"country": "Unknown", "region": "Unknown", "city": "Unknown"}


def get_location_from_ip(ip: str | None) -> dict:
    """Geo lookup for an IP; always returns country/region/city, never raises."""
    if not current_app.config.get("GEOIP_ENABLED", True) or not ip:
        return dict(UNKNOWN_LOCATION)

    url = current_app.config.get("GEOIP_URL", "https://ipwho.is/{ip}").format(ip=ip)
    try:
        resp = requests.get(url, timeout=3)
        data = resp.json()
        if data.get("success", True):
            return {
                "country": data.get("country") or "Unknown",
                "region": data.get("region") or "Unknown",
                "city": data.get("city") or "Unknown",
                "lat": data.get("latitude"),
                "lng": data.get("longitude"),
            }
    except Exception as e:
        current_app.logger.debug(f"GeoIP lookup failed for {ip}: {e}")

    return dict(UNKNOWN_LOCATION)


def _device_type(ua) -> str:
    if ua.is_bot:
        return "bot"
    if ua.is_tablet:
        return "tablet"
    if ua.is_mobile:
        return "mobile"
    return "desktop"


def get_client_ip(headers, remote_addr=None) -> str:
    xff = headers.get("X-Forwarded-For", "")
    if xff:
        return xff.split(",")[0].strip()
    return remote_addr or "127.0.0.1"


def get_client_info(headers, remote_addr=None, with_geo=True) -> dict:
    user_agent_str = headers.get("User-Agent", "") or ""
    ua = parse(user_agent_str)
    ip = get_client_ip(headers, remote_addr)

    geo = get_location_from_ip(ip) if with_geo else dict(UNKNOWN_LOCATION)

    return {
        "ip": ip,
        "user_agent": user_agent_str,
        "referrer": headers.get("Referer") or "Direct",
        "device": {
            "type": _device_type(ua),
            "vendor": ua.device.brand or "Unknown",
            "model": ua.device.model or "Unknown",
            "os": ua.os.family or "Unknown",
            "browser": ua.browser.family or "Unknown",
        },
        "geo": geo,
    }
