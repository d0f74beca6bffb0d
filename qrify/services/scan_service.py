import datetime

from flask import current_app

from .. import extensions
from ..extensions import db
from ..models.qr_code import QRCode
from ..models.scan_log import ScanLog
from ..utils.client_info import get_client_info


def increment_scan_count(qr_id: int) -> None:
    """Atomic counter bump done by the database, safe under concurrent scans."""
    QRCode.query.filter_by(id=qr_id).update(
        {"scan_count": QRCode.scan_count + 1}, synchronize_session=False
    )
    db.session.commit()


def record_scan(qr_id: int, headers: dict, remote_addr: str | None) -> ScanLog | None:
    """Parse the client and persist a ScanLog. Failures are logged, never raised."""
    try:
        info = get_client_info(headers, remote_addr)
        device = info["device"]
        geo = info["geo"]

        scan = ScanLog(
            qr_code_id=qr_id,
            ip_address=info["ip"] or "Unknown",
            user_agent=info["user_agent"] or "Unknown",
            device_type=device.get("type") or "unknown",
            os=device.get("os") or "Unknown",
            browser=device.get("browser") or "Unknown",
            country=geo.get("country") or "Unknown",
            city=geo.get("city") or "Unknown",
            referrer=info["referrer"],
            scanned_at=datetime.datetime.utcnow(),
        )
        db.session.add(scan)
        db.session.commit()
        return scan
    except Exception as e:
        current_app.logger.error(f"Analytics Error (non-blocking): {e}")
        try:
            db.session.rollback()
        except Exception:
            pass
        return None


def _record_scan_in_context(app, qr_id, headers, remote_addr):
    with app.app_context():
        try:
            record_scan(qr_id, headers, remote_addr)
        finally:
            db.session.remove()


def submit_scan_log(qr_id: int, headers, remote_addr: str | None) -> None:
    """
    Hand the scan log write to the worker pool so the redirect does not wait.
    Headers are copied first; the request is gone by the time the worker runs.
    """
    headers = {
        "User-Agent": headers.get("User-Agent", ""),
        "X-Forwarded-For": headers.get("X-Forwarded-For", ""),
        "Referer": headers.get("Referer", ""),
    }
    app = current_app._get_current_object()

    executor = extensions.scan_executor
    if executor is None or not app.config.get("SCAN_LOG_ASYNC", True):
        record_scan(qr_id, headers, remote_addr)
        return

    try:
        executor.submit(_record_scan_in_context, app, qr_id, headers, remote_addr)
    except RuntimeError as e:
        # Executor shut down (interpreter exiting); the scan is dropped
        app.logger.error(f"Analytics Error (non-blocking): could not queue scan log: {e}")
