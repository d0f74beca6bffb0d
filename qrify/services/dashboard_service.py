import datetime

import pytz
from flask import current_app
from sqlalchemy import func, case

from ..extensions import db
from ..models.qr_code import QRCode
from ..models.scan_log import ScanLog


def _today_bounds_utc():
    """Start and end of 'today' in the display timezone, as naive UTC datetimes."""
    tz = pytz.timezone(current_app.config.get("DISPLAY_TIMEZONE", "Asia/Kolkata"))
    today = datetime.datetime.now(tz).date()

    start_local = tz.localize(datetime.datetime(today.year, today.month, today.day))
    end_local = tz.localize(datetime.datetime.combine(today + datetime.timedelta(days=1), datetime.time()))

    start_utc = start_local.astimezone(pytz.utc).replace(tzinfo=None)
    end_utc = end_local.astimezone(pytz.utc).replace(tzinfo=None)
    return start_utc, end_utc


def get_overview(user_id: int) -> dict:
    totals = db.session.query(
        func.count(QRCode.id),
        func.coalesce(func.sum(QRCode.scan_count), 0),
        func.coalesce(func.sum(case((QRCode.is_active == True, 1), else_=0)), 0),  # noqa: E712
    ).filter(QRCode.user_id == user_id).one()
    total_qrs, total_scans, active_qrs = (int(v or 0) for v in totals)

    user_qrs = QRCode.query.with_entities(QRCode.id, QRCode.qr_name).filter_by(user_id=user_id).all()
    qr_names = {qr_id: name for qr_id, name in user_qrs}

    recent_scans = []
    scans_today = 0
    if qr_names:
        recent = ScanLog.query.filter(
            ScanLog.qr_code_id.in_(list(qr_names))
        ).order_by(ScanLog.scanned_at.desc()).limit(10).all()

        recent_scans = [
            {
                "qrCodeId": s.qr_code_id,
                "qrName": qr_names.get(s.qr_code_id, "Unknown QR"),
                "scannedAt": s.scanned_at.isoformat() if s.scanned_at else None,
                "country": s.country,
                "deviceType": s.device_type,
            }
            for s in recent
        ]

        start_utc, end_utc = _today_bounds_utc()
        scans_today = ScanLog.query.filter(
            ScanLog.qr_code_id.in_(list(qr_names)),
            ScanLog.scanned_at >= start_utc,
            ScanLog.scanned_at < end_utc,
        ).count()

    return {
        "totalQRCodes": total_qrs,
        "totalScans": total_scans,
        "activeQRCodes": active_qrs,
        "inactiveQRCodes": total_qrs - active_qrs,
        "scansToday": scans_today,
        "recentScans": recent_scans,
    }
