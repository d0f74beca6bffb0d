import datetime

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models.qr_code import QRCode, QR_TYPES, QR_STYLES, EYE_SHAPES
from ..models.scan_log import ScanLog
from ..utils.plan_checker import subscription_guard
from ..utils.qr_generator import generate_qr
from ..utils.short_codes import generate_short_code
from .storage import save_static_file, delete_static_file, QR_FOLDER, PREVIEW_FOLDER


class QRValidationError(ValueError):
    pass


def redirect_url_for(short_code: str) -> str:
    base_url = current_app.config.get("BASE_URL", "http://localhost:5000")
    return f"{base_url}/api/qr/redirect/{short_code}"


def parse_expiry(value):
    if value in (None, ""):
        return None
    if isinstance(value, datetime.datetime):
        return value
    try:
        parsed = datetime.datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise QRValidationError("expiryDate must be an ISO 8601 date")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return parsed


def parse_scan_limit(value):
    if value in (None, ""):
        return None
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise QRValidationError("scanLimit must be a positive integer")
    if limit <= 0:
        raise QRValidationError("scanLimit must be a positive integer")
    return limit


def create_qr_code(user, data: dict) -> QRCode:
    """
    Guard the plan, reserve a short code, render and store the image,
    then persist the dynamic QR record owned by `user`.
    """
    qr_name = (data.get("qrName") or "").strip()
    qr_type = (data.get("qrType") or "").strip()
    original_data = data.get("originalData")

    if not qr_name or not qr_type or not original_data:
        raise QRValidationError("Missing required fields")
    if qr_type not in QR_TYPES:
        raise QRValidationError(f"Unsupported qrType '{qr_type}'")

    qr_style = data.get("qrStyle") or "square"
    eye_shape = data.get("eyeShape") or "square"
    if qr_style not in QR_STYLES:
        raise QRValidationError(f"Unsupported qrStyle '{qr_style}'")
    if eye_shape not in EYE_SHAPES:
        raise QRValidationError(f"Unsupported eyeShape '{eye_shape}'")

    expiry_date = parse_expiry(data.get("expiryDate"))
    scan_limit = parse_scan_limit(data.get("scanLimit"))
    foreground_color = data.get("foregroundColor") or "#000000"
    background_color = data.get("backgroundColor") or "#ffffff"
    logo_url = data.get("logoUrl") or None

    subscription_guard(user)

    # The image encodes our redirect URL, so the destination can change later
    short_code = generate_short_code()
    redirect_url = redirect_url_for(short_code)
    current_app.logger.info(f"[QR Generate] shortUrl={short_code} redirect={redirect_url}")

    png = generate_qr(
        redirect_url,
        foreground_color=foreground_color,
        background_color=background_color,
        logo_url=logo_url,
        qr_style=qr_style,
        eye_shape=eye_shape,
    )
    image_path = save_static_file(png, QR_FOLDER, f"qr_{short_code}.png")

    qr = QRCode(
        user_id=user.id,
        qr_name=qr_name,
        qr_type=qr_type,
        original_data=original_data,
        short_url=short_code,
        qr_image_url=image_path,
        is_dynamic=True,
        expiry_date=expiry_date,
        scan_limit=scan_limit,
        foreground_color=foreground_color,
        background_color=background_color,
        gradient=data.get("gradient"),
        eye_shape=eye_shape,
        qr_style=qr_style,
        logo_url=logo_url,
    )
    try:
        db.session.add(qr)
        db.session.commit()
    except Exception:
        db.session.rollback()
        delete_static_file(image_path)
        raise

    return qr


def render_preview(data: dict) -> str:
    """Render an unsaved code with the final code's density; returns the static path."""
    temp_code = generate_short_code()
    png = generate_qr(
        redirect_url_for(temp_code),
        foreground_color=data.get("foregroundColor") or "#000000",
        background_color=data.get("backgroundColor") or "#ffffff",
        logo_url=data.get("logoUrl") or None,
        qr_style=data.get("qrStyle") or "square",
        eye_shape=data.get("eyeShape") or "square",
    )
    return save_static_file(png, PREVIEW_FOLDER)


def delete_qr_code(qr: QRCode) -> None:
    try:
        ScanLog.query.filter_by(qr_code_id=qr.id).delete(synchronize_session=False)
    except Exception as e:
        db.session.rollback()
        current_app.logger.warning(f"Failed to delete scan logs for QR {qr.id}: {e}")

    delete_static_file(qr.qr_image_url)
    db.session.delete(qr)
    db.session.commit()


def _date_key(value) -> str:
    if hasattr(value, "strftime"):
        return value.strftime("%Y-%m-%d")
    return str(value)[:10]


def get_qr_stats(qr_id: int) -> dict:
    base = ScanLog.query.filter(ScanLog.qr_code_id == qr_id)

    total_scans = base.count()
    unique_scans = db.session.query(
        func.count(func.distinct(ScanLog.ip_address))
    ).filter(ScanLog.qr_code_id == qr_id).scalar() or 0

    day = func.date(ScanLog.scanned_at)
    by_date = db.session.query(day, func.count(ScanLog.id)).filter(
        ScanLog.qr_code_id == qr_id
    ).group_by(day).order_by(day.asc()).all()

    devices = db.session.query(ScanLog.device_type, func.count(ScanLog.id)).filter(
        ScanLog.qr_code_id == qr_id
    ).group_by(ScanLog.device_type).all()

    count_col = func.count(ScanLog.id)
    countries = db.session.query(ScanLog.country, count_col).filter(
        ScanLog.qr_code_id == qr_id
    ).group_by(ScanLog.country).order_by(count_col.desc()).limit(10).all()

    device_breakdown = {}
    for device_type, count in devices:
        key = device_type or "unknown"
        device_breakdown[key] = device_breakdown.get(key, 0) + count

    return {
        "totalScans": total_scans,
        "uniqueScans": unique_scans,
        "scansByDate": [{"date": _date_key(d), "count": c} for d, c in by_date],
        "deviceBreakdown": device_breakdown,
        "countryBreakdown": [{"country": country or "Unknown", "count": c} for country, c in countries],
    }
