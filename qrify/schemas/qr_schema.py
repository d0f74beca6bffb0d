from ..utils.static_urls import build_static_url


def _iso(value):
    return value.isoformat() if value else None


def serialize_qr(qr) -> dict:
    return {
        "id": qr.id,
        "userId": qr.user_id,
        "qrName": qr.qr_name,
        "qrType": qr.qr_type,
        "originalData": qr.original_data,
        "shortUrl": qr.short_url,
        "qrImageUrl": build_static_url(qr.qr_image_url),
        "isDynamic": qr.is_dynamic,
        "isActive": qr.is_active,
        "expiryDate": _iso(qr.expiry_date),
        "scanLimit": qr.scan_limit,
        "scanCount": qr.scan_count,
        "foregroundColor": qr.foreground_color,
        "backgroundColor": qr.background_color,
        "gradient": qr.gradient,
        "eyeShape": qr.eye_shape,
        "qrStyle": qr.qr_style,
        "logoUrl": build_static_url(qr.logo_url),
        "createdAt": _iso(qr.created_at),
        "updatedAt": _iso(qr.updated_at),
    }


def serialize_scan(scan) -> dict:
    return {
        "qrCodeId": scan.qr_code_id,
        "ipAddress": scan.ip_address,
        "deviceType": scan.device_type,
        "os": scan.os,
        "browser": scan.browser,
        "country": scan.country,
        "city": scan.city,
        "referrer": scan.referrer,
        "scannedAt": _iso(scan.scanned_at),
    }
