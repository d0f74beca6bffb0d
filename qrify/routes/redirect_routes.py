from urllib.parse import unquote

from flask import Blueprint, request, redirect, current_app

from ..repositories.qr_repository import get_qr_by_short_url
from ..services.scan_service import increment_scan_count, submit_scan_log
from ..utils.destination import resolve_destination, sanitize_url_scheme, is_valid_destination
from ..utils.response import api_response
from ..utils.short_codes import is_preview_code


redirect_bp = Blueprint("redirect", __name__)


def _text(message, status):
    return message, status, {"Content-Type": "text/plain; charset=utf-8"}


def _preview_redirect(short_url):
    # Preview codes never touch the scan counter or the scan log
    qr = get_qr_by_short_url(short_url)
    if qr and qr.is_active and qr.original_data:
        destination = qr.original_data
        if qr.qr_type == "url" or not qr.qr_type:
            destination = sanitize_url_scheme(destination)
        return redirect(destination, code=302)
    return _text("Preview QR Code Not Found", 404)


@redirect_bp.route('/<path:short_url>')
def redirection(short_url):
    try:
        short_url = unquote(short_url or "").strip()

        if is_preview_code(short_url):
            return _preview_redirect(short_url)

        current_app.logger.debug(f"[QR Redirect] Looking for shortUrl: {short_url!r}")
        qr = get_qr_by_short_url(short_url) if short_url else None

        if not qr:
            current_app.logger.warning(f"[QR Redirect] QR not found for shortUrl: {short_url!r}")
            return _text("QR Code Not Found", 404)

        if not qr.short_url or not (qr.original_data or "").strip():
            current_app.logger.error(f"[QR Redirect] Invalid legacy QR detected. QR ID: {qr.id}")
            return api_response(False, "Invalid legacy QR", None, 400)

        if not qr.is_active:
            return _text("This QR Code has been deactivated by the owner.", 403)

        # Checked before incrementing, so the last allowed scan still lands
        if qr.scan_limit_reached():
            return _text("This QR Code has reached its scan limit.", 403)

        if qr.is_expired():
            return _text("This QR Code has expired.", 403)

        qr_id, qr_type, destination = qr.id, qr.qr_type, qr.original_data

        increment_scan_count(qr_id)
        submit_scan_log(qr_id, request.headers, request.remote_addr)

        destination = resolve_destination(qr_type, destination)
        if not is_valid_destination(destination):
            current_app.logger.error(f"Invalid destination URL for QR {short_url}: {destination}")
            return _text("Invalid destination URL configured for this QR Code.", 500)

        current_app.logger.debug(f"[QR Redirect] Redirecting to: {destination}")
        return redirect(destination, code=302)

    except Exception as e:
        current_app.logger.error(f"Redirect Error: {e}")
        return _text("Internal Server Error", 500)
