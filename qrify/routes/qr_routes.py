import io
import json

from flask import Blueprint, request, current_app, Response
from markupsafe import escape
from PIL import Image, UnidentifiedImageError

from ..extensions import db, limiter
from ..repositories.qr_repository import (
    parse_qr_id, get_owned_qr, get_qr_by_short_url, list_user_qrs
)
from ..models.qr_code import QRCode
from ..routes.auth_routes import token_required
from ..schemas.qr_schema import serialize_qr
from ..services.qr_service import (
    create_qr_code, render_preview, delete_qr_code, get_qr_stats,
    parse_expiry, parse_scan_limit, QRValidationError
)
from ..services.storage import save_static_file, LOGO_FOLDER
from ..utils.plan_checker import PlanLimitError, subscription_guard
from ..utils.qr_generator import QRGenerationError
from ..utils.response import api_response
from ..utils.static_urls import build_static_url

qr_bp = Blueprint("qr", __name__)

LOGO_MAX_DIMENSIONS = (500, 500)

EMBED_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
<style>body{{margin:0;display:flex;align-items:center;justify-content:center;min-height:100vh;font-family:sans-serif}}
img{{max-width:100%;height:auto}}</style>
</head>
<body>
<div data-qrify-embed="{short_url}"></div>
<script src="{base_url}/embed.js" async></script>
</body>
</html>
"""

EMBED_SCRIPT = """(function () {
  var base = %(base_url)s;
  var nodes = document.querySelectorAll('[data-qrify-embed]');
  Array.prototype.forEach.call(nodes, function (node) {
    var code = node.getAttribute('data-qrify-embed');
    fetch(base + '/api/qr/embed/' + encodeURIComponent(code))
      .then(function (res) { return res.json(); })
      .then(function (body) {
        if (!body.success) { node.textContent = body.message; return; }
        var img = document.createElement('img');
        img.src = body.data.qrImageUrl;
        img.alt = body.data.qrName;
        node.appendChild(img);
      })
      .catch(function () { node.textContent = 'QR code unavailable'; });
  });
})();
"""


@qr_bp.route('/api/qr/generate', methods=['POST'])
@token_required
def generate(current_user):
    data = request.get_json(silent=True) or {}

    try:
        qr = create_qr_code(current_user, data)
    except QRValidationError as e:
        return api_response(False, str(e), None, 400)
    except PlanLimitError as e:
        return api_response(
            False, e.message, None, 403,
            upgradeRequired=e.upgrade_required,
            currentPlan=e.current_plan,
        )
    except QRGenerationError as e:
        return api_response(False, str(e), None, 400)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"QR Generation Error: {e}")
        return api_response(False, "Internal Server Error", None, 500)

    return api_response(True, "QR Code generated successfully", {
        "qrId": qr.id,
        "qrImageUrl": build_static_url(qr.qr_image_url),
        "shortUrl": qr.short_url,
    }, 201)


def _preview_rate_limit():
    limit = int(current_app.config.get("PREVIEW_RATE_LIMIT", 5))
    window = int(current_app.config.get("PREVIEW_RATE_WINDOW", 60))
    return f"{limit} per {window} seconds"


@qr_bp.route('/api/qr/preview', methods=['POST'])
@limiter.limit(_preview_rate_limit)
def preview():
    data = request.get_json(silent=True) or {}
    if not data.get("originalData"):
        return api_response(False, "Data is required", None, 400)

    try:
        path = render_preview(data)
    except QRGenerationError as e:
        return api_response(False, str(e), None, 400)
    except Exception as e:
        current_app.logger.error(f"QR Preview Error: {e}")
        return api_response(False, "Internal Server Error", None, 500)

    return api_response(True, "Preview generated", {"previewImageUrl": build_static_url(path)})


@qr_bp.route('/api/qr/upload-logo', methods=['POST'])
@token_required
def upload_logo(current_user):
    file = request.files.get("logo")
    if not file or not file.filename:
        return api_response(False, "No file provided", None, 400)

    if not (file.mimetype or "").startswith("image/"):
        return api_response(False, "File must be an image", None, 400)

    content = file.read()
    if len(content) > int(current_app.config.get("MAX_LOGO_BYTES", 2 * 1024 * 1024)):
        return api_response(False, "File must be less than 2MB", None, 400)

    try:
        image = Image.open(io.BytesIO(content))
        image.thumbnail(LOGO_MAX_DIMENSIONS)
        buffer = io.BytesIO()
        image.convert("RGBA").save(buffer, format="PNG")
    except (UnidentifiedImageError, OSError) as e:
        current_app.logger.warning(f"Logo Upload Error for user {current_user.id}: {e}")
        return api_response(False, "File must be an image", None, 400)

    path = save_static_file(buffer.getvalue(), LOGO_FOLDER)
    return api_response(True, "Logo uploaded", {"logoUrl": build_static_url(path)})


@qr_bp.route('/api/qr/update-link/<qr_id>', methods=['PATCH'])
@token_required
def update_link(current_user, qr_id):
    data = request.get_json(silent=True) or {}
    new_data = data.get("newOriginalData")
    if not new_data:
        return api_response(False, "New data is required", None, 400)

    qr = get_owned_qr(qr_id, current_user.id)
    if not qr:
        return api_response(False, "QR Code not found or you are not authorized to edit it.", None, 403)

    qr.original_data = new_data
    db.session.commit()

    return api_response(True, "Link updated successfully", {"originalData": qr.original_data})


@qr_bp.route('/api/qr/settings/<qr_id>', methods=['PATCH'])
@token_required
def update_settings(current_user, qr_id):
    qr = get_owned_qr(qr_id, current_user.id)
    if not qr:
        return api_response(False, "QR Code not found or you are not authorized to edit it.", None, 403)

    data = request.get_json(silent=True) or {}
    try:
        if "qrName" in data:
            name = (data.get("qrName") or "").strip()
            if not name:
                raise QRValidationError("qrName cannot be empty")
            qr.qr_name = name
        if "expiryDate" in data:
            qr.expiry_date = parse_expiry(data.get("expiryDate"))
        if "scanLimit" in data:
            qr.scan_limit = parse_scan_limit(data.get("scanLimit"))
        if "isActive" in data:
            activate = data.get("isActive")
            if not isinstance(activate, bool):
                raise QRValidationError("isActive must be true or false")
            if activate and not qr.is_active:
                subscription_guard(current_user)
            qr.is_active = activate
    except QRValidationError as e:
        db.session.rollback()
        return api_response(False, str(e), None, 400)
    except PlanLimitError as e:
        db.session.rollback()
        return api_response(
            False, e.message, None, 403,
            upgradeRequired=e.upgrade_required,
            currentPlan=e.current_plan,
        )

    db.session.commit()
    return api_response(True, "QR Code settings updated", serialize_qr(qr))


@qr_bp.route('/api/qr/delete/<qr_id>', methods=['DELETE'])
@token_required
def delete(current_user, qr_id):
    qr = get_owned_qr(qr_id, current_user.id)
    if not qr:
        return api_response(False, "QR Code not found or you are not authorized to delete it.", None, 403)

    try:
        delete_qr_code(qr)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"QR Delete Error: {e}")
        return api_response(False, "Internal Server Error", None, 500)

    return api_response(True, "QR Code deleted successfully", None)


@qr_bp.route('/api/qr/stats/<qr_id>')
def stats(qr_id):
    parsed = parse_qr_id(qr_id)
    if parsed is None:
        return api_response(False, "Invalid QR ID", None, 400)

    if not db.session.get(QRCode, parsed):
        return api_response(False, "QR Code not found", None, 404)

    return api_response(True, "Stats fetched", get_qr_stats(parsed))


@qr_bp.route('/api/qr/embed/<short_url>')
def embed_data(short_url):
    qr = get_qr_by_short_url(short_url)
    if not qr or not qr.is_active:
        return api_response(False, "QR code not found or inactive", None, 404)

    return api_response(True, "QR code found", {
        "qrImageUrl": build_static_url(qr.qr_image_url),
        "qrName": qr.qr_name,
        "shortUrl": qr.short_url,
    })


@qr_bp.route('/api/qrs')
@token_required
def my_qrs(current_user):
    return api_response(True, "QR codes fetched", [serialize_qr(qr) for qr in list_user_qrs(current_user.id)])


@qr_bp.route('/embed/<short_url>')
def embed_page(short_url):
    qr = get_qr_by_short_url(short_url)
    if not qr or not qr.is_active:
        return Response("QR code not found or inactive", status=404, mimetype="text/plain")

    html = EMBED_PAGE.format(
        title=escape(qr.qr_name),
        short_url=escape(qr.short_url),
        base_url=current_app.config.get("BASE_URL", ""),
    )
    return Response(html, mimetype="text/html")


@qr_bp.route('/embed.js')
def embed_script():
    script = EMBED_SCRIPT % {"base_url": json.dumps(current_app.config.get("BASE_URL", ""))}
    return Response(script, mimetype="application/javascript")
