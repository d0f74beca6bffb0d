from flask import Blueprint, request, current_app
from sqlalchemy import or_

from ..extensions import db
from ..models.qr_code import QRCode
from ..models.scan_log import ScanLog
from ..models.user import User
from ..repositories.user_repository import get_user_by_id
from ..routes.auth_routes import admin_required
from ..schemas.qr_schema import serialize_qr
from ..schemas.user_schema import serialize_user
from ..services.storage import delete_static_file
from ..utils.plan_limits import PRICING_PLANS
from ..utils.response import api_response

admin_bp = Blueprint("admin", __name__)

ROLES = ("user", "admin")


@admin_bp.route('/users')
@admin_required
def list_users(current_user):
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return api_response(True, "Users fetched", [serialize_user(u) for u in users])


@admin_bp.route('/users', methods=['PATCH'])
@admin_required
def update_user(current_user):
    data = request.get_json(silent=True) or {}
    role = data.get('role')
    plan = data.get('subscriptionPlan')

    user = get_user_by_id(data.get('userId'))
    if not user:
        return api_response(False, "User not found", None, 404)

    if role and role not in ROLES:
        return api_response(False, f"Invalid role '{role}'", None, 400)
    if plan and plan not in PRICING_PLANS:
        return api_response(False, f"Invalid subscription plan '{plan}'", None, 400)

    if role:
        user.role = role
    if plan:
        user.subscription_plan = plan
    db.session.commit()

    current_app.logger.info(f"Admin {current_user.id} updated user {user.id}: role={role} plan={plan}")
    return api_response(True, "User updated", serialize_user(user))


@admin_bp.route('/qrs')
@admin_required
def list_qrs(current_user):
    rows = db.session.query(QRCode, User.name, User.email).outerjoin(
        User, QRCode.user_id == User.id
    ).order_by(QRCode.created_at.desc(), QRCode.id.desc()).all()

    data = []
    for qr, owner_name, owner_email in rows:
        item = serialize_qr(qr)
        item["owner"] = {"name": owner_name, "email": owner_email}
        data.append(item)
    return api_response(True, "QR codes fetched", data)


@admin_bp.route('/purge-invalid-qrs', methods=['POST'])
@admin_required
def purge_invalid_qrs(current_user):
    """Delete QR codes missing a short code or their data."""
    invalid = QRCode.query.filter(or_(
        QRCode.short_url.is_(None),
        QRCode.short_url == "",
        QRCode.original_data.is_(None),
    )).all()

    ids = [qr.id for qr in invalid]
    if ids:
        ScanLog.query.filter(ScanLog.qr_code_id.in_(ids)).delete(synchronize_session=False)
        for qr in invalid:
            delete_static_file(qr.qr_image_url)
        QRCode.query.filter(QRCode.id.in_(ids)).delete(synchronize_session=False)
        db.session.commit()

    current_app.logger.info(f"Admin {current_user.id} purged {len(ids)} invalid QR codes")
    return api_response(True, f"Purged {len(ids)} invalid QR codes.", None, deletedCount=len(ids))
