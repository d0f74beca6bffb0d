from flask import Blueprint, request, current_app

from ..extensions import db
from ..models.user import User
from ..repositories.user_repository import normalize_email
from ..routes.auth_routes import token_required
from ..schemas.user_schema import serialize_user
from ..services.user_service import delete_account, export_user_data
from ..utils.passwords import hash_password, verify_password, is_strong_enough
from ..utils.response import api_response

user_bp = Blueprint("user", __name__)


@user_bp.route('/profile', methods=['PATCH'])
@token_required
def update_profile(current_user):
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    email = normalize_email(data.get('email'))

    if not name or not email:
        return api_response(False, "Name and email are required", None, 400)

    taken = User.query.filter(User.email == email, User.id != current_user.id).first()
    if taken:
        return api_response(False, "Email is already taken by another account", None, 409)

    current_user.name = name
    current_user.email = email
    db.session.commit()

    return api_response(True, "Profile updated successfully", serialize_user(current_user))


@user_bp.route('/change-password', methods=['POST'])
@token_required
def change_password(current_user):
    data = request.get_json(silent=True) or {}
    current_password = data.get('currentPassword')
    new_password = data.get('newPassword')

    if not current_password or not new_password:
        return api_response(False, "Current password and new password are required", None, 400)
    if not is_strong_enough(new_password):
        return api_response(False, "New password must be at least 6 characters", None, 400)

    if not current_user.password:
        return api_response(False, "Password change not available for Google accounts", None, 400)

    if not verify_password(current_user.password, current_password):
        return api_response(False, "Current password is incorrect", None, 401)

    current_user.password = hash_password(new_password)
    db.session.commit()

    return api_response(True, "Password changed successfully", None)


@user_bp.route('/delete-account', methods=['DELETE'])
@token_required
def delete_user_account(current_user):
    try:
        delete_account(current_user)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Delete Account Error: {e}")
        return api_response(False, "Internal Server Error", None, 500)

    return api_response(True, "Account and all associated data deleted successfully", None)


@user_bp.route('/export-data')
@token_required
def export_data(current_user):
    return api_response(True, "Data exported", export_user_data(current_user))
