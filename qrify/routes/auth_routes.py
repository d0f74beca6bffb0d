from functools import wraps

from flask import Blueprint, request, current_app

from ..repositories.user_repository import get_user_by_email, get_user_by_id, normalize_email
from ..schemas.user_schema import serialize_user
from ..services.user_service import (
    create_user, verify_google_id_token, get_or_create_google_user, GoogleAuthError
)
from ..utils.jwt_helper import encode_token, decode_token
from ..utils.passwords import verify_password, is_strong_enough
from ..utils.response import api_response


auth_bp = Blueprint("auth", __name__)


def _bearer_token():
    auth_header = request.headers.get('Authorization', '')
    if " " in auth_header:
        return auth_header.split(" ", 1)[1].strip()
    return auth_header.strip() or None


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return api_response(False, "Token is missing!", None, 401)

        try:
            payload = decode_token(token)
        except Exception:
            return api_response(False, "Invalid or expired token!", None, 401)

        current_user = get_user_by_id(payload.get('user_id'))
        if not current_user:
            return api_response(False, "User not found!", None, 401)
        if not current_user.is_active:
            return api_response(False, "Account is deactivated", None, 403)

        return f(current_user, *args, **kwargs)

    return decorated


def admin_required(f):
    @wraps(f)
    @token_required
    def decorated(current_user, *args, **kwargs):
        if not current_user.is_admin:
            return api_response(False, "Admin access required", None, 403)
        return f(current_user, *args, **kwargs)

    return decorated


def _token_payload(user):
    return {
        "token": encode_token(user.id, user.role),
        "user": serialize_user(user),
    }


@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}

    name = (data.get('name') or '').strip()
    email = normalize_email(data.get('email'))
    password = data.get('password')

    if not name or not email or not password:
        return api_response(False, "Name, email and password are required", None, 400)
    if not is_strong_enough(password):
        return api_response(False, "Password must be at least 6 characters", None, 400)

    if get_user_by_email(email):
        return api_response(False, "User already exists", None, 409)

    user = create_user(name, email, password)
    current_app.logger.info(f"Registered user {user.id}")

    return api_response(True, "Signup successful", _token_payload(user), 201)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    email = data.get('email')
    password = data.get('password')

    if not email or not password:
        return api_response(False, "Email and password are required", None, 400)

    user = get_user_by_email(email)
    if not user or not verify_password(user.password, password):
        return api_response(False, "Invalid credentials", None, 401)
    if not user.is_active:
        return api_response(False, "Account is deactivated", None, 403)

    return api_response(True, "Login successful", _token_payload(user))


@auth_bp.route('/google', methods=['POST'])
def google_login():
    data = request.get_json(silent=True) or {}
    id_token = data.get('idToken') or data.get('credential')
    if not id_token:
        return api_response(False, "Google ID token is required", None, 400)

    try:
        claims = verify_google_id_token(id_token)
    except GoogleAuthError as e:
        current_app.logger.warning(f"Google sign-in rejected: {e}")
        return api_response(False, str(e), None, 401)

    user = get_or_create_google_user(claims)
    if not user.is_active:
        return api_response(False, "Account is deactivated", None, 403)

    return api_response(True, "Login successful", _token_payload(user))


@auth_bp.route('/session')
@token_required
def session(current_user):
    return api_response(True, "Session active", {
        "id": current_user.id,
        "name": current_user.name,
        "email": current_user.email,
        "role": current_user.role,
        "subscriptionPlan": current_user.subscription_plan,
    })
