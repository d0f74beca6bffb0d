from flask import Blueprint, request, current_app

from ..routes.auth_routes import token_required
from ..repositories.user_repository import get_user_by_id
from ..services.dashboard_service import get_overview
from ..utils.response import api_response

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.route('/overview')
@token_required
def overview(current_user):
    user_id = current_user.id

    # Admins can look at another account's dashboard
    requested = request.args.get('userId')
    if requested and current_user.is_admin:
        target = get_user_by_id(requested)
        if not target:
            return api_response(False, "Valid User ID is required", None, 400)
        user_id = target.id

    try:
        data = get_overview(user_id)
    except Exception as e:
        current_app.logger.error(f"Dashboard overview error: {e}")
        return api_response(False, "Internal Server Error", None, 500)

    return api_response(True, "Dashboard overview", data)
