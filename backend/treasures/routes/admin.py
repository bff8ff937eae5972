# Overview: Flask API routes for the admin dashboard.

from flask import Blueprint, request, jsonify

from ..services import reporting_service, user_service
from ..decorators import require_auth, require_role

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/sales-stats")
@require_auth
@require_role("admin")
def sales_stats_route():
    """Top 10 watches, quantity by category and by purchaser sex."""
    return jsonify({"success": True, "data": reporting_service.sales_stats()}), 200


@admin_bp.get("/users")
@require_auth
@require_role("admin")
def list_users_route():
    users = user_service.list_users()
    return jsonify({"success": True, "data": [u.to_dict() for u in users]}), 200


@admin_bp.get("/users/search")
@require_auth
@require_role("admin")
def search_users_route():
    users = user_service.search_users_by_name(request.args.get("name", ""))
    return jsonify({"success": True, "data": [u.to_dict() for u in users]}), 200


@admin_bp.get("/purchase-history/<int:user_id>")
@require_auth
@require_role("admin")
def user_purchase_history_route(user_id: int):
    records = user_service.purchase_history(user_id)
    return jsonify({"success": True, "data": [r.to_dict() for r in records]}), 200
