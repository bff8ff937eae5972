# Overview: Flask API routes for store branches.

from flask import Blueprint, request, jsonify

from ..services import branch_service
from ..decorators import require_auth, require_role

branches_bp = Blueprint("branches", __name__, url_prefix="/api/branches")


@branches_bp.get("")
def list_branches_route():
    branches = branch_service.list_branches()
    return jsonify({"success": True, "data": [b.to_dict() for b in branches]}), 200


@branches_bp.post("")
@require_auth
@require_role("admin")
def create_branch_route():
    """
    Body: {name, position: {lat, lng}, phoneNumber, openingHour, closingHour, address?}
    Hours are HH:MM.
    """
    branch = branch_service.create_branch(request.get_json(silent=True) or {})
    return jsonify({"success": True, "data": branch.to_dict()}), 201
