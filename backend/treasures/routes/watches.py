# Overview: Flask API routes for the watch catalog; parses input and returns JSON responses.

"""
Catalog routes.

Browsing is public. Create, update and delete require the admin role.
"""
from flask import Blueprint, request, jsonify

from ..services import catalog_service
from ..decorators import require_auth, require_role

watches_bp = Blueprint("watches", __name__, url_prefix="/api/watches")


@watches_bp.get("")
def list_watches_route():
    """
    Query params:
    - page: int (1-indexed, default 1)
    - limit: int (default WATCHES_PAGE_SIZE, capped at WATCHES_MAX_PAGE_SIZE)
    - category: one of the catalog categories
    - sort: name, -name, price, -price (default newest first)
    """
    result = catalog_service.list_watches(
        page=request.args.get("page", type=int),
        limit=request.args.get("limit", type=int),
        category=request.args.get("category"),
        sort=request.args.get("sort"),
    )
    return jsonify({"success": True, **result}), 200


@watches_bp.get("/search")
def search_watches_route():
    watches = catalog_service.search_watches(request.args.get("query", ""))
    return jsonify({"success": True, "items": [w.to_dict() for w in watches], "count": len(watches)}), 200


@watches_bp.get("/discounted")
def discounted_watches_route():
    watches = catalog_service.list_discounted_watches()
    return jsonify({"success": True, "items": [w.to_dict() for w in watches], "count": len(watches)}), 200


@watches_bp.get("/categories")
def categories_route():
    return jsonify({"success": True, "items": catalog_service.category_counts()}), 200


@watches_bp.get("/<int:watch_id>")
def get_watch_route(watch_id: int):
    watch = catalog_service.get_watch_or_404(watch_id)
    return jsonify({"success": True, "data": watch.to_dict()}), 200


@watches_bp.post("")
@require_auth
@require_role("admin")
def create_watch_route():
    watch = catalog_service.create_watch(request.get_json(silent=True) or {})
    return jsonify({"success": True, "data": watch.to_dict()}), 201


@watches_bp.put("/<int:watch_id>")
@require_auth
@require_role("admin")
def update_watch_route(watch_id: int):
    watch = catalog_service.update_watch(watch_id, request.get_json(silent=True) or {})
    return jsonify({"success": True, "data": watch.to_dict()}), 200


@watches_bp.delete("/<int:watch_id>")
@require_auth
@require_role("admin")
def delete_watch_route(watch_id: int):
    cleanup = catalog_service.delete_watch(watch_id)
    return jsonify({"success": True, "message": "Watch deleted", **cleanup}), 200
