# Overview: Flask API routes for the signed-in shopper: cart, checkout, history and profile.

"""
Shopper routes.

All routes act on g.current_user; there is no way to address another
user's cart or history from here (admins use /api/admin).
"""
from flask import Blueprint, request, jsonify, g

from ..errors import ValidationError
from ..services import cart_service, checkout_service, user_service
from ..decorators import require_auth

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


def _json_object() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    return data


def _history_payload(user_id: int) -> list[dict]:
    return [p.to_dict() for p in user_service.purchase_history(user_id)]


@users_bp.get("/cart")
@require_auth
def get_cart_route():
    lines = cart_service.get_cart(g.current_user.id)
    return jsonify({"success": True, "data": [line.to_dict() for line in lines]}), 200


@users_bp.post("/cart")
@require_auth
def replace_cart_route():
    """
    Replace the cart wholesale.

    Body: array of {watch, quantity}. Lines pointing at unknown watches or
    carrying a non-positive quantity are dropped; the response reports how
    many.
    """
    payload = request.get_json(silent=True)
    lines, dropped = cart_service.replace_cart(g.current_user.id, payload)
    return jsonify({
        "success": True,
        "data": [line.to_dict() for line in lines],
        "dropped": dropped,
    }), 200


@users_bp.post("/purchase")
@require_auth
def purchase_route():
    """
    Check out the current cart.

    Body: {shippingAddress: {...}}. Responds 200 whenever the cart was
    settled, even if some lines were out of stock; those watch names come
    back in "warnings" and in the message.
    """
    data = _json_object()
    user_id = g.current_user.id
    result = checkout_service.checkout(user_id, data.get("shippingAddress"))

    return jsonify({
        "success": True,
        "message": result.message,
        "warnings": result.warnings,
        "totalPriceCents": result.total_price_cents,
        "data": _history_payload(user_id),
    }), 200


@users_bp.get("/purchase-history")
@require_auth
def purchase_history_route():
    return jsonify({"success": True, "data": _history_payload(g.current_user.id)}), 200


@users_bp.get("/track-order/<order_number>")
@require_auth
def track_order_route(order_number: str):
    result = user_service.track_order(g.current_user.id, order_number)
    return jsonify({"success": True, **result}), 200


@users_bp.put("/profile")
@require_auth
def update_profile_route():
    user = user_service.update_profile(g.current_user.id, _json_object())
    return jsonify({"success": True, "user": user.to_dict()}), 200


@users_bp.put("/addresses")
@require_auth
def replace_addresses_route():
    data = _json_object()
    user = user_service.replace_addresses(g.current_user.id, data.get("addresses"))
    return jsonify({"success": True, "addresses": [a.to_dict() for a in user.addresses]}), 200
