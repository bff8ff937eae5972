# Overview: Flask API routes for registration, login and session management.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..decorators import require_auth

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _issue_session(user):
    _, token = session_service.create_session(
        user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return {"success": True, "token": token, "user": user.to_dict()}


@auth_bp.post("/register")
def register_route():
    """
    Create a shopper account and sign it in.

    Body: {name, email, password}. Password must be at least 6 characters.
    Returns 409 if the email is taken.
    """
    data = request.get_json(silent=True) or {}
    user = auth_service.create_user(
        name=data.get("name"),
        email=data.get("email"),
        password=data.get("password"),
    )
    current_app.logger.info("Registered user %s", user.id)
    return jsonify(_issue_session(user)), 201


@auth_bp.post("/login")
def login_route():
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")
    if not email or not password:
        return jsonify({"success": False, "message": "email and password required"}), 400

    user = auth_service.authenticate(email, password)
    return jsonify(_issue_session(user)), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(g.session_token)
    return jsonify({"success": True, "message": "Logged out"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"success": True, "user": g.current_user.to_dict()}), 200
