# Overview: Authentication and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service


def _unauthorized(message: str):
    return jsonify({"success": False, "message": message}), 401


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.current_user to the authenticated User and g.session_token to the
    raw token (logout revokes it).

    Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return _unauthorized("Authentication required")

        token = auth_header.split(" ", 1)[1].strip()
        user = session_service.validate_session(token)
        if not user:
            return _unauthorized("Invalid or expired token")

        g.current_user = user
        g.session_token = token
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """
    Require the authenticated user to hold one of the given roles.

    Must be stacked under @require_auth. Returns 403 otherwise.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = getattr(g, "current_user", None)
            if user is None:
                return _unauthorized("Authentication required")
            if user.role not in roles:
                return jsonify({"success": False, "message": "Forbidden"}), 403
            return f(*args, **kwargs)

        return decorated_function

    return decorator
