# Overview: Domain exceptions raised by services and rendered by the app-level error handlers.

from __future__ import annotations


class ShopError(Exception):
    """Base class for errors that map to a JSON error envelope."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ShopError):
    """400-level input problem."""


class EmptyCartError(ShopError):
    """Checkout attempted with nothing in the cart."""


class AuthError(ShopError):
    status_code = 401


class ForbiddenError(ShopError):
    status_code = 403


class NotFoundError(ShopError):
    status_code = 404


class ConflictError(ShopError):
    """409-level business rule conflict (e.g., duplicate email)."""
    status_code = 409
