# Overview: Service-layer operations for auth; account creation and credential checks.

"""
Authentication Service

Passwords are hashed with bcrypt; the cost factor comes from BCRYPT_ROUNDS.
Emails are the login identifier and are stored trimmed and lower-cased.
Session tokens are managed separately (see session_service.py).
"""

import re

import bcrypt
from flask import current_app

from ..errors import AuthError, ConflictError, ValidationError
from ..extensions import db
from ..models import User, USER_ROLES
from ..time_utils import utcnow

MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def validate_password_strength(password: str | None) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """Verify password against bcrypt hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(name: str, email: str, password: str, role: str = "user") -> User:
    """
    Create a new account.

    Raises:
        ValidationError: missing/short name, malformed email, unknown role
        PasswordValidationError: password too short
        ConflictError: email already registered
    """
    name = (name or "").strip()
    email = normalize_email(email)

    if len(name) < 2:
        raise ValidationError("Name must be at least 2 characters long")
    if len(name) > 50:
        raise ValidationError("Name cannot exceed 50 characters")
    if not EMAIL_PATTERN.fullmatch(email):
        raise ValidationError("Please provide a valid email address")
    if role not in USER_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(USER_ROLES)}")

    if db.session.query(User).filter_by(email=email).first():
        raise ConflictError("User already exists with this email")

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User:
    """
    Return the active user matching the credentials and stamp last_login_at.

    Raises AuthError on any mismatch without saying which part was wrong.
    """
    user = db.session.query(User).filter_by(email=normalize_email(email)).first()
    if not user or not user.is_active or not verify_password(password or "", user.password_hash):
        raise AuthError("Invalid credentials")

    user.last_login_at = utcnow()
    db.session.commit()
    return user
