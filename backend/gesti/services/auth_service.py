# Overview: Service-layer operations for auth; account creation and credential checks.

"""
Authentication Service

Accounts are the tenant boundary: each account owns its own products,
sales, contacts, expenses and settings. Passwords are hashed with bcrypt.
Session tokens are managed separately (see session_service.py).
"""

import re

import bcrypt

from ..errors import ConflictError, ValidationError
from ..extensions import db
from ..models import User
from gesti.time_utils import utcnow


EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_password_strength(password: str) -> None:
    """
    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit
    """
    if not isinstance(password, str) or len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise ValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise ValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check; malformed hashes never verify."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def normalize_email(email) -> str:
    email = (email or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise ValidationError("A valid email is required")
    return email


def create_user(name: str, email: str, password: str) -> User:
    """
    Create an account.

    Raises:
        ValidationError: missing name, bad email or weak password
        ConflictError: email already registered
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    email = normalize_email(email)

    if db.session.query(User).filter_by(email=email).first():
        raise ConflictError("Email already registered", details={"email": email})

    user = User(name=name, email=email, password_hash=hash_password(password))

    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Return the active user for valid credentials, None otherwise.
    Updates last_login_at on success.
    """
    user = db.session.query(User).filter(
        User.email == (email or "").strip().lower(),
        User.is_active.is_(True),
    ).first()

    if not user or not isinstance(password, str):
        return None

    if verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None
