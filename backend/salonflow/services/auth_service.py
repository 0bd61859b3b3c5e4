# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

WHY: Every log, approval and report must be attributable to a user.
Uses bcrypt for password hashing.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 6 characters required
- Session tokens managed separately (see session_service.py)
- Inactive users cannot authenticate
"""

import bcrypt
from flask import current_app, has_app_context
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from ..models.auth import ROLE_BARBER, VALID_ROLES
from ..validation import ValidationError, ConflictError, enforce_password
from salonflow.time_utils import utcnow


def _bcrypt_rounds() -> int:
    if has_app_context():
        return int(current_app.config.get("BCRYPT_ROUNDS", 12))
    return 12


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated (minimum length) before hashing.
    """
    enforce_password(password)
    salt = bcrypt.gensalt(rounds=_bcrypt_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise (including
    malformed hashes). bcrypt.checkpw() is timing-safe.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash ("Invalid salt")
        return False


def make_account_email(username: str, domain: str | None = None) -> str:
    """
    Derive the sign-in email for a barber account.

    "Alex Johnson" -> "alexjohnson@<domain>"
    """
    if domain is None:
        domain = current_app.config.get("ACCOUNT_EMAIL_DOMAIN", "salonflow.local")
    local_part = "".join(username.split()).lower()
    return f"{local_part}@{domain}"


def create_user(
    username: str,
    password: str,
    role: str = ROLE_BARBER,
    email: str | None = None,
    avatar_url: str | None = None,
) -> User:
    """
    Create new user with bcrypt password hashing.

    Email defaults to make_account_email(username).

    Raises:
        ValidationError: bad role, blank username, or short password
        ConflictError: username or email already taken
    """
    if role not in VALID_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(sorted(VALID_ROLES))}")

    username = (username or "").strip()
    if not username:
        raise ValidationError("username cannot be blank")
    if len(username) > 64:
        raise ValidationError("username exceeds max length 64")

    email = (email or make_account_email(username)).strip().lower()

    existing = db.session.query(User).filter(
        db.or_(User.username == username, User.email == email)
    ).first()
    if existing:
        raise ConflictError("Username or email already exists")

    password_hash = hash_password(password)

    user = User(
        username=username,
        email=email,
        role=role,
        avatar_url=avatar_url,
        password_hash=password_hash,
        is_active=True,
    )

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username or email already exists")
    return user


def _finish_login(user: User, password: str) -> User | None:
    if verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user
    return None


def authenticate(identifier: str, password: str) -> User | None:
    """
    Authenticate user with username-or-email and password.

    Returns User if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    identifier = (identifier or "").strip()
    if not identifier:
        return None

    user = db.session.query(User).filter(
        db.or_(User.username == identifier, User.email == identifier.lower()),
        User.is_active.is_(True),
    ).first()

    if not user:
        return None
    return _finish_login(user, password)


def authenticate_profile(user_id: str, password: str) -> User | None:
    """
    Authenticate a barber picked from the profile list.

    Only active barber accounts can sign in this way; managers use
    authenticate().
    """
    user = db.session.query(User).filter_by(
        id=user_id,
        role=ROLE_BARBER,
        is_active=True,
    ).first()
    if not user:
        return None
    return _finish_login(user, password)


def list_login_profiles() -> list[User]:
    """Active barbers for the sign-in profile picker, ordered by username."""
    return (
        db.session.query(User)
        .filter(User.role == ROLE_BARBER, User.is_active.is_(True))
        .order_by(User.username.asc())
        .all()
    )
