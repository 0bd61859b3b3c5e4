# Overview: Service-layer operations for login sessions of managers and barbers.

"""
Bearer-token sessions for the SalonFlow API.

A session lasts at most SESSION_ABSOLUTE_TIMEOUT and is revoked once it has
been unused for SESSION_IDLE_TIMEOUT. Only the SHA-256 hash of a token is
stored; the plaintext goes back to the client once, at login. Deactivating
or deleting a barber, or resetting their password, ends their sessions.
"""

import secrets
import hashlib
from dataclasses import dataclass
from datetime import timedelta
from ..extensions import db
from ..models import SessionToken, User
from salonflow.time_utils import utcnow


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)
SESSION_IDLE_TIMEOUT = timedelta(hours=2)


@dataclass
class SessionContext:
    """The authenticated user and their session row."""
    user: User
    session: SessionToken


def generate_token() -> str:
    """New plaintext bearer token, 64 hex characters."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    # Tokens are random, so an unsalted SHA-256 is enough for lookup.
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    user_id: str,
    user_agent: str | None = None,
    ip_address: str | None = None
) -> tuple[SessionToken, str]:
    """
    Open a session for a user and commit it.

    Returns (session, plaintext_token). Raises ValueError for an unknown user.
    """
    user = db.session.query(User).filter_by(id=user_id).first()
    if not user:
        raise ValueError("User not found")

    plaintext_token = generate_token()
    token_hash = hash_token(plaintext_token)

    now = utcnow()
    expires_at = now + SESSION_ABSOLUTE_TIMEOUT

    session = SessionToken(
        user_id=user_id,
        token_hash=token_hash,
        created_at=now,
        last_used_at=now,
        expires_at=expires_at,
        user_agent=user_agent,
        ip_address=ip_address,
        is_revoked=False
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def validate_session(token: str) -> SessionContext | None:
    """
    Resolve a bearer token to its user, or None.

    Idle sessions and sessions of inactive users are revoked on the spot.
    A good token bumps last_used_at.
    """
    token_hash = hash_token(token)
    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=token_hash,
        is_revoked=False
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        return None

    idle_time = now - session.last_used_at
    if idle_time > SESSION_IDLE_TIMEOUT:
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = "Idle timeout"
        db.session.commit()
        return None

    user = session.user

    if not user or not user.is_active:
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = "User account deactivated"
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()

    return SessionContext(user=user, session=session)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """Logout. False if the token was unknown or already revoked."""
    token_hash = hash_token(token)

    session = db.session.query(SessionToken).filter_by(
        token_hash=token_hash,
        is_revoked=False
    ).first()

    if not session:
        return False

    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason

    db.session.commit()
    return True


def revoke_all_user_sessions(user_id: str, reason: str = "Revoke all sessions") -> int:
    """
    Mark every open session of a user revoked and return how many.

    Leaves the commit to the caller, so the password reset and the
    revocations land together.
    """
    now = utcnow()

    sessions = db.session.query(SessionToken).filter_by(
        user_id=user_id,
        is_revoked=False
    ).all()

    for session in sessions:
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = reason

    return len(sessions)


def cleanup_expired_sessions(retention_days: int = 30) -> int:
    """Delete expired or revoked sessions created more than retention_days ago."""
    now = utcnow()
    cutoff = now - timedelta(days=retention_days)

    deleted = db.session.query(SessionToken).filter(
        db.or_(
            SessionToken.expires_at < now,
            SessionToken.is_revoked == True  # noqa: E712
        ),
        SessionToken.created_at < cutoff
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
