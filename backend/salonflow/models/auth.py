from __future__ import annotations

from ..extensions import db
from salonflow.time_utils import to_utc_z
from .common import new_id


ROLE_MANAGER = "manager"
ROLE_BARBER = "barber"
VALID_ROLES = {ROLE_MANAGER, ROLE_BARBER}


class User(db.Model):
    """
    User profile for authentication and attribution.

    Every user holds exactly one role (manager or barber). The role is fixed
    at creation; update paths never accept it.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint("role IN ('manager', 'barber')", name="ck_users_role"),
        db.Index("ix_users_role_username", "role", "username"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    username = db.Column(db.String(64), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    role = db.Column(db.String(16), nullable=False)
    avatar_url = db.Column(db.String(512), nullable=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    @property
    def is_manager(self) -> bool:
        return self.role == ROLE_MANAGER

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "avatar_url": self.avatar_url,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }

    def to_profile_card(self) -> dict:
        """Public subset shown on the barber profile picker."""
        return {
            "id": self.id,
            "username": self.username,
            "avatar_url": self.avatar_url,
        }


class SessionToken(db.Model):
    """
    Login session. token_hash is the SHA-256 of the bearer token; the
    plaintext is never stored. Timeouts live in session_service.
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user_active", "user_id", "is_revoked"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)  # IPv6 max length

    user = db.relationship("User", backref=db.backref("session_tokens", lazy=True, cascade="all, delete-orphan"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
