"""
Authentication and session tests.

Verifies:
- Login by email, by username, and by profile (user_id)
- Failed logins return 401 and are recorded
- Logout revokes the token
- Idle and absolute timeouts
"""

from datetime import timedelta

import pytest

from salonflow.models import SecurityEvent, SessionToken
from salonflow.services import auth_service, session_service
from salonflow.time_utils import utcnow
from salonflow.validation import ValidationError
from conftest import BARBER_PASSWORD, MANAGER_PASSWORD, auth_headers


class TestPasswordHashing:

    def test_hash_and_verify(self, app):
        hashed = auth_service.hash_password("barber123")
        assert hashed != "barber123"
        assert auth_service.verify_password("barber123", hashed)
        assert not auth_service.verify_password("barber124", hashed)

    def test_short_password_rejected(self, app):
        with pytest.raises(ValidationError):
            auth_service.hash_password("12345")

    def test_account_email_from_username(self, app):
        assert auth_service.make_account_email("Alex Johnson") == "alexjohnson@salonflow.test"


class TestLogin:

    def test_login_with_email(self, client, manager):
        resp = client.post("/api/auth/login", json={"email": manager.email, "password": MANAGER_PASSWORD})

        assert resp.status_code == 200
        assert resp.json["token"]
        assert resp.json["user"]["role"] == "manager"
        assert "APPROVE_LOGS" in resp.json["permissions"]

    def test_login_with_username(self, client, barber):
        resp = client.post("/api/auth/login", json={"username": "Alex Johnson", "password": BARBER_PASSWORD})

        assert resp.status_code == 200
        assert resp.json["user"]["id"] == barber.id
        assert "APPROVE_LOGS" not in resp.json["permissions"]

    def test_login_with_profile(self, client, barber):
        resp = client.post("/api/auth/login", json={"user_id": barber.id, "password": BARBER_PASSWORD})
        assert resp.status_code == 200

    def test_login_sets_last_login(self, client, db_session, barber):
        assert barber.last_login_at is None
        client.post("/api/auth/login", json={"user_id": barber.id, "password": BARBER_PASSWORD})

        db_session.expire_all()
        assert barber.last_login_at is not None

    def test_wrong_password_is_401_and_logged(self, client, db_session, barber):
        resp = client.post("/api/auth/login", json={"username": "Alex Johnson", "password": "nope-nope"})

        assert resp.status_code == 401
        event = db_session.query(SecurityEvent).filter_by(event_type="LOGIN_FAILED").one()
        assert event.success is False
        assert "Alex Johnson" in event.reason

    def test_unknown_user_is_401(self, client, db_session):
        resp = client.post("/api/auth/login", json={"username": "ghost", "password": "whatever"})
        assert resp.status_code == 401

    def test_inactive_user_cannot_login(self, client, db_session, barber):
        barber.is_active = False
        db_session.commit()

        resp = client.post("/api/auth/login", json={"user_id": barber.id, "password": BARBER_PASSWORD})
        assert resp.status_code == 401

    def test_missing_fields_is_400(self, client, db_session):
        assert client.post("/api/auth/login", json={"username": "x"}).status_code == 400
        assert client.post("/api/auth/login", json={"password": "x"}).status_code == 400


class TestSessionLifecycle:

    def test_me(self, client, barber, barber_headers):
        resp = client.get("/api/auth/me", headers=barber_headers)

        assert resp.status_code == 200
        assert resp.json["user"]["username"] == "Alex Johnson"
        assert "password_hash" not in resp.json["user"]

    def test_logout_revokes_token(self, client, barber_headers):
        assert client.post("/api/auth/logout", headers=barber_headers).status_code == 200
        assert client.get("/api/auth/me", headers=barber_headers).status_code == 401

    def test_idle_timeout(self, client, db_session, barber):
        session, token = session_service.create_session(barber.id)
        session.last_used_at = utcnow() - session_service.SESSION_IDLE_TIMEOUT - timedelta(minutes=1)
        db_session.commit()

        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401
        db_session.refresh(session)
        assert session.is_revoked is True
        assert session.revoked_reason == "Idle timeout"

    def test_absolute_timeout(self, client, db_session, barber):
        session, token = session_service.create_session(barber.id)
        session.expires_at = utcnow() - timedelta(seconds=1)
        db_session.commit()

        assert session_service.validate_session(token) is None

    def test_deactivated_user_loses_session(self, client, db_session, barber, barber_headers):
        barber.is_active = False
        db_session.commit()

        assert client.get("/api/auth/me", headers=barber_headers).status_code == 401

    def test_token_stored_hashed(self, db_session, barber):
        _, token = session_service.create_session(barber.id)
        stored = db_session.query(SessionToken).one()

        assert stored.token_hash != token
        assert stored.token_hash == session_service.hash_token(token)

    def test_cleanup_removes_old_revoked_sessions(self, db_session, barber):
        old, old_token = session_service.create_session(barber.id)
        session_service.create_session(barber.id)
        session_service.revoke_session(old_token)
        old.created_at = utcnow() - timedelta(days=45)
        db_session.commit()

        assert session_service.cleanup_expired_sessions(retention_days=30) == 1
        assert db_session.query(SessionToken).count() == 1
