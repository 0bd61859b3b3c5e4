"""
Pytest fixtures for SalonFlow backend tests.

Provides test database setup, users for both roles, a catalog service,
and test client helpers.
"""

from datetime import datetime

import pytest
from salonflow import create_app
from salonflow.extensions import db
from salonflow.models import User, Service, ServiceLog
from salonflow.services.auth_service import hash_password
from salonflow.services.permission_service import Actor


MANAGER_PASSWORD = "manager123"
BARBER_PASSWORD = "barber123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SALON_TIMEZONE': 'UTC',
        'ACCOUNT_EMAIL_DOMAIN': 'salonflow.test',
        'BCRYPT_ROUNDS': 4,
        'READ_RETRY_ATTEMPTS': 2,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_user(db_session, username: str, role: str, password: str, email: str | None = None) -> User:
    user = User(
        username=username,
        email=email or f"{username.lower().replace(' ', '')}@salonflow.test",
        role=role,
        password_hash=hash_password(password),
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def manager(db_session):
    return make_user(db_session, "Manager", "manager", MANAGER_PASSWORD)


@pytest.fixture(scope='function')
def barber(db_session):
    return make_user(db_session, "Alex Johnson", "barber", BARBER_PASSWORD)


@pytest.fixture(scope='function')
def other_barber(db_session):
    return make_user(db_session, "Maria Garcia", "barber", BARBER_PASSWORD)


@pytest.fixture(scope='function')
def manager_actor(manager):
    return Actor.from_user(manager)


@pytest.fixture(scope='function')
def barber_actor(barber):
    return Actor.from_user(barber)


@pytest.fixture(scope='function')
def haircut(db_session):
    """Service A: 1500 @ 45% commission."""
    service = Service(name="Haircut", price=1500.0, duration=30, commission_rate=0.45)
    db_session.add(service)
    db_session.commit()
    return service


@pytest.fixture(scope='function')
def beard_trim(db_session):
    service = Service(name="Beard Trim", price=800.0, duration=15, commission_rate=0.40)
    db_session.add(service)
    db_session.commit()
    return service


@pytest.fixture(scope='function')
def manager_headers(client, manager):
    return auth_headers(get_auth_token(client, manager.email, MANAGER_PASSWORD))


@pytest.fixture(scope='function')
def barber_headers(client, barber):
    return auth_headers(get_auth_token(client, barber.email, BARBER_PASSWORD))


def _add_log(
    db_session,
    *,
    barber_id: str,
    service: Service,
    status: str = "approved",
    price: float | None = None,
    created_at: datetime | None = None,
    approved_at: datetime | None = None,
) -> ServiceLog:
    """Insert a ServiceLog directly, with explicit timestamps."""
    price = service.price if price is None else price
    created_at = created_at or datetime(2024, 1, 15, 10, 0, 0)
    if status == "approved" and approved_at is None:
        approved_at = created_at
    log = ServiceLog(
        barber_id=barber_id,
        service_id=service.id,
        price=price,
        commission_rate=service.commission_rate,
        commission_amount=price * service.commission_rate,
        status=status,
        created_at=created_at,
        approved_at=approved_at if status == "approved" else None,
        rejected_at=created_at if status == "rejected" else None,
    )
    db_session.add(log)
    db_session.commit()
    return log


@pytest.fixture(scope='function')
def make_log(db_session):
    """Factory: make_log(barber_id=..., service=..., status=..., approved_at=...)."""
    def _make(**kwargs):
        return _add_log(db_session, **kwargs)
    return _make


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
