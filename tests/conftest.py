import os

# Point the app at an in-memory database before anything imports fixit.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FIREBASE_PROJECT_ID"] = "fixit-test"
os.environ["RATE_LIMIT_ENABLED"] = "true"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ.pop("REDIS_URL", None)

from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi import HTTPException  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from fixit.database import Base, SessionLocal, engine  # noqa: E402
from fixit.identity import get_identity_provider  # noqa: E402
from fixit.main import app  # noqa: E402
from fixit.models import User  # noqa: E402
from fixit.rate_limiter import reset_rate_limits  # noqa: E402
from fixit.shared.timestamps import utcnow  # noqa: E402


class FakeIdentityProvider:
    """In-memory stand-in for Firebase. The ID token of an account is its uid."""

    def __init__(self):
        self.accounts: dict[str, dict] = {}
        self.revoked: list[str] = []
        self.deleted: list[str] = []

    async def sign_up(self, email, password, display_name):
        if email in self.accounts:
            raise HTTPException(status_code=409, detail="Email already registered")
        uid = f"uid-{len(self.accounts) + 1}"
        self.accounts[email] = {"uid": uid, "password": password, "display_name": display_name}
        return await self.sign_in(email, password)

    async def sign_in(self, email, password):
        account = self.accounts.get(email)
        if not account or account["password"] != password:
            raise HTTPException(status_code=401, detail="Invalid email or password")
        return {
            "idToken": account["uid"],
            "refreshToken": f"refresh-{account['uid']}",
            "expiresIn": 3600,
            "uid": account["uid"],
            "email": email,
        }

    def sign_out(self, uid):
        self.revoked.append(uid)

    def delete_account(self, uid):
        self.deleted.append(uid)
        for email, account in list(self.accounts.items()):
            if account["uid"] == uid:
                del self.accounts[email]

    async def verify_id_token(self, token):
        if token.startswith("invalid"):
            raise HTTPException(status_code=401, detail="Invalid token signature")
        emails = {a["uid"]: e for e, a in self.accounts.items()}
        return {"sub": token, "email": emails.get(token, f"{token}@example.com"), "auth_time": 0}


def auth(uid: str) -> dict:
    return {"Authorization": f"Bearer {uid}"}


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    reset_rate_limits()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def identity():
    fake = FakeIdentityProvider()
    app.dependency_overrides[get_identity_provider] = lambda: fake
    return fake


@pytest.fixture
def client(identity):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make_user(uid, role="client", display_name=None, business_name=None, email=None):
        user = User(
            id=uid,
            email=email or f"{uid}@example.com",
            display_name=display_name or uid.replace("-", " ").title(),
            role=role,
            business_name=business_name if business_name or role != "provider" else f"{uid} Services",
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def provider(make_user):
    return make_user("provider-1", role="provider", display_name="Pat Plumber", business_name="Pat's Pipes")


@pytest.fixture
def other_provider(make_user):
    return make_user("provider-2", role="provider", display_name="Sam Sparks", business_name="Sparks Electric")


@pytest.fixture
def client_user(make_user):
    return make_user("client-1", role="client", display_name="Casey Client")


@pytest.fixture
def other_client(make_user):
    return make_user("client-2", role="client", display_name="Jordan Client")


@pytest.fixture
def admin(make_user):
    return make_user("admin-1", role="admin", display_name="Ada Admin")


@pytest.fixture
def create_service(client):
    def _create_service(provider_uid, **overrides):
        payload = {
            "name": "Pipe repair",
            "description": "Fix leaking pipes and taps",
            "price": 200.0,
            "duration": 90,
            "category": "plumbing",
        }
        payload.update(overrides)
        response = client.post("/services", json=payload, headers=auth(provider_uid))
        assert response.status_code == 201, response.text
        return response.json()

    return _create_service


@pytest.fixture
def create_booking(client):
    def _create_booking(client_uid, service_id, days_ahead=3, **overrides):
        payload = {
            "serviceId": service_id,
            "date": (utcnow() + timedelta(days=days_ahead)).isoformat(),
            "address": "12 Elm Street",
            "notes": "Ring twice",
            "paymentMethod": "card",
        }
        payload.update(overrides)
        response = client.post("/bookings", json=payload, headers=auth(client_uid))
        assert response.status_code == 201, response.text
        return response.json()

    return _create_booking


@pytest.fixture
def complete_booking(client, create_booking):
    """Book a service and walk the booking to completed"""

    def _complete_booking(client_uid, service):
        booking = create_booking(client_uid, service["id"])
        provider_headers = auth(service["providerId"])
        assert client.post(f"/bookings/{booking['id']}/start", headers=provider_headers).status_code == 200
        response = client.post(f"/bookings/{booking['id']}/complete", headers=provider_headers)
        assert response.status_code == 200, response.text
        return response.json()

    return _complete_booking
