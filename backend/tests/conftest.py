import os
import tempfile
from pathlib import Path

# Point the app at a throwaway database and storage folder before it is imported.
_TMP = Path(tempfile.mkdtemp(prefix="venturehub-tests-"))
os.environ["ENV"] = "dev"
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["STORAGE_DIR"] = str(_TMP / "storage")
os.environ["EXPOSE_DEBUG_CODES"] = "true"
os.environ["AUTH_RATE_LIMIT_PER_MIN"] = "1000"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from venturehub import models
from venturehub.database import engine
from venturehub.main import app
from venturehub.routes.auth import auth_rate_limiter
from venturehub.services.auth import hash_password

PASSWORD = "Str0ng!Pass"


@pytest.fixture(autouse=True)
def reset_db():
    """Recreate every table so each test starts from an empty database."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    auth_rate_limiter.reset()
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def startup_payload(email: str, **extra) -> dict:
    payload = {
        "email": email,
        "password": PASSWORD,
        "name": "Ada Founder",
        "main_account_type": "startup",
        "startup_name": "Rocket Labs",
        "industry": "Fintech",
        "stage": "MVP",
        "phone": "+15550100",
    }
    payload.update(extra)
    return payload


def investor_payload(email: str, **extra) -> dict:
    payload = {
        "email": email,
        "password": PASSWORD,
        "name": "Ivan Investor",
        "main_account_type": "investor",
        "investor_type": "vc",
        "preferred_industries": ["Fintech", "Health"],
        "preferred_stage": "MVP",
        "average_ticket_size": "$50k-$100k",
        "company": "Acme Ventures",
    }
    payload.update(extra)
    return payload


@pytest.fixture
def signup(client):
    """Sign up and verify through the API; returns the verify-otp response."""

    def _signup(payload: dict) -> dict:
        r = client.post("/auth/signup", json=payload)
        assert r.status_code == 201, r.text
        code = r.json()["debug_code"]
        v = client.post("/auth/verify-otp", json={"email": payload["email"], "code": code})
        assert v.status_code == 200, v.text
        return v.json()

    return _signup


@pytest.fixture
def super_admin(session):
    """A super admin created directly in the database; returns `(admin_id, token)`."""
    account = models.Account(
        email="root@venturehub.test",
        password_hash=hash_password(PASSWORD),
        name="Root Admin",
        account_type="admin",
        email_confirmed_at=models.utcnow(),
    )
    session.add(account)
    session.commit()
    session.refresh(account)
    session.add(models.Admin(id=account.id, email=account.email, name=account.name, admin_level="super"))
    session.commit()
    return account.id


@pytest.fixture
def admin_token(client, super_admin):
    r = client.post("/auth/signin", json={"email": "root@venturehub.test", "password": PASSWORD})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


@pytest.fixture
def approve(client, admin_token):
    def _approve(user_type: str, user_id: str, **extra) -> dict:
        body = {"status": "approved", **extra}
        r = client.patch(f"/admin/users/{user_type}/{user_id}/status", json=body, headers=auth_header(admin_token))
        assert r.status_code == 200, r.text
        return r.json()

    return _approve


@pytest.fixture
def approved_startup(signup, approve):
    """An approved startup; returns the verify-otp response."""
    result = signup(startup_payload("founder@rocket.test"))
    approve("startup", result["profile_id"])
    return result


@pytest.fixture
def approved_investor(signup, approve):
    result = signup(investor_payload("ivan@acme.test", calendly_link="https://calendly.com/ivan"))
    approve("investor", result["profile_id"])
    return result
