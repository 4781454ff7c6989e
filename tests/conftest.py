import os
import time
import uuid

# configure before anything imports app.config
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["IDENTITY_SHARED_SECRET"] = "test-identity-secret-with-enough-bytes-for-hs256"
os.environ["IDENTITY_AUDIENCE"] = "mt-tasks-test"
os.environ["IDENTITY_ISSUER"] = "https://securetoken.example.test/mt-tasks-test"
os.environ["JWT_SECRET"] = "test-session-secret-with-enough-bytes-for-hs256"

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.db import get_db
from app.main import create_app
from app.models.base import Base

@pytest.fixture()
def db_session() -> Session:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    session: Session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()

@pytest.fixture()
def client(db_session: Session) -> TestClient:
    app = create_app()

    def _override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)

def mint_assertion(
    email: str | None,
    *,
    sub: str | None = None,
    name: str | None = None,
    picture: str | None = None,
    expires_in: int = 300,
    secret: str | None = None,
) -> str:
    now = int(time.time())
    claims: dict = {
        "aud": settings.identity_audience,
        "iss": settings.identity_issuer,
        "iat": now,
        "exp": now + expires_in,
    }
    if email is not None:
        claims["email"] = email
        claims["sub"] = sub or f"uid-{email}"
    elif sub is not None:
        claims["sub"] = sub
    if name is not None:
        claims["name"] = name
    if picture is not None:
        claims["picture"] = picture
    return jwt.encode(claims, secret or settings.identity_shared_secret, algorithm="HS256")

def login(client, email: str, **claims) -> str:
    r = client.post("/auth/verify-token", json={"idToken": mint_assertion(email, **claims)})
    assert r.status_code == 200, r.text
    return r.json()["data"]["token"]

def auth(token: str) -> dict[str, str]:
    return {"authorization": f"bearer {token}"}

def uniq_email(prefix: str) -> str:
    return f"{prefix}+{uuid.uuid4().hex[:10]}@example.com"

@pytest.fixture()
def owner_token(client) -> str:
    return login(client, uniq_email("owner"))

@pytest.fixture()
def seeded_org(client, owner_token) -> dict:
    r = client.post(
        "/organization/create",
        json={"name": f"seeded-org-{uuid.uuid4().hex[:6]}"},
        headers=auth(owner_token),
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]

@pytest.fixture()
def seeded_project(client, owner_token, seeded_org) -> dict:
    r = client.post(
        "/project/create",
        json={"name": "seeded project", "organizationId": seeded_org["id"]},
        headers=auth(owner_token),
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]
