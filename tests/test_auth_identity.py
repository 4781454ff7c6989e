from datetime import timedelta

from sqlalchemy import select

from app.auth.tokens import SESSION_TTL, issue_session_token
from app.models.base import now_utc
from app.models.user import User
from conftest import auth, login, mint_assertion, uniq_email

def verify(client, token: str):
    return client.post("/auth/verify-token", json={"idToken": token})

def test_first_verification_creates_user_with_defaults(client, db_session):
    email = uniq_email("fresh")
    r = verify(client, mint_assertion(email, sub="uid-fresh"))
    assert r.status_code == 200, r.text

    body = r.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == email
    assert user["name"] == email.split("@")[0]
    assert user["avatar"] is None
    assert body["data"]["token"]

    row = db_session.scalar(select(User).where(User.external_id == "uid-fresh"))
    assert row is not None and row.email == email

def test_repeat_verification_updates_profile_but_keeps_missing_fields(client, db_session):
    email = uniq_email("repeat")
    verify(client, mint_assertion(email, sub="uid-repeat", name="First", picture="https://img/a.png"))

    r = verify(client, mint_assertion(email, sub="uid-repeat"))
    assert r.status_code == 200, r.text
    user = r.json()["data"]["user"]
    assert user["name"] == "First"
    assert user["avatar"] == "https://img/a.png"

    r = verify(client, mint_assertion(email, sub="uid-repeat", name="Second"))
    assert r.json()["data"]["user"]["name"] == "Second"

    rows = db_session.scalars(select(User).where(User.external_id == "uid-repeat")).all()
    assert len(rows) == 1

def test_missing_email_claim_is_malformed(client):
    r = verify(client, mint_assertion(None, sub="uid-no-email"))
    assert r.status_code == 400, r.text
    assert r.json()["success"] is False

def test_missing_id_token_is_rejected(client):
    r = client.post("/auth/verify-token", json={})
    assert r.status_code == 400
    assert r.json()["success"] is False

def test_expired_assertion_is_rejected(client):
    r = verify(client, mint_assertion(uniq_email("late"), expires_in=-60))
    assert r.status_code == 401
    assert "expired" in r.json()["message"].lower()

def test_assertion_with_wrong_signature_is_rejected(client):
    token = mint_assertion(uniq_email("forged"), secret="not-the-configured-secret-at-all-nope")
    r = verify(client, token)
    assert r.status_code == 401

def test_placeholder_user_is_claimed_on_first_sign_in(client, db_session, owner_token, seeded_org, seeded_project):
    email = uniq_email("invitee")
    r = client.post(
        f"/member/add/{seeded_org['id']}/{seeded_project['id']}",
        json={"email": email, "role": "member"},
        headers=auth(owner_token),
    )
    assert r.status_code == 200, r.text
    placeholder_id = r.json()["data"]["user"]["id"]

    r = verify(client, mint_assertion(email, sub="uid-invitee", name="Invitee"))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["user"]["id"] == placeholder_id
    assert r.json()["data"]["user"]["name"] == "Invitee"

    rows = db_session.scalars(select(User).where(User.email == email)).all()
    assert len(rows) == 1
    assert rows[0].external_id == "uid-invitee"

def test_email_linked_to_other_identity_conflicts(client):
    email = uniq_email("taken")
    login(client, email, sub="uid-one")
    r = verify(client, mint_assertion(email, sub="uid-two"))
    assert r.status_code == 400
    assert r.json()["success"] is False

def test_me_returns_profile(client):
    email = uniq_email("me")
    token = login(client, email, name="Me Myself")
    r = client.get("/auth/me", headers=auth(token))
    assert r.status_code == 200, r.text
    user = r.json()["data"]["user"]
    assert user["email"] == email
    assert user["name"] == "Me Myself"

def test_me_requires_session(client):
    r = client.get("/auth/me")
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Unauthorized"}

def test_expired_session_is_rejected(client, db_session):
    email = uniq_email("stale")
    login(client, email)
    user = db_session.scalar(select(User).where(User.email == email))

    token = issue_session_token(user.id, user.email, now=now_utc() - SESSION_TTL - timedelta(seconds=5))
    r = client.get("/auth/me", headers=auth(token))
    assert r.status_code == 401

def test_garbage_session_is_rejected(client):
    r = client.get("/auth/me", headers=auth("not.a.jwt"))
    assert r.status_code == 401
