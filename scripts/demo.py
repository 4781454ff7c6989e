"""Walk the API end to end against a running server.

Needs IDENTITY_SHARED_SECRET (and matching audience/issuer) configured on
the server, so identity assertions can be minted locally.
"""
from __future__ import annotations

import os
import time
import uuid

import jwt
import requests
from rich import print

from app.config import settings

BASE = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")

def post(path: str, *, token: str | None = None, json: dict | None = None) -> requests.Response:
    headers = {"content-type": "application/json"}
    if token:
        headers["authorization"] = f"bearer {token}"
    return requests.post(f"{BASE}{path}", headers=headers, json=json, timeout=10)

def put(path: str, *, token: str | None = None, json: dict | None = None) -> requests.Response:
    headers = {"content-type": "application/json"}
    if token:
        headers["authorization"] = f"bearer {token}"
    return requests.put(f"{BASE}{path}", headers=headers, json=json, timeout=10)

def get(path: str, *, token: str | None = None) -> requests.Response:
    headers = {}
    if token:
        headers["authorization"] = f"bearer {token}"
    return requests.get(f"{BASE}{path}", headers=headers, timeout=10)

def mint_assertion(email: str) -> str:
    if not settings.identity_shared_secret:
        raise RuntimeError("IDENTITY_SHARED_SECRET must be set to mint demo assertions")
    now = int(time.time())
    claims = {
        "sub": f"demo-{email}",
        "email": email,
        "aud": settings.identity_audience,
        "iss": settings.identity_issuer,
        "iat": now,
        "exp": now + 300,
    }
    return jwt.encode(claims, settings.identity_shared_secret, algorithm="HS256")

def login(email: str) -> str:
    r = post("/auth/verify-token", json={"idToken": mint_assertion(email)})
    r.raise_for_status()
    return r.json()["data"]["token"]

def wait_ready(timeout_s: float = 30.0) -> None:
    deadline = time.time() + timeout_s
    last_err: Exception | None = None

    while time.time() < deadline:
        try:
            r = get("/ready")
            if r.status_code == 200:
                return
        except requests.RequestException as e:
            last_err = e
        time.sleep(0.5)

    if last_err:
        raise RuntimeError(f"api not ready after {timeout_s}s (last error: {last_err})")
    raise RuntimeError(f"api not ready after {timeout_s}s")

def main() -> None:
    print("[bold]demo: sign in -> org -> project -> member -> task -> status[/bold]")

    wait_ready()
    print("[green]ready ok[/green]")

    suffix = uuid.uuid4().hex[:8]
    owner_email = f"owner+{suffix}@example.com"
    member_email = f"member+{suffix}@example.com"

    owner = login(owner_email)
    print("owner signed in")

    r = post("/organization/create", token=owner, json={"name": f"demo org {suffix}"})
    r.raise_for_status()
    org_id = r.json()["data"]["id"]
    print("created org:", org_id)

    r = post("/project/create", token=owner, json={"name": "demo project", "organizationId": org_id})
    r.raise_for_status()
    project_id = r.json()["data"]["id"]
    print("created project:", project_id)

    r = post(f"/member/add/{org_id}/{project_id}", token=owner, json={"email": member_email, "role": "member"})
    r.raise_for_status()
    member_id = r.json()["data"]["id"]
    print("added member:", member_email)

    member = login(member_email)
    print("member signed in (placeholder claimed)")

    r = post(
        "/task/create",
        token=owner,
        json={
            "name": "demo task",
            "organizationId": org_id,
            "projectId": project_id,
            "memberIds": [member_id],
        },
    )
    r.raise_for_status()
    task_id = r.json()["data"]["id"]
    print("created task:", task_id)

    r = put(f"/task/update-status/{task_id}", token=member, json={"status": "in-progress"})
    r.raise_for_status()
    print("member moved task to", r.json()["data"]["status"])

    r = get(f"/member/organization/{org_id}", token=owner)
    r.raise_for_status()
    print("organization members:", len(r.json()["data"]))
    print("[bold green]demo complete[/bold green]")

if __name__ == "__main__":
    main()
