import uuid

import pytest
from sqlalchemy import select

from app.errors import MembershipScopeError
from app.models.enums import Role
from app.models.membership import Member
from app.models.user import User
from conftest import auth, login, uniq_email

def add_member(client, token: str, org_id: str, project_id: str, email: str, role: str = "member"):
    return client.post(
        f"/member/add/{org_id}/{project_id}",
        json={"email": email, "role": role},
        headers=auth(token),
    )

def project_members(client, token: str, org_id: str, project_id: str):
    return client.get(f"/member/get/{org_id}/{project_id}", headers=auth(token))

def test_add_member_creates_placeholder_user(client, db_session, owner_token, seeded_org, seeded_project):
    email = uniq_email("newbie")
    r = add_member(client, owner_token, seeded_org["id"], seeded_project["id"], email, "viewer")
    assert r.status_code == 200, r.text
    member = r.json()["data"]
    assert member["role"] == "viewer"
    assert member["status"] is True
    assert member["projectId"] == seeded_project["id"]
    assert member["user"]["email"] == email
    assert member["addedBy"]["id"] == seeded_org["ownerId"]

    user = db_session.scalar(select(User).where(User.email == email))
    assert user.external_id is None
    assert user.name == email.split("@")[0]

def test_duplicate_active_membership_is_rejected(client, db_session, owner_token, seeded_org, seeded_project):
    email = uniq_email("twice")
    assert add_member(client, owner_token, seeded_org["id"], seeded_project["id"], email, "owner").status_code == 200

    r = add_member(client, owner_token, seeded_org["id"], seeded_project["id"], email, "owner")
    assert r.status_code == 400
    assert r.json()["message"] == "User is already a member of this project"

    user = db_session.scalar(select(User).where(User.email == email))
    rows = db_session.scalars(select(Member).where(Member.user_id == user.id)).all()
    assert len(rows) == 1

def test_invalid_role_is_rejected(client, owner_token, seeded_org, seeded_project):
    r = add_member(client, owner_token, seeded_org["id"], seeded_project["id"], uniq_email("x"), "admin")
    assert r.status_code == 400

def test_only_owner_or_creator_can_add(client, owner_token, seeded_org, seeded_project):
    email = uniq_email("member")
    add_member(client, owner_token, seeded_org["id"], seeded_project["id"], email, "member")
    member = login(client, email)

    r = add_member(client, member, seeded_org["id"], seeded_project["id"], uniq_email("friend"))
    assert r.status_code == 403

def test_add_to_project_of_other_org_is_refused(client, owner_token, seeded_org):
    other_owner = login(client, uniq_email("other-owner"))
    other_org = client.post("/organization/create", json={"name": "other-org"}, headers=auth(other_owner)).json()["data"]
    other_project = client.post(
        "/project/create",
        json={"name": "theirs", "organizationId": other_org["id"]},
        headers=auth(other_owner),
    ).json()["data"]

    r = add_member(client, owner_token, seeded_org["id"], other_project["id"], uniq_email("x"))
    assert r.status_code == 403

def test_view_project_members_rules(client, owner_token, seeded_org, seeded_project):
    email = uniq_email("viewer")
    add_member(client, owner_token, seeded_org["id"], seeded_project["id"], email, "viewer")
    viewer = login(client, email)

    r = project_members(client, viewer, seeded_org["id"], seeded_project["id"])
    assert r.status_code == 200, r.text
    emails = {m["user"]["email"] for m in r.json()["data"]}
    assert email in emails
    assert len(emails) == 2

    stranger = login(client, uniq_email("stranger"))
    r = project_members(client, stranger, seeded_org["id"], seeded_project["id"])
    assert r.status_code == 403

def test_view_project_members_unknown_project_is_404(client, owner_token, seeded_org):
    r = project_members(client, owner_token, seeded_org["id"], str(uuid.uuid4()))
    assert r.status_code == 404

def test_organization_members_are_aggregated_per_user(client, owner_token, seeded_org, seeded_project):
    second = client.post(
        "/project/create",
        json={"name": "second", "organizationId": seeded_org["id"]},
        headers=auth(owner_token),
    ).json()["data"]

    email = uniq_email("multi")
    add_member(client, owner_token, seeded_org["id"], seeded_project["id"], email, "viewer")
    add_member(client, owner_token, seeded_org["id"], second["id"], email, "owner")

    r = client.get(f"/member/organization/{seeded_org['id']}", headers=auth(owner_token))
    assert r.status_code == 200, r.text
    rows = {m["user"]["email"]: m for m in r.json()["data"]}
    assert len(rows) == 2

    multi = rows[email]
    assert multi["role"] == "owner"
    assert {p["id"] for p in multi["projects"]} == {seeded_project["id"], second["id"]}

    owner_row = [m for e, m in rows.items() if e != email][0]
    assert owner_row["role"] == "owner"
    assert owner_row["project"] is None
    assert len(owner_row["projects"]) == 2

def test_organization_members_visible_to_members_only(client, owner_token, seeded_org, seeded_project):
    email = uniq_email("viewer")
    add_member(client, owner_token, seeded_org["id"], seeded_project["id"], email, "viewer")
    viewer = login(client, email)
    assert client.get(f"/member/organization/{seeded_org['id']}", headers=auth(viewer)).status_code == 200

    stranger = login(client, uniq_email("stranger"))
    assert client.get(f"/member/organization/{seeded_org['id']}", headers=auth(stranger)).status_code == 403

def test_update_member_patches_role_status_and_user(client, db_session, owner_token, seeded_org, seeded_project):
    email = uniq_email("patchme")
    member_id = add_member(client, owner_token, seeded_org["id"], seeded_project["id"], email).json()["data"]["id"]

    new_email = uniq_email("patched")
    r = client.put(
        f"/member/update/{seeded_org['id']}/{seeded_project['id']}/{member_id}",
        json={"role": "viewer", "status": False, "name": "Renamed", "email": new_email},
        headers=auth(owner_token),
    )
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["role"] == "viewer"
    assert data["status"] is False
    assert data["user"]["name"] == "Renamed"
    assert data["user"]["email"] == new_email

    # the shared user record changed, not just this membership
    user = db_session.get(User, uuid.UUID(data["user"]["id"]))
    assert (user.name, user.email) == ("Renamed", new_email)

def test_reactivating_member_with_active_duplicate_is_rejected(client, db_session, owner_token, seeded_org, seeded_project):
    email = uniq_email("again")
    base = f"/member/update/{seeded_org['id']}/{seeded_project['id']}"
    first = add_member(client, owner_token, seeded_org["id"], seeded_project["id"], email).json()["data"]
    client.put(f"{base}/{first['id']}", json={"status": False}, headers=auth(owner_token))
    second = add_member(client, owner_token, seeded_org["id"], seeded_project["id"], email)
    assert second.status_code == 200, second.text

    r = client.put(f"{base}/{first['id']}", json={"status": True}, headers=auth(owner_token))
    assert r.status_code == 400
    assert r.json()["message"] == "User is already a member of this project"

    user_id = uuid.UUID(first["user"]["id"])
    active = db_session.scalars(
        select(Member).where(Member.user_id == user_id, Member.status.is_(True))
    ).all()
    assert [m.id for m in active] == [uuid.UUID(second.json()["data"]["id"])]

def test_reactivating_member_without_duplicate_succeeds(client, owner_token, seeded_org, seeded_project):
    member = add_member(client, owner_token, seeded_org["id"], seeded_project["id"], uniq_email("back")).json()["data"]
    url = f"/member/update/{seeded_org['id']}/{seeded_project['id']}/{member['id']}"

    assert client.put(url, json={"status": False}, headers=auth(owner_token)).json()["data"]["status"] is False
    r = client.put(url, json={"status": True}, headers=auth(owner_token))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["status"] is True

def test_update_member_rejects_bad_email_and_role(client, owner_token, seeded_org, seeded_project):
    member_id = add_member(client, owner_token, seeded_org["id"], seeded_project["id"], uniq_email("m")).json()["data"]["id"]
    url = f"/member/update/{seeded_org['id']}/{seeded_project['id']}/{member_id}"

    assert client.put(url, json={"email": "not-an-email"}, headers=auth(owner_token)).status_code == 400
    assert client.put(url, json={"role": "admin"}, headers=auth(owner_token)).status_code == 400

def test_update_member_forbidden_for_plain_members(client, owner_token, seeded_org, seeded_project):
    email = uniq_email("member")
    add_member(client, owner_token, seeded_org["id"], seeded_project["id"], email)
    target = add_member(client, owner_token, seeded_org["id"], seeded_project["id"], uniq_email("t")).json()["data"]
    member = login(client, email)

    r = client.put(
        f"/member/update/{seeded_org['id']}/{seeded_project['id']}/{target['id']}",
        json={"role": "owner"},
        headers=auth(member),
    )
    assert r.status_code == 403

def test_delete_member(client, db_session, owner_token, seeded_org, seeded_project):
    member_id = add_member(client, owner_token, seeded_org["id"], seeded_project["id"], uniq_email("bye")).json()["data"]["id"]

    r = client.delete(
        f"/member/delete/{seeded_org['id']}/{seeded_project['id']}/{member_id}",
        headers=auth(owner_token),
    )
    assert r.status_code == 200, r.text
    assert r.json()["data"]["id"] == member_id
    assert db_session.get(Member, uuid.UUID(member_id)) is None

def test_owner_role_member_can_never_be_deleted(client, owner_token, seeded_org, seeded_project):
    # the project owner record created with the project
    rows = project_members(client, owner_token, seeded_org["id"], seeded_project["id"]).json()["data"]
    own_record = rows[0]
    assert own_record["role"] == "owner"

    other = add_member(client, owner_token, seeded_org["id"], seeded_project["id"], uniq_email("co"), "owner").json()["data"]

    for target in (own_record, other):
        r = client.delete(
            f"/member/delete/{seeded_org['id']}/{seeded_project['id']}/{target['id']}",
            headers=auth(owner_token),
        )
        assert r.status_code == 403
        assert r.json()["message"] == "Cannot delete project owner"

def test_cannot_delete_own_membership(client, db_session, owner_token, seeded_org, seeded_project):
    owner_id = uuid.UUID(seeded_org["ownerId"])
    m = Member(
        user_id=owner_id,
        organization_id=uuid.UUID(seeded_org["id"]),
        project_id=uuid.UUID(seeded_project["id"]),
        role=Role.member,
        status=False,
        added_by_id=owner_id,
    )
    db_session.add(m)
    db_session.commit()

    r = client.delete(
        f"/member/delete/{seeded_org['id']}/{seeded_project['id']}/{m.id}",
        headers=auth(owner_token),
    )
    assert r.status_code == 403
    assert r.json()["message"] == "You cannot delete yourself"

def test_delete_member_of_other_project_is_rejected(client, owner_token, seeded_org, seeded_project):
    second = client.post(
        "/project/create",
        json={"name": "second", "organizationId": seeded_org["id"]},
        headers=auth(owner_token),
    ).json()["data"]
    member_id = add_member(client, owner_token, seeded_org["id"], second["id"], uniq_email("elsewhere")).json()["data"]["id"]

    r = client.delete(
        f"/member/delete/{seeded_org['id']}/{seeded_project['id']}/{member_id}",
        headers=auth(owner_token),
    )
    assert r.status_code == 400

def test_member_scope_is_checked_before_write(db_session, client, owner_token, seeded_org):
    other_owner = login(client, uniq_email("other-owner"))
    other_org = client.post("/organization/create", json={"name": "elsewhere"}, headers=auth(other_owner)).json()["data"]
    other_project = client.post(
        "/project/create",
        json={"name": "theirs", "organizationId": other_org["id"]},
        headers=auth(other_owner),
    ).json()["data"]

    db_session.add(
        Member(
            user_id=uuid.UUID(seeded_org["ownerId"]),
            organization_id=uuid.UUID(seeded_org["id"]),
            project_id=uuid.UUID(other_project["id"]),
            role=Role.member,
            status=True,
        )
    )
    with pytest.raises(MembershipScopeError):
        db_session.commit()
    db_session.rollback()
