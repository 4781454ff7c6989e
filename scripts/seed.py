import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db import SessionLocal
from app.models.enums import Role
from app.models.membership import Member
from app.models.organization import Organization
from app.models.project import Project
from app.models.task import Task
from app.models.user import User

@dataclass
class SeedResult:
    owner_email: str
    member_email: str
    viewer_email: str
    org_id: uuid.UUID
    project_id: uuid.UUID
    task_id: uuid.UUID

def get_or_create_user(db: Session, email: str, name: str | None = None) -> User:
    email = email.lower().strip()
    u = db.scalar(select(User).where(User.email == email))
    if u is None:
        u = User(email=email, name=name or email.split("@", 1)[0])
        db.add(u)
        db.flush()
    return u

def get_or_create_member(
    db: Session,
    user_id: uuid.UUID,
    org_id: uuid.UUID,
    project_id: uuid.UUID | None,
    role: Role,
    added_by: uuid.UUID,
) -> Member:
    q = select(Member).where(
        Member.user_id == user_id,
        Member.organization_id == org_id,
        Member.status.is_(True),
    )
    q = q.where(Member.project_id.is_(None) if project_id is None else Member.project_id == project_id)
    m = db.scalars(q).first()
    if m is None:
        m = Member(
            user_id=user_id,
            organization_id=org_id,
            project_id=project_id,
            role=role,
            status=True,
            added_by_id=added_by,
        )
        db.add(m)
        db.flush()
    elif m.role != role:
        m.role = role
        db.flush()
    return m

def get_or_create_org(db: Session, name: str, owner: User) -> Organization:
    o = db.scalar(select(Organization).where(Organization.owner_id == owner.id))
    if o is None:
        o = Organization(name=name, owner=owner)
        db.add(o)
        db.flush()
    return o

def get_or_create_project(db: Session, org_id: uuid.UUID, name: str, created_by: uuid.UUID) -> Project:
    p = db.scalar(select(Project).where(Project.organization_id == org_id, Project.name == name))
    if p is None:
        p = Project(organization_id=org_id, name=name, created_by_id=created_by)
        db.add(p)
        db.flush()
    return p

def get_or_create_task(
    db: Session,
    project: Project,
    name: str,
    created_by: uuid.UUID,
    members: list[Member],
) -> Task:
    t = db.scalar(select(Task).where(Task.project_id == project.id, Task.name == name))
    if t is None:
        t = Task(
            organization_id=project.organization_id,
            project_id=project.id,
            name=name,
            created_by_id=created_by,
            member_ids=[str(m.id) for m in members],
        )
        db.add(t)
        db.flush()
    return t

def seed() -> SeedResult:
    db = SessionLocal()
    try:
        owner = get_or_create_user(db, "owner@example.com", "owner")
        member = get_or_create_user(db, "member@example.com", "member")
        viewer = get_or_create_user(db, "viewer@example.com", "viewer")

        org = get_or_create_org(db, "seeded org", owner)
        get_or_create_member(db, owner.id, org.id, None, Role.owner, owner.id)

        project = get_or_create_project(db, org.id, "seeded project", owner.id)
        owner_m = get_or_create_member(db, owner.id, org.id, project.id, Role.owner, owner.id)
        member_m = get_or_create_member(db, member.id, org.id, project.id, Role.member, owner.id)
        get_or_create_member(db, viewer.id, org.id, project.id, Role.viewer, owner.id)

        task = get_or_create_task(db, project, "seeded task", owner.id, [owner_m, member_m])

        db.commit()

        return SeedResult(
            owner_email=owner.email,
            member_email=member.email,
            viewer_email=viewer.email,
            org_id=org.id,
            project_id=project.id,
            task_id=task.id,
        )
    finally:
        db.close()

if __name__ == "__main__":
    r = seed()
    print("seed complete")
    print(f"org_id={r.org_id}")
    print(f"project_id={r.project_id}")
    print(f"task_id={r.task_id}")
    print("users:")
    print(f"  owner:  {r.owner_email}")
    print(f"  member: {r.member_email}")
    print(f"  viewer: {r.viewer_email}")
