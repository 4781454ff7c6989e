"""Authorization checks over an actor and a resolved org/project chain.

Every check reads the store at call time; nothing is cached between the
check and the write that follows it.
"""
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import AuthorizationError
from app.models.enums import Role
from app.models.membership import Member
from app.models.organization import Organization
from app.models.project import Project
from app.rbac.perms import PERMS, Standing

def is_org_owner(actor_id: uuid.UUID, org: Organization) -> bool:
    return org.owner_id == actor_id

def is_project_creator(actor_id: uuid.UUID, project: Project | None) -> bool:
    return project is not None and project.created_by_id == actor_id

def find_active_member(
    db: Session,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
    project_id: uuid.UUID | None,
) -> Member | None:
    """Active membership for exactly this (org, project); project None means org-level."""
    q = select(Member).where(
        Member.user_id == user_id,
        Member.organization_id == organization_id,
        Member.status.is_(True),
    )
    if project_id is None:
        q = q.where(Member.project_id.is_(None))
    else:
        q = q.where(Member.project_id == project_id)
    return db.scalars(q.order_by(Member.added_at).limit(1)).first()

def has_active_membership(db: Session, user_id: uuid.UUID, organization_id: uuid.UUID) -> bool:
    q = select(Member.id).where(
        Member.user_id == user_id,
        Member.organization_id == organization_id,
        Member.status.is_(True),
    )
    return db.scalars(q.limit(1)).first() is not None

def holds(
    db: Session,
    standing: Standing,
    actor_id: uuid.UUID,
    org: Organization,
    project: Project | None = None,
) -> bool:
    if standing is Standing.signed_in:
        return True
    if standing is Standing.org_owner:
        return is_org_owner(actor_id, org)
    if standing is Standing.project_creator:
        return is_project_creator(actor_id, project)
    if standing is Standing.project_member:
        return project is not None and find_active_member(db, actor_id, org.id, project.id) is not None
    if standing is Standing.org_member:
        return has_active_membership(db, actor_id, org.id)
    raise RuntimeError(f"unknown standing: {standing}")

def authorize(
    db: Session,
    action: str,
    actor_id: uuid.UUID,
    org: Organization,
    project: Project | None = None,
    *,
    message: str = "forbidden",
) -> Standing:
    """Return the first standing that grants `action`, or raise AuthorizationError."""
    allowed = PERMS.get(action)
    if allowed is None:
        raise RuntimeError(f"unknown permission action: {action}")

    for standing in allowed:
        if holds(db, standing, actor_id, org, project):
            return standing
    raise AuthorizationError(message)

def check_member_removable(actor_id: uuid.UUID, member: Member) -> None:
    # applies to everyone, the org owner included
    if member.role == Role.owner:
        raise AuthorizationError("Cannot delete project owner")
    if member.user_id == actor_id:
        raise AuthorizationError("You cannot delete yourself")
