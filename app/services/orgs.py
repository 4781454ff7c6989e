import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError
from app.models.enums import Role
from app.models.membership import Member
from app.models.organization import Organization
from app.models.user import User
from app.rbac.deps import load_org
from app.rbac.policy import authorize

logger = logging.getLogger("mt-tasks.orgs")

def _name_taken(db: Session, name: str, *, exclude: uuid.UUID | None = None) -> bool:
    q = select(Organization.id).where(Organization.name == name)
    if exclude is not None:
        q = q.where(Organization.id != exclude)
    return db.scalars(q.limit(1)).first() is not None

def create_organization(db: Session, actor: User, name: str) -> Organization:
    name = name.strip()

    if db.scalar(select(Organization).where(Organization.owner_id == actor.id)) is not None:
        raise ConflictError("You already have an organization. Each user can only have one organization.")
    if _name_taken(db, name):
        raise ConflictError("Organization with this name already exists")

    org = Organization(name=name, owner=actor)
    db.add(org)
    db.flush()

    # org-level owner record; same transaction as the org
    db.add(
        Member(
            user_id=actor.id,
            organization_id=org.id,
            project_id=None,
            role=Role.owner,
            status=True,
            added_by_id=actor.id,
        )
    )
    db.commit()

    logger.info(f"Organization created: {org.name} by user {actor.id}")
    return org

def current_organization(db: Session, actor: User) -> Organization:
    org = db.scalar(select(Organization).where(Organization.owner_id == actor.id))
    if org is not None:
        return org

    q = (
        select(Organization)
        .join(Member, Member.organization_id == Organization.id)
        .where(Member.user_id == actor.id, Member.status.is_(True))
        .order_by(Member.added_at)
        .limit(1)
    )
    org = db.scalars(q).first()
    if org is None:
        raise NotFoundError("Organization not found")
    return org

def rename_organization(db: Session, actor: User, organization_id: uuid.UUID, name: str | None) -> Organization:
    org = load_org(db, organization_id)
    authorize(db, "org:rename", actor.id, org, message="You are not authorized to update this organization")

    if name:
        name = name.strip()
        if name != org.name and _name_taken(db, name, exclude=org.id):
            raise ConflictError("Organization with this name already exists")
        org.name = name
    db.commit()

    logger.info(f"Organization updated: {org.name} by user {actor.id}")
    return org
