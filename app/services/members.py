"""Project membership: adding, listing, editing and removing members,
plus the per-user rollup shown on the organization page."""
import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.enums import ROLE_RANK, Role
from app.models.membership import Member
from app.models.project import Project
from app.models.user import User
from app.rbac.deps import load_project_chain
from app.rbac.policy import authorize, check_member_removable, find_active_member
from app.services.users import get_or_create_placeholder, update_profile

logger = logging.getLogger("mt-tasks.members")

_WITH_PEOPLE = (joinedload(Member.user), joinedload(Member.added_by))

@dataclass
class AggregatedMember:
    id: uuid.UUID
    user: User
    role: Role
    status: bool
    added_by: User | None
    added_at: datetime
    organization_id: uuid.UUID
    project: Project | None
    projects: list[Project] = field(default_factory=list)

def aggregate_members(members: Iterable[Member]) -> list[AggregatedMember]:
    """Collapse member records into one entry per user.

    The first record seen for a user supplies id, status, adder and added_at;
    later records only add their project and can raise the role. Output keeps
    the order in which users first appear.
    """
    by_user: dict[uuid.UUID, AggregatedMember] = {}
    for m in members:
        agg = by_user.get(m.user_id)
        if agg is None:
            agg = AggregatedMember(
                id=m.id,
                user=m.user,
                role=m.role,
                status=m.status,
                added_by=m.added_by,
                added_at=m.added_at,
                organization_id=m.organization_id,
                project=m.project,
            )
            by_user[m.user_id] = agg

        if m.project is not None:
            agg.projects.append(m.project)

        if ROLE_RANK[m.role] > ROLE_RANK[agg.role]:
            agg.role = m.role

    return list(by_user.values())

def list_organization_members(db: Session, organization_id: uuid.UUID) -> list[AggregatedMember]:
    q = (
        select(Member)
        .options(*_WITH_PEOPLE, joinedload(Member.project))
        .where(Member.organization_id == organization_id, Member.status.is_(True))
        .order_by(Member.added_at, Member.id)
    )
    return aggregate_members(db.scalars(q).unique().all())

def list_project_members(db: Session, organization_id: uuid.UUID, project_id: uuid.UUID) -> list[Member]:
    q = (
        select(Member)
        .options(*_WITH_PEOPLE)
        .where(
            Member.organization_id == organization_id,
            Member.project_id == project_id,
            Member.status.is_(True),
        )
        .order_by(Member.added_at, Member.id)
    )
    return list(db.scalars(q).unique().all())

def add_member(
    db: Session,
    actor: User,
    organization_id: uuid.UUID,
    project_id: uuid.UUID,
    email: str,
    role: Role,
) -> Member:
    org, project = load_project_chain(db, organization_id, project_id)
    authorize(
        db,
        "members:add",
        actor.id,
        org,
        project,
        message="You are not authorized to add a member to this project",
    )

    user = get_or_create_placeholder(db, email)
    if find_active_member(db, user.id, org.id, project.id) is not None:
        raise ConflictError("User is already a member of this project")

    member = Member(
        user_id=user.id,
        organization_id=org.id,
        project_id=project.id,
        role=role,
        status=True,
        added_by_id=actor.id,
    )
    db.add(member)
    db.commit()

    logger.info(f"Member {user.email} added to project {project.name} by user {actor.id}")
    return _reload(db, member.id)

def _reload(db: Session, member_id: uuid.UUID) -> Member:
    member = db.get(Member, member_id, options=_WITH_PEOPLE)
    if member is None:
        raise NotFoundError("Member not found")
    return member

def _load_project_member(
    db: Session, organization_id: uuid.UUID, project_id: uuid.UUID, member_id: uuid.UUID
) -> Member:
    member = _reload(db, member_id)
    if member.organization_id != organization_id or member.project_id != project_id:
        raise ValidationError("Member does not belong to this project")
    return member

def update_member(
    db: Session,
    actor: User,
    organization_id: uuid.UUID,
    project_id: uuid.UUID,
    member_id: uuid.UUID,
    *,
    role: Role | None = None,
    status: bool | None = None,
    name: str | None = None,
    email: str | None = None,
) -> Member:
    """Change a member's role/status.

    `name` and `email` are written to the shared User record, so the change
    is visible in every organization that user belongs to.
    """
    org, project = load_project_chain(db, organization_id, project_id)
    member = _load_project_member(db, org.id, project.id, member_id)
    authorize(
        db,
        "members:update",
        actor.id,
        org,
        project,
        message="You are not authorized to update this member",
    )

    if status and not member.status:
        # at most one active record per (organization, user, project)
        other = find_active_member(db, member.user_id, org.id, project.id)
        if other is not None and other.id != member.id:
            raise ConflictError("User is already a member of this project")
    if role is not None:
        member.role = role
    if status is not None:
        member.status = status
    update_profile(db, member.user, name=name, email=email)
    db.commit()

    logger.info(
        f"Member updated: {member.user.name or member.user.email} in project {project.name} by user {actor.id}"
    )
    return member

def remove_member(
    db: Session,
    actor: User,
    organization_id: uuid.UUID,
    project_id: uuid.UUID,
    member_id: uuid.UUID,
) -> Member:
    org, project = load_project_chain(db, organization_id, project_id)
    member = _load_project_member(db, org.id, project.id, member_id)
    authorize(
        db,
        "members:delete",
        actor.id,
        org,
        project,
        message="You are not authorized to delete this member",
    )
    check_member_removable(actor.id, member)

    label = member.user.name or member.user.email
    db.delete(member)
    db.commit()

    logger.info(f"Member {label} deleted from project {project.name} by user {actor.id}")
    return member
