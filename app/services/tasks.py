import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import AuthorizationError, InvalidMemberSubset, NotFoundError
from app.models.enums import TaskStatus
from app.models.membership import Member
from app.models.task import Task
from app.models.user import User
from app.rbac.deps import load_org, load_project, load_project_chain
from app.rbac.policy import authorize, find_active_member

logger = logging.getLogger("mt-tasks.tasks")

def resolve_assignment(
    active_members: Sequence[Member], member_ids: Sequence[uuid.UUID] | None
) -> list[uuid.UUID]:
    """Member ids a new task is assigned to.

    No subset (or an empty one) means every active member of the project.
    Otherwise each requested id must be a distinct active member; the
    caller's order is kept.
    """
    if not member_ids:
        return [m.id for m in active_members]

    active = {m.id for m in active_members}
    if len(set(member_ids)) != len(member_ids) or not set(member_ids) <= active:
        raise InvalidMemberSubset("Some member IDs are invalid or don't belong to this project")
    return list(member_ids)

def create_task(
    db: Session,
    actor: User,
    organization_id: uuid.UUID,
    project_id: uuid.UUID,
    name: str,
    *,
    description: str | None = None,
    member_ids: Sequence[uuid.UUID] | None = None,
) -> Task:
    org, project = load_project_chain(db, organization_id, project_id)
    authorize(
        db,
        "tasks:create",
        actor.id,
        org,
        project,
        message="You are not authorized to create a task in this project",
    )

    active_members = db.scalars(
        select(Member)
        .where(
            Member.organization_id == org.id,
            Member.project_id == project.id,
            Member.status.is_(True),
        )
        .order_by(Member.added_at, Member.id)
    ).all()
    if not active_members:
        raise NotFoundError("No members found for this project")

    assigned = resolve_assignment(active_members, member_ids)

    task = Task(
        name=name.strip(),
        description=description,
        organization_id=org.id,
        project_id=project.id,
        created_by_id=actor.id,
        member_ids=[str(mid) for mid in assigned],
    )
    db.add(task)
    db.commit()

    logger.info(f"Task created: {task.name} by user {actor.id}")
    return task

def list_tasks(db: Session, organization_id: uuid.UUID, project_id: uuid.UUID) -> list[Task]:
    q = (
        select(Task)
        .where(Task.organization_id == organization_id, Task.project_id == project_id)
        .order_by(Task.created_at)
    )
    return list(db.scalars(q).all())

def _load_task(db: Session, task_id: uuid.UUID) -> Task:
    task = db.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task

def update_task_status(db: Session, actor: User, task_id: uuid.UUID, status: TaskStatus) -> Task:
    task = _load_task(db, task_id)

    member = find_active_member(db, actor.id, task.organization_id, task.project_id)
    if member is None:
        raise AuthorizationError("You are not a member of this project")
    if str(member.id) not in task.member_ids:
        raise AuthorizationError(
            "You are not assigned to this task. Only assigned members can update task status"
        )

    task.status = status
    db.commit()

    logger.info(f"Task status updated: {task.name} to {status.value} by user {actor.id}")
    return task

def delete_task(db: Session, actor: User, task_id: uuid.UUID) -> Task:
    task = _load_task(db, task_id)

    action = "tasks:delete_strict" if settings.strict_task_delete else "tasks:delete"
    org = load_org(db, task.organization_id)
    project = load_project(db, task.project_id)
    authorize(db, action, actor.id, org, project, message="You are not authorized to delete this task")

    db.delete(task)
    db.commit()

    logger.info(f"Task deleted: {task.name} by user {actor.id}")
    return task
