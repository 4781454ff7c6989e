import logging
import uuid

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.models.enums import ProjectStatus, Role
from app.models.membership import Member
from app.models.project import Project
from app.models.task import Task
from app.models.user import User
from app.rbac.deps import load_org, load_project
from app.rbac.policy import authorize

logger = logging.getLogger("mt-tasks.projects")

def create_project(
    db: Session,
    actor: User,
    organization_id: uuid.UUID,
    name: str,
    description: str | None = None,
) -> Project:
    org = load_org(db, organization_id)
    authorize(
        db,
        "projects:create",
        actor.id,
        org,
        message="You are not authorized to create a project in this organization",
    )

    project = Project(
        name=name.strip(),
        description=description.strip() if description else None,
        organization_id=org.id,
        created_by_id=actor.id,
    )
    db.add(project)
    db.flush()

    db.add(
        Member(
            user_id=actor.id,
            organization_id=org.id,
            project_id=project.id,
            role=Role.owner,
            status=True,
            added_by_id=actor.id,
        )
    )
    db.commit()

    logger.info(f"Project created: {project.name} by user {actor.id}")
    return project

def list_projects(db: Session, organization_id: uuid.UUID) -> list[Project]:
    q = select(Project).where(Project.organization_id == organization_id).order_by(Project.created_at)
    return list(db.scalars(q).all())

def _load_for_change(db: Session, actor: User, project_id: uuid.UUID, action: str, message: str) -> Project:
    project = load_project(db, project_id)
    org = load_org(db, project.organization_id)
    authorize(db, action, actor.id, org, project, message=message)
    return project

def update_project(
    db: Session,
    actor: User,
    project_id: uuid.UUID,
    *,
    name: str | None = None,
    description: str | None = None,
    status: ProjectStatus | None = None,
) -> Project:
    project = _load_for_change(
        db, actor, project_id, "projects:update", "You are not authorized to update this project"
    )

    # blank values leave the field untouched
    if name and name.strip():
        project.name = name.strip()
    if description and description.strip():
        project.description = description.strip()
    if status is not None:
        project.status = status
    db.commit()

    logger.info(f"Project updated: {project.name} by user {actor.id}")
    return project

def delete_project(db: Session, actor: User, project_id: uuid.UUID) -> Project:
    """Delete a project with its member records and tasks in one transaction."""
    project = _load_for_change(
        db, actor, project_id, "projects:delete", "You are not authorized to delete this project"
    )

    db.execute(delete(Member).where(Member.project_id == project.id))
    db.execute(delete(Task).where(Task.project_id == project.id))
    db.delete(project)
    db.commit()

    logger.info(f"Project deleted: {project.name} by user {actor.id}")
    return project
