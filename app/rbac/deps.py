import uuid

from fastapi import Depends
from sqlalchemy.orm import Session

from app.auth.deps import get_current_user
from app.db import get_db
from app.errors import AuthorizationError, NotFoundError
from app.models.organization import Organization
from app.models.project import Project
from app.models.user import User
from app.rbac.perms import PERMS
from app.rbac.policy import authorize

class OrgContext:
    def __init__(self, org: Organization, user: User, project: Project | None = None):
        self.org = org
        self.user = user
        self.project = project

def load_org(db: Session, organization_id: uuid.UUID) -> Organization:
    org = db.get(Organization, organization_id)
    if org is None:
        raise NotFoundError("Organization not found")
    return org

def load_project(db: Session, project_id: uuid.UUID) -> Project:
    project = db.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return project

def load_project_chain(
    db: Session, organization_id: uuid.UUID, project_id: uuid.UUID
) -> tuple[Organization, Project]:
    org = load_org(db, organization_id)
    project = load_project(db, project_id)
    if project.organization_id != org.id:
        raise AuthorizationError("Project does not belong to the organization")
    return org, project

def require_org_perm(action: str, message: str = "forbidden"):
    if action not in PERMS:
        raise RuntimeError(f"unknown permission action: {action}")

    def _checker(
        organization_id: uuid.UUID,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> OrgContext:
        org = load_org(db, organization_id)
        authorize(db, action, user.id, org, message=message)
        return OrgContext(org=org, user=user)

    return _checker

def require_project_perm(action: str, message: str = "forbidden"):
    if action not in PERMS:
        raise RuntimeError(f"unknown permission action: {action}")

    def _checker(
        organization_id: uuid.UUID,
        project_id: uuid.UUID,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> OrgContext:
        org, project = load_project_chain(db, organization_id, project_id)
        authorize(db, action, user.id, org, project, message=message)
        return OrgContext(org=org, user=user, project=project)

    return _checker
