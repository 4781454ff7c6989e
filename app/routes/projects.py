import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.deps import get_current_user
from app.db import get_db
from app.models.user import User
from app.rbac.deps import OrgContext, require_org_perm
from app.schemas.common import Envelope
from app.schemas.projects import ProjectCreateIn, ProjectOut, ProjectUpdateIn
from app.services import projects as project_service

router = APIRouter(prefix="/project", tags=["project"])

@router.post("/create", response_model=Envelope[ProjectOut], status_code=201)
def create_project(
    payload: ProjectCreateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[ProjectOut]:
    p = project_service.create_project(
        db, user, payload.organization_id, payload.name, payload.description
    )
    return Envelope(message="Project created successfully", data=ProjectOut.model_validate(p))

@router.get("/get/{organization_id}", response_model=Envelope[list[ProjectOut]])
def list_projects(
    ctx: OrgContext = Depends(
        require_org_perm("projects:read", "You are not authorized to access this organization")
    ),
    db: Session = Depends(get_db),
) -> Envelope[list[ProjectOut]]:
    rows = project_service.list_projects(db, ctx.org.id)
    return Envelope(data=[ProjectOut.model_validate(r) for r in rows])

@router.put("/update/{project_id}", response_model=Envelope[ProjectOut])
def update_project(
    project_id: uuid.UUID,
    payload: ProjectUpdateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[ProjectOut]:
    p = project_service.update_project(
        db,
        user,
        project_id,
        name=payload.name,
        description=payload.description,
        status=payload.status,
    )
    return Envelope(message="Project updated successfully", data=ProjectOut.model_validate(p))

@router.delete("/delete/{project_id}", response_model=Envelope[ProjectOut])
def delete_project(
    project_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[ProjectOut]:
    p = project_service.delete_project(db, user, project_id)
    return Envelope(message="Project deleted successfully", data=ProjectOut.model_validate(p))
