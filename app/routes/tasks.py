import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.deps import get_current_user
from app.db import get_db
from app.models.user import User
from app.rbac.deps import OrgContext, require_project_perm
from app.schemas.common import Envelope
from app.schemas.tasks import TaskCreateIn, TaskOut, TaskStatusIn
from app.services import tasks as task_service

router = APIRouter(prefix="/task", tags=["task"])

@router.post("/create", response_model=Envelope[TaskOut], status_code=201)
def create_task(
    payload: TaskCreateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[TaskOut]:
    t = task_service.create_task(
        db,
        user,
        payload.organization_id,
        payload.project_id,
        payload.name,
        description=payload.description,
        member_ids=payload.member_ids,
    )
    return Envelope(message="Task created successfully", data=TaskOut.model_validate(t))

@router.put("/update-status/{task_id}", response_model=Envelope[TaskOut])
def update_task_status(
    task_id: uuid.UUID,
    payload: TaskStatusIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[TaskOut]:
    t = task_service.update_task_status(db, user, task_id, payload.status)
    return Envelope(message="Task status updated successfully", data=TaskOut.model_validate(t))

@router.get("/get/{organization_id}/{project_id}", response_model=Envelope[list[TaskOut]])
def list_tasks(
    ctx: OrgContext = Depends(
        require_project_perm("tasks:read", "You are not authorized to view tasks of this project")
    ),
    db: Session = Depends(get_db),
) -> Envelope[list[TaskOut]]:
    rows = task_service.list_tasks(db, ctx.org.id, ctx.project.id)
    return Envelope(data=[TaskOut.model_validate(r) for r in rows])

@router.delete("/delete/{task_id}", response_model=Envelope[TaskOut])
def delete_task(
    task_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[TaskOut]:
    t = task_service.delete_task(db, user, task_id)
    return Envelope(message="Task deleted successfully", data=TaskOut.model_validate(t))
