import uuid
from datetime import datetime

from pydantic import field_validator

from app.models.enums import TaskStatus
from app.schemas.common import NonEmptyStr, Schema

class TaskCreateIn(Schema):
    name: NonEmptyStr
    project_id: uuid.UUID
    organization_id: uuid.UUID
    member_ids: list[uuid.UUID] | None = None
    description: str | None = None

class TaskStatusIn(Schema):
    status: TaskStatus

class TaskOut(Schema):
    id: uuid.UUID
    name: str
    description: str | None = None
    organization_id: uuid.UUID
    project_id: uuid.UUID
    created_by_id: uuid.UUID
    member_ids: list[uuid.UUID]
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    @field_validator("status", mode="before")
    @classmethod
    def _missing_status_is_todo(cls, v):
        return TaskStatus.todo if v is None else v
