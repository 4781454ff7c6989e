import uuid
from datetime import datetime

from app.models.enums import ProjectStatus
from app.schemas.common import NonEmptyStr, Schema

class ProjectCreateIn(Schema):
    name: NonEmptyStr
    description: str | None = None
    organization_id: uuid.UUID

class ProjectUpdateIn(Schema):
    name: str | None = None
    description: str | None = None
    status: ProjectStatus | None = None

class ProjectRef(Schema):
    id: uuid.UUID
    name: str

class ProjectOut(Schema):
    id: uuid.UUID
    name: str
    description: str | None = None
    organization_id: uuid.UUID
    status: ProjectStatus
    created_by_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
