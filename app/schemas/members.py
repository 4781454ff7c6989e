import uuid
from datetime import datetime

from pydantic import EmailStr

from app.models.enums import Role
from app.schemas.auth import UserOut, UserRef
from app.schemas.common import NonEmptyStr, Schema
from app.schemas.projects import ProjectRef

class MemberAddIn(Schema):
    email: EmailStr
    role: Role

class MemberUpdateIn(Schema):
    email: EmailStr | None = None
    name: NonEmptyStr | None = None
    role: Role | None = None
    status: bool | None = None

class MemberOut(Schema):
    id: uuid.UUID
    user: UserOut
    organization_id: uuid.UUID
    project_id: uuid.UUID | None = None
    role: Role
    status: bool
    added_by: UserRef | None = None
    added_at: datetime

class AggregatedMemberOut(Schema):
    id: uuid.UUID
    user: UserOut
    role: Role
    status: bool
    added_by: UserRef | None = None
    added_at: datetime
    organization_id: uuid.UUID
    project: ProjectRef | None = None
    projects: list[ProjectRef] = []
