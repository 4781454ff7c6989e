import uuid
from datetime import datetime

from app.schemas.common import NonEmptyStr, Schema

class OrgCreateIn(Schema):
    name: NonEmptyStr

class OrgUpdateIn(Schema):
    name: NonEmptyStr | None = None

class InvitationOut(Schema):
    email: str
    invited_by_id: uuid.UUID
    invited_at: datetime
    expires_at: datetime
    accepted_at: datetime | None = None

class OrgOut(Schema):
    id: uuid.UUID
    name: str
    owner_id: uuid.UUID
    invitations: list[InvitationOut] = []
    created_at: datetime
    updated_at: datetime
