import uuid

from app.schemas.common import NonEmptyStr, Schema

class VerifyTokenIn(Schema):
    id_token: NonEmptyStr

class UserOut(Schema):
    id: uuid.UUID
    email: str
    name: str | None = None
    avatar: str | None = None

class UserRef(Schema):
    id: uuid.UUID
    name: str | None = None
    email: str

class SessionOut(Schema):
    user: UserOut
    token: str

class MeOut(Schema):
    user: UserOut
