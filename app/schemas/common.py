from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

T = TypeVar("T")

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

class Schema(BaseModel):
    # camelCase on the wire, snake_case in python; built straight from ORM rows
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class Envelope(Schema, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T | None = None
