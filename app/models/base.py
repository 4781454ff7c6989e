from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    pass

def now_utc() -> datetime:
    return datetime.now(timezone.utc)
