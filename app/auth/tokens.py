"""Session credentials: short-lived HS256 tokens carrying user id and email."""
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

import jwt

from app.config import settings
from app.errors import ExpiredCredential, InvalidCredential
from app.models.base import now_utc

# fixed on purpose; callers cannot extend it and there is no refresh token
SESSION_TTL = timedelta(minutes=15)

@dataclass(frozen=True)
class SessionClaims:
    user_id: uuid.UUID
    email: str

def issue_session_token(user_id: str | uuid.UUID, email: str, *, now: datetime | None = None) -> str:
    iat = now or now_utc()
    exp = iat + SESSION_TTL
    payload = {
        "sub": str(user_id),
        "email": email,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")

def verify_session_token(token: str) -> SessionClaims:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise ExpiredCredential("Session has expired, please sign in again")
    except jwt.InvalidTokenError:
        raise InvalidCredential("Invalid or expired token")

    try:
        user_id = uuid.UUID(payload["sub"])
    except (TypeError, ValueError):
        raise InvalidCredential("Invalid or expired token")

    email = payload.get("email")
    if not isinstance(email, str):
        raise InvalidCredential("Invalid or expired token")

    return SessionClaims(user_id=user_id, email=email)
