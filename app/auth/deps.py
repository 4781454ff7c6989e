from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.auth.identity import IdentityVerifier
from app.auth.tokens import verify_session_token
from app.db import get_db
from app.errors import AuthenticationError
from app.models.user import User

bearer = HTTPBearer(auto_error=False)

def get_identity_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.identity_verifier

def get_current_user(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if creds is None or creds.scheme.lower() != "bearer":
        raise AuthenticationError("Unauthorized")

    claims = verify_session_token(creds.credentials)

    user = db.get(User, claims.user_id)
    if user is None:
        raise AuthenticationError("User not found")

    request.state.user_id = user.id
    return user
