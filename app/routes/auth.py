from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.deps import get_current_user, get_identity_verifier
from app.auth.identity import IdentityVerifier
from app.auth.tokens import issue_session_token
from app.config import settings
from app.db import get_db
from app.models.user import User
from app.ratelimit import rate_limit
from app.schemas.auth import MeOut, SessionOut, UserOut, VerifyTokenIn
from app.schemas.common import Envelope
from app.services.users import resolve_user_from_assertion

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/verify-token", response_model=Envelope[SessionOut])
def verify_token(
    payload: VerifyTokenIn,
    db: Session = Depends(get_db),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
    _: None = Depends(
        rate_limit(
            "auth:verify_token",
            limit_per_window=settings.rate_limit_verify_token_per_min,
            window_seconds=60,
        )
    ),
) -> Envelope[SessionOut]:
    assertion = verifier.verify(payload.id_token)
    user = resolve_user_from_assertion(db, assertion)

    token = issue_session_token(user.id, user.email)
    return Envelope(data=SessionOut(user=UserOut.model_validate(user), token=token))

@router.get("/me", response_model=Envelope[MeOut])
def me(user: User = Depends(get_current_user)) -> Envelope[MeOut]:
    return Envelope(data=MeOut(user=UserOut.model_validate(user)))
