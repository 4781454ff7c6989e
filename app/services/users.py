"""Identity resolution: map a verified provider assertion to a local user."""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth.identity import IdentityAssertion
from app.errors import ConflictError
from app.models.base import now_utc
from app.models.user import User

logger = logging.getLogger("mt-tasks.users")

def email_local_part(email: str) -> str:
    return email.split("@", 1)[0]

def find_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == email.strip().lower()))

def get_or_create_placeholder(db: Session, email: str) -> User:
    """User for `email`, creating an unlinked placeholder when unknown (flushed, not committed)."""
    email = email.strip().lower()
    user = find_user_by_email(db, email)
    if user is None:
        user = User(email=email, name=email_local_part(email))
        db.add(user)
        db.flush()
        logger.info(f"Placeholder user created: {user.email}")
    return user

def _ensure_email_free(db: Session, email: str, user: User) -> None:
    other = find_user_by_email(db, email)
    if other is not None and other.id != user.id:
        raise ConflictError("Email is already used by another account")

def resolve_user_from_assertion(db: Session, assertion: IdentityAssertion) -> User:
    user = db.scalar(select(User).where(User.external_id == assertion.subject))

    if user is None:
        # claim a placeholder created when someone added this email to a project
        user = find_user_by_email(db, assertion.email)
        if user is not None and user.external_id is not None:
            raise ConflictError("Email is already linked to another identity")
        if user is not None:
            user.external_id = assertion.subject
            logger.info(f"Placeholder user claimed: {user.email}")

    if user is None:
        user = User(
            external_id=assertion.subject,
            email=assertion.email,
            name=assertion.name or email_local_part(assertion.email),
            avatar=assertion.avatar,
        )
        db.add(user)
        db.commit()
        logger.info(f"New user created: {user.email}")
        return user

    if user.email != assertion.email:
        _ensure_email_free(db, assertion.email, user)
    user.email = assertion.email
    user.name = assertion.name or user.name
    if assertion.avatar:
        user.avatar = assertion.avatar
    user.updated_at = now_utc()
    db.commit()
    logger.info(f"User updated: {user.email}")
    return user

def update_profile(db: Session, user: User, *, name: str | None = None, email: str | None = None) -> bool:
    """Patch a user's global name/email. Returns True when anything changed (not committed)."""
    changed = False
    if name:
        user.name = name.strip()
        changed = True
    if email:
        email = email.strip().lower()
        if email != user.email:
            _ensure_email_free(db, email, user)
        user.email = email
        changed = True
    return changed
