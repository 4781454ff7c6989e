import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Uuid, event
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from app.errors import MembershipScopeError
from app.models.base import Base, now_utc
from app.models.enums import Role, enum_values
from app.models.project import Project

class Member(Base):
    __tablename__ = "members"
    # (organization, user, project, status) uniqueness is enforced by the
    # services, not here: inactive duplicates are allowed
    __table_args__ = (
        Index("ix_members_org_user", "organization_id", "user_id"),
        Index("ix_members_project_user", "project_id", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id"), nullable=False
    )
    # null means an organization-level membership (the owner's own record)
    project_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("projects.id"), nullable=True)

    role: Mapped[Role] = mapped_column(
        Enum(Role, name="member_role", values_callable=enum_values), nullable=False
    )
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    added_by_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc, nullable=False)

    user: Mapped["User"] = relationship(foreign_keys=[user_id])  # noqa: F821
    added_by: Mapped["User"] = relationship(foreign_keys=[added_by_id])  # noqa: F821
    project: Mapped[Project | None] = relationship()

@event.listens_for(Session, "before_flush")
def _check_member_scope(session: Session, flush_context, instances) -> None:  # type: ignore[no-untyped-def]
    for obj in list(session.new) + list(session.dirty):
        if not isinstance(obj, Member) or obj.project_id is None:
            continue
        project = session.get(Project, obj.project_id)
        if project is None or project.organization_id != obj.organization_id:
            raise MembershipScopeError("Project does not belong to the organization")
