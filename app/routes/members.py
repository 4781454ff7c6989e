import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.deps import get_current_user
from app.db import get_db
from app.models.user import User
from app.rbac.deps import OrgContext, require_org_perm, require_project_perm
from app.schemas.common import Envelope
from app.schemas.members import AggregatedMemberOut, MemberAddIn, MemberOut, MemberUpdateIn
from app.services import members as member_service

router = APIRouter(prefix="/member", tags=["member"])

@router.post("/add/{organization_id}/{project_id}", response_model=Envelope[MemberOut])
def add_member(
    organization_id: uuid.UUID,
    project_id: uuid.UUID,
    payload: MemberAddIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[MemberOut]:
    m = member_service.add_member(db, user, organization_id, project_id, payload.email, payload.role)
    return Envelope(message="Member added to project successfully", data=MemberOut.model_validate(m))

@router.get("/get/{organization_id}/{project_id}", response_model=Envelope[list[MemberOut]])
def list_members(
    ctx: OrgContext = Depends(
        require_project_perm("members:read", "You are not authorized to get members of this project")
    ),
    db: Session = Depends(get_db),
) -> Envelope[list[MemberOut]]:
    rows = member_service.list_project_members(db, ctx.org.id, ctx.project.id)
    return Envelope(data=[MemberOut.model_validate(r) for r in rows])

@router.get("/organization/{organization_id}", response_model=Envelope[list[AggregatedMemberOut]])
def list_organization_members(
    ctx: OrgContext = Depends(
        require_org_perm("members:read_org", "You are not authorized to access this organization")
    ),
    db: Session = Depends(get_db),
) -> Envelope[list[AggregatedMemberOut]]:
    rows = member_service.list_organization_members(db, ctx.org.id)
    return Envelope(data=[AggregatedMemberOut.model_validate(r) for r in rows])

@router.put("/update/{organization_id}/{project_id}/{member_id}", response_model=Envelope[MemberOut])
def update_member(
    organization_id: uuid.UUID,
    project_id: uuid.UUID,
    member_id: uuid.UUID,
    payload: MemberUpdateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[MemberOut]:
    m = member_service.update_member(
        db,
        user,
        organization_id,
        project_id,
        member_id,
        role=payload.role,
        status=payload.status,
        name=payload.name,
        email=payload.email,
    )
    return Envelope(message="Member updated successfully", data=MemberOut.model_validate(m))

@router.delete("/delete/{organization_id}/{project_id}/{member_id}", response_model=Envelope[MemberOut])
def delete_member(
    organization_id: uuid.UUID,
    project_id: uuid.UUID,
    member_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[MemberOut]:
    m = member_service.remove_member(db, user, organization_id, project_id, member_id)
    return Envelope(message="Member deleted successfully", data=MemberOut.model_validate(m))
