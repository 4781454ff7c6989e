import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.deps import get_current_user
from app.db import get_db
from app.models.user import User
from app.schemas.common import Envelope
from app.schemas.orgs import OrgCreateIn, OrgOut, OrgUpdateIn
from app.services import orgs as org_service

router = APIRouter(prefix="/organization", tags=["organization"])

@router.post("/create", response_model=Envelope[OrgOut], status_code=201)
def create_org(
    payload: OrgCreateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[OrgOut]:
    org = org_service.create_organization(db, user, payload.name)
    return Envelope(message="Organization created successfully", data=OrgOut.model_validate(org))

@router.get("/current", response_model=Envelope[OrgOut])
def current_org(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[OrgOut]:
    org = org_service.current_organization(db, user)
    return Envelope(data=OrgOut.model_validate(org))

@router.put("/update/{organization_id}", response_model=Envelope[OrgOut])
def update_org(
    organization_id: uuid.UUID,
    payload: OrgUpdateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[OrgOut]:
    org = org_service.rename_organization(db, user, organization_id, payload.name)
    return Envelope(message="Organization updated successfully", data=OrgOut.model_validate(org))
