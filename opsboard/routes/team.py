# OPSBOARD/opsboard/routes/team.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from opsboard.access import BusinessContext, require_manager, require_owner
from opsboard.database import get_db
from opsboard.errors import SERVICE_ERRORS, to_http_exception
from opsboard.schemas import schemas
from opsboard.services.team_service import TeamService

router = APIRouter(prefix="/team", tags=["team"])

@router.get("/", response_model=List[schemas.TeamMemberOut])
def list_team(
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    return TeamService(db, ctx.business_id).list_members()

@router.post("/invite", response_model=schemas.InviteResult)
def invite_member(
    payload: schemas.InviteRequest,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    """Inviter un membre; un compte créé reçoit un mot de passe temporaire"""
    try:
        return TeamService(db, ctx.business_id).invite(payload.email, payload.role, payload.full_name)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)

@router.delete("/roles/{role_id}")
def remove_role(
    role_id: int,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_owner)
):
    try:
        TeamService(db, ctx.business_id).remove_role(role_id)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)
    return {"success": True}
