# OPSBOARD/opsboard/routes/businesses.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from opsboard.access import BusinessContext, get_context, get_business_context, require_owner
from opsboard.database import get_db
from opsboard.errors import SERVICE_ERRORS, to_http_exception
from opsboard.schemas import schemas
from opsboard.services.business_service import BusinessService, list_currencies

router = APIRouter(prefix="/businesses", tags=["businesses"])

@router.get("/currencies", response_model=List[schemas.CurrencyOut])
def get_currencies():
    """Devises proposées à l'onboarding et dans les paramètres"""
    return list_currencies()

@router.post("/", response_model=schemas.BusinessOut)
def create_business(
    business: schemas.BusinessCreate,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(get_context)
):
    """Onboarding: créer l'entreprise de l'utilisateur connecté, qui en devient propriétaire"""
    try:
        return BusinessService(db).onboard(ctx.user, business.name, business.currency)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)

@router.get("/current", response_model=schemas.BusinessOut)
def get_current_business(ctx: BusinessContext = Depends(get_business_context)):
    return ctx.business

@router.patch("/current", response_model=schemas.BusinessOut)
def update_current_business(
    payload: schemas.BusinessUpdate,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_owner)
):
    """Modifier le nom ou la devise (propriétaire uniquement)"""
    try:
        return BusinessService(db).update(ctx.business, payload.name, payload.currency)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)
