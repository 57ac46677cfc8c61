# OPSBOARD/opsboard/routes/delivery.py

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session
from typing import Optional

from opsboard.access import BusinessContext, require_driver
from opsboard.database import get_db
from opsboard.errors import SERVICE_ERRORS, to_http_exception
from opsboard.schemas import schemas
from opsboard.services.delivery_service import DeliveryService

# Espace livreur (authentifié)
driver_router = APIRouter(prefix="/driver", tags=["delivery"])

# Lien public envoyé au livreur
router = APIRouter(prefix="/delivery", tags=["delivery"])

@driver_router.get("/deliveries", response_model=schemas.DriverDashboardOut)
def my_deliveries(
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_driver)
):
    """Livraisons confiées au livreur connecté"""
    return DeliveryService(db).driver_dashboard(ctx.business_id, ctx.user.id)

@router.get("/{token}", response_model=schemas.DeliveryConfirmationOut)
def get_delivery(token: str, db: Session = Depends(get_db)):
    try:
        return DeliveryService(db).get_delivery(token)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

@router.post("/{token}/confirm", response_model=schemas.DeliveryConfirmationOut)
async def confirm_delivery(
    token: str,
    photo: Optional[UploadFile] = File(None),
    notes: Optional[str] = Form(None),
    db: Session = Depends(get_db)
):
    """Confirmer la livraison avec une photo (obligatoire, 5 Mo maximum)"""
    data = await photo.read() if photo is not None else None
    content_type = photo.content_type if photo is not None else None
    try:
        return DeliveryService(db).confirm_delivery(token, data, content_type, notes)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)
