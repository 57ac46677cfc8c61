# OPSBOARD/opsboard/routes/budget.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from opsboard.access import BusinessContext, require_manager
from opsboard.database import get_db
from opsboard.errors import SERVICE_ERRORS, to_http_exception
from opsboard.schemas import schemas
from opsboard.services.business_service import BusinessService

router = APIRouter(prefix="/budget", tags=["budget"])

@router.get("/", response_model=schemas.BudgetOut)
def get_budget(
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    return BusinessService(db).get_budget(ctx.business_id)

@router.put("/", response_model=schemas.BudgetOut)
def update_budget(
    payload: schemas.BudgetUpdate,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        return BusinessService(db).update_budget(
            ctx.business_id, payload.total_budget, payload.amount_spent
        )
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)
