# OPSBOARD/opsboard/routes/dashboard.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from opsboard.access import BusinessContext, require_manager
from opsboard.database import get_db
from opsboard.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("/")
def dashboard_summary(
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    """Tableau de bord: valeur du stock, commandes, chiffre du mois, alertes de stock"""
    summary = DashboardService(db, ctx.business_id).get_summary()
    summary["business"] = {
        "name": ctx.business.name,
        "currency": ctx.business.currency,
        "currency_symbol": ctx.business.currency_symbol,
    }
    return summary
