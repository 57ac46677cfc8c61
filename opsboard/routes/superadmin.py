# OPSBOARD/opsboard/routes/superadmin.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from opsboard.access import BusinessContext, require_platform_admin
from opsboard.database import get_db
from opsboard.errors import SERVICE_ERRORS, to_http_exception
from opsboard.services.admin_service import AdminService

router = APIRouter(prefix="/superadmin", tags=["superadmin"])

@router.get("/stats")
def platform_stats(
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_platform_admin)
):
    return AdminService(db).stats()

@router.get("/businesses")
def platform_businesses(
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_platform_admin)
):
    return AdminService(db).list_businesses()

@router.get("/businesses/{business_id}")
def platform_business_detail(
    business_id: int,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_platform_admin)
):
    try:
        return AdminService(db).get_business(business_id)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

@router.get("/users")
def platform_users(
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_platform_admin)
):
    return AdminService(db).list_users()
