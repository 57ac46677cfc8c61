# OPSBOARD/opsboard/routes/orders.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from opsboard.access import BusinessContext, require_manager
from opsboard.database import get_db
from opsboard.errors import SERVICE_ERRORS, to_http_exception
from opsboard.schemas import schemas
from opsboard.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])

@router.get("/", response_model=List[schemas.OrderOut])
def list_orders(
    status: Optional[List[str]] = Query(None),
    search: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    """Commandes filtrées, les plus récentes d'abord"""
    try:
        return OrderService(db, ctx.business_id).list_orders(status, search, date_from, date_to)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

@router.get("/kanban", response_model=List[schemas.KanbanColumn])
def orders_kanban(
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    return OrderService(db, ctx.business_id).kanban()

@router.get("/{order_id}", response_model=schemas.OrderOut)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        return OrderService(db, ctx.business_id).get_order(order_id)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

@router.post("/", response_model=schemas.OrderOut)
def create_order(
    order: schemas.OrderCreate,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    """Nouvelle demande; le prix total suit le prix de vente du produit"""
    try:
        return OrderService(db, ctx.business_id).create_order(order.model_dump())
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)

@router.put("/{order_id}", response_model=schemas.OrderOut)
def update_order(
    order_id: int,
    order: schemas.OrderUpdate,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        return OrderService(db, ctx.business_id).update_order(order_id, order.model_dump())
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)

@router.patch("/{order_id}/status", response_model=schemas.OrderOut)
def change_order_status(
    order_id: int,
    payload: schemas.OrderStatusUpdate,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    """Déplacer une commande dans le kanban (stock consommé ou restitué si besoin)"""
    try:
        return OrderService(db, ctx.business_id).change_status(order_id, payload.status)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)

@router.patch("/{order_id}/driver", response_model=schemas.OrderOut)
def assign_order_driver(
    order_id: int,
    payload: schemas.DriverAssignment,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        return OrderService(db, ctx.business_id).assign_driver(order_id, payload.driver_id)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)

@router.delete("/{order_id}")
def delete_order(
    order_id: int,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        OrderService(db, ctx.business_id).delete_order(order_id)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)
    return {"success": True}
