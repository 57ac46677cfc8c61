# OPSBOARD/opsboard/routes/inventory.py

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from typing import Dict, List, Optional

from opsboard.access import BusinessContext, require_manager
from opsboard.constants import INVENTORY_IMAGES_BUCKET
from opsboard.database import get_db
from opsboard.errors import SERVICE_ERRORS, to_http_exception
from opsboard.schemas import schemas
from opsboard.services.inventory_service import InventoryService
from opsboard.services.storage import store_image

router = APIRouter(prefix="/inventory", tags=["inventory"])

@router.get("/", response_model=schemas.InventoryListOut)
def list_inventory(
    search: Optional[str] = None,
    category: Optional[str] = None,
    stock_status: Optional[str] = None,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    """Articles avec quantité utilisée, disponibilité et statut de stock"""
    try:
        return InventoryService(db, ctx.business_id).list_items(search, category, stock_status)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

@router.get("/categories", response_model=List[str])
def list_categories(
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    return InventoryService(db, ctx.business_id).categories()

@router.get("/usage", response_model=Dict[int, float])
def inventory_usage(
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    """Quantité réservée par le stock de produits, par article"""
    return InventoryService(db, ctx.business_id).get_usage()

@router.get("/{item_id}", response_model=schemas.InventoryItemOut)
def get_inventory_item(
    item_id: int,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        return InventoryService(db, ctx.business_id).get_item(item_id)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

@router.post("/", response_model=schemas.InventoryItemOut)
def create_inventory_item(
    item: schemas.InventoryItemCreate,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        return InventoryService(db, ctx.business_id).create_item(item.model_dump())
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)

@router.put("/{item_id}", response_model=schemas.InventoryItemOut)
def update_inventory_item(
    item_id: int,
    item: schemas.InventoryItemCreate,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        return InventoryService(db, ctx.business_id).update_item(item_id, item.model_dump())
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)

@router.delete("/{item_id}")
def delete_inventory_item(
    item_id: int,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    """Refusé tant qu'un produit utilise l'article"""
    try:
        InventoryService(db, ctx.business_id).delete_item(item_id)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)
    return {"success": True}

@router.post("/{item_id}/adjust", response_model=schemas.InventoryItemOut)
def adjust_inventory_item(
    item_id: int,
    adjustment: schemas.StockAdjustment,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        return InventoryService(db, ctx.business_id).adjust_stock(
            item_id, adjustment.type, adjustment.quantity
        )
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)

@router.post("/{item_id}/image", response_model=schemas.InventoryItemOut)
async def upload_inventory_image(
    item_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    """Téléverse l'image d'un article (5 Mo maximum)"""
    service = InventoryService(db, ctx.business_id)
    data = await file.read()
    try:
        service.get_item(item_id)
        url = store_image(INVENTORY_IMAGES_BUCKET, f"item{item_id}", data, file.content_type)
        return service.set_image(item_id, url)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)
