# OPSBOARD/opsboard/routes/products.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from opsboard.access import BusinessContext, require_manager
from opsboard.database import get_db
from opsboard.errors import SERVICE_ERRORS, to_http_exception
from opsboard.schemas import schemas
from opsboard.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])

@router.get("/", response_model=List[schemas.ProductOut])
def list_products(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    return ProductService(db, ctx.business_id).list_products(search)

@router.post("/preview", response_model=schemas.ProductPreviewOut)
def preview_product(
    product: schemas.ProductCreate,
    product_id: Optional[int] = None,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    """Coût, prix et manques de stock, sans enregistrer"""
    try:
        return ProductService(db, ctx.business_id).preview(product.model_dump(), product_id)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

@router.get("/{product_id}", response_model=schemas.ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        return ProductService(db, ctx.business_id).get_product(product_id)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

@router.post("/", response_model=schemas.ProductOut)
def create_product(
    product: schemas.ProductCreate,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    """Créer un produit; le prix de vente est calculé à partir des composants"""
    try:
        return ProductService(db, ctx.business_id).save(product.model_dump())
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)

@router.put("/{product_id}", response_model=schemas.ProductOut)
def update_product(
    product_id: int,
    product: schemas.ProductCreate,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        return ProductService(db, ctx.business_id).save(product.model_dump(), product_id)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)

@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(require_manager)
):
    try:
        ProductService(db, ctx.business_id).delete_product(product_id)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise to_http_exception(e)
    return {"success": True}
