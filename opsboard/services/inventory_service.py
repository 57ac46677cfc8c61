# OPSBOARD/opsboard/services/inventory_service.py : le service d'inventaire

from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Dict, List, Optional
import logging

from opsboard.constants import DEFAULT_REORDER_LEVEL, STOCK_STATUSES
from opsboard.errors import ConflictError
from opsboard.models import models
from opsboard.services import calculations

logger = logging.getLogger(__name__)


class InventoryService:
    """Articles d'inventaire d'une entreprise, avec disponibilité calculée"""

    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    def _get_item(self, item_id: int) -> models.InventoryItem:
        item = self.db.query(models.InventoryItem).filter(
            models.InventoryItem.id == item_id,
            models.InventoryItem.business_id == self.business_id
        ).first()
        if not item:
            raise LookupError("Article non trouvé")
        return item

    def get_usage(self, exclude_product_id: Optional[int] = None) -> Dict[int, float]:
        """Quantité réservée par le stock de produits, par article"""
        query = self.db.query(
            models.ProductComponent.inventory_item_id,
            models.ProductComponent.quantity,
            models.Product.quantity_available
        ).join(
            models.Product, models.ProductComponent.product_id == models.Product.id
        ).filter(
            models.Product.business_id == self.business_id
        )
        if exclude_product_id is not None:
            query = query.filter(models.Product.id != exclude_product_id)
        return calculations.compute_usage(query.all())

    def serialize(self, item: models.InventoryItem, usage: Dict[int, float]) -> Dict:
        used = usage.get(item.id, 0.0)
        available = calculations.available_quantity(item.quantity, used)
        return {
            "id": item.id,
            "name": item.name,
            "quantity": item.quantity,
            "unit_cost": item.unit_cost or 0,
            "total_cost": item.total_cost or 0,
            "reorder_level": item.reorder_level,
            "category": item.category,
            "image_url": item.image_url,
            "business_id": item.business_id,
            "used_in_products": used,
            "available": available,
            "stock_status": calculations.stock_status(available, item.reorder_level),
        }

    def list_items(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        stock_status: Optional[str] = None
    ) -> Dict:
        """Liste filtrée; les compteurs permettent d'afficher "x sur y" """
        if stock_status and stock_status not in STOCK_STATUSES:
            raise ValueError(f"Statut de stock inconnu: {stock_status}")
        total_count = self.db.query(models.InventoryItem).filter(
            models.InventoryItem.business_id == self.business_id
        ).count()

        query = self.db.query(models.InventoryItem).filter(
            models.InventoryItem.business_id == self.business_id
        )
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                models.InventoryItem.name.ilike(pattern),
                models.InventoryItem.category.ilike(pattern)
            ))
        if category and category != "all":
            query = query.filter(models.InventoryItem.category == category)

        usage = self.get_usage()
        items = [self.serialize(i, usage) for i in query.order_by(models.InventoryItem.name).all()]

        if stock_status and stock_status != "all":
            items = [i for i in items if i["stock_status"] == stock_status]

        return {"items": items, "total_count": total_count, "filtered_count": len(items)}

    def get_item(self, item_id: int) -> Dict:
        return self.serialize(self._get_item(item_id), self.get_usage())

    def categories(self) -> List[str]:
        rows = self.db.query(models.InventoryItem.category).filter(
            models.InventoryItem.business_id == self.business_id,
            models.InventoryItem.category.isnot(None),
            models.InventoryItem.category != ""
        ).distinct().all()
        return sorted(r[0] for r in rows)

    def _apply_fields(self, item: models.InventoryItem, data: Dict):
        name = (data.get("name") or "").strip()
        if not name:
            raise ValueError("Le nom est obligatoire")
        quantity = max(float(data.get("quantity") or 0), 0.0)
        reorder_level = data.get("reorder_level")
        if reorder_level is None or reorder_level < 0:
            reorder_level = DEFAULT_REORDER_LEVEL
        unit_cost, total_cost = calculations.reconcile_costs(
            quantity, data.get("unit_cost"), data.get("total_cost")
        )
        category = (data.get("category") or "").strip() or None

        item.name = name
        item.quantity = quantity
        item.unit_cost = unit_cost
        item.total_cost = total_cost
        item.reorder_level = reorder_level
        item.category = category

    def create_item(self, data: Dict) -> Dict:
        item = models.InventoryItem(business_id=self.business_id)
        self._apply_fields(item, data)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        logger.info(f"Article {item.id} créé pour l'entreprise {self.business_id}")
        return self.serialize(item, self.get_usage())

    def update_item(self, item_id: int, data: Dict) -> Dict:
        item = self._get_item(item_id)
        self._apply_fields(item, data)
        self.db.commit()
        self.db.refresh(item)
        return self.serialize(item, self.get_usage())

    def delete_item(self, item_id: int):
        item = self._get_item(item_id)
        used_by = self.db.query(models.ProductComponent).filter(
            models.ProductComponent.inventory_item_id == item.id
        ).count()
        if used_by:
            raise ConflictError(
                f"Impossible de supprimer: l'article est utilisé par {used_by} composant(s) de produit"
            )
        self.db.delete(item)
        self.db.commit()
        logger.info(f"Article {item_id} supprimé (entreprise {self.business_id})")

    def adjust_stock(self, item_id: int, adjustment_type: str, quantity: float) -> Dict:
        """Entrée ou sortie de stock; une sortie ne peut pas entamer la réserve des produits"""
        if quantity <= 0:
            raise ValueError("La quantité doit être positive")
        item = self._get_item(item_id)
        usage = self.get_usage()

        if adjustment_type == "add":
            item.quantity = float(item.quantity or 0) + quantity
        elif adjustment_type == "remove":
            available = calculations.available_quantity(item.quantity, usage.get(item.id, 0.0))
            if quantity > available:
                raise ValueError(f"Impossible de retirer plus que la quantité disponible ({available:g})")
            item.quantity = float(item.quantity or 0) - quantity
        else:
            raise ValueError("Type d'ajustement invalide")

        item.total_cost = round(item.quantity * float(item.unit_cost or 0), 2)
        self.db.commit()
        self.db.refresh(item)
        logger.info(f"Stock ajusté: article {item.id} {adjustment_type} {quantity:g} -> {item.quantity:g}")
        return self.serialize(item, usage)

    def set_image(self, item_id: int, image_url: str) -> Dict:
        item = self._get_item(item_id)
        item.image_url = image_url
        self.db.commit()
        self.db.refresh(item)
        return self.serialize(item, self.get_usage())

    def low_stock_items(self) -> List[Dict]:
        """Articles dont la disponibilité est sous le seuil de réapprovisionnement"""
        usage = self.get_usage()
        items = self.db.query(models.InventoryItem).filter(
            models.InventoryItem.business_id == self.business_id
        ).order_by(models.InventoryItem.name).all()
        result = []
        for item in items:
            data = self.serialize(item, usage)
            level = DEFAULT_REORDER_LEVEL if item.reorder_level is None else item.reorder_level
            if data["available"] < level:
                result.append(data)
        return result
