# OPSBOARD/opsboard/services/product_service.py : produits et nomenclature

from sqlalchemy.orm import Session
from typing import Dict, List, Optional, Tuple
import logging

from opsboard.errors import InsufficientStockError
from opsboard.models import models
from opsboard.services import calculations
from opsboard.services.inventory_service import InventoryService
from opsboard.services.order_service import OrderService

logger = logging.getLogger(__name__)


class ProductService:
    """Produits construits à partir d'articles d'inventaire"""

    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    def _get_product(self, product_id: int) -> models.Product:
        product = self.db.query(models.Product).filter(
            models.Product.id == product_id,
            models.Product.business_id == self.business_id
        ).first()
        if not product:
            raise LookupError("Produit non trouvé")
        return product

    def _items_by_id(self, item_ids) -> Dict[int, models.InventoryItem]:
        ids = set(item_ids)
        if not ids:
            return {}
        items = self.db.query(models.InventoryItem).filter(
            models.InventoryItem.id.in_(ids),
            models.InventoryItem.business_id == self.business_id
        ).all()
        found = {i.id: i for i in items}
        missing = ids - set(found)
        if missing:
            raise LookupError(f"Article d'inventaire non trouvé: {sorted(missing)[0]}")
        return found

    def serialize(self, product: models.Product) -> Dict:
        components = []
        for c in product.components:
            unit_cost = float(c.inventory_item.unit_cost or 0) if c.inventory_item else 0.0
            components.append({
                "id": c.id,
                "inventory_item_id": c.inventory_item_id,
                "inventory_item_name": c.inventory_item.name if c.inventory_item else None,
                "quantity": c.quantity,
                "unit_cost": unit_cost,
                "line_cost": round(unit_cost * c.quantity, 2),
            })
        cost = calculations.total_cost((c["unit_cost"], c["quantity"]) for c in components)
        return {
            "id": product.id,
            "name": product.name,
            "quantity_available": product.quantity_available,
            "profit_margin": product.profit_margin,
            "sale_price": product.sale_price,
            "total_cost": round(cost, 2),
            "components": components,
            "created_at": product.created_at,
        }

    def list_products(self, search: Optional[str] = None) -> List[Dict]:
        query = self.db.query(models.Product).filter(
            models.Product.business_id == self.business_id
        )
        if search:
            query = query.filter(models.Product.name.ilike(f"%{search.strip()}%"))
        return [self.serialize(p) for p in query.order_by(models.Product.name).all()]

    def get_product(self, product_id: int) -> Dict:
        return self.serialize(self._get_product(product_id))

    def evaluate(
        self,
        quantity_available: int,
        profit_margin: float,
        components: List[Dict],
        exclude_product_id: Optional[int] = None
    ) -> Tuple[float, float, List[Dict]]:
        """Coût, prix de vente et manques de stock pour une nomenclature.

        La réserve actuelle du produit `exclude_product_id` n'est pas comptée:
        elle sera remplacée par la nouvelle.
        """
        items = self._items_by_id(c["inventory_item_id"] for c in components)
        usage = InventoryService(self.db, self.business_id).get_usage(exclude_product_id)

        cost = calculations.total_cost(
            (items[c["inventory_item_id"]].unit_cost, c["quantity"]) for c in components
        )
        price = calculations.sale_price(cost, profit_margin)

        required_by_item: Dict[int, float] = {}
        for c in components:
            required_by_item[c["inventory_item_id"]] = (
                required_by_item.get(c["inventory_item_id"], 0.0)
                + float(c["quantity"]) * quantity_available
            )

        warnings = []
        for item_id, required in required_by_item.items():
            item = items[item_id]
            available = calculations.available_quantity(item.quantity, usage.get(item_id, 0.0))
            if required > available:
                warnings.append({
                    "inventory_item_id": item_id,
                    "item_name": item.name,
                    "required": required,
                    "available": available,
                })
        return round(cost, 2), price, warnings

    def preview(self, data: Dict, product_id: Optional[int] = None) -> Dict:
        if product_id is not None:
            self._get_product(product_id)
        cost, price, warnings = self.evaluate(
            data["quantity_available"], data["profit_margin"], data.get("components") or [], product_id
        )
        return {"total_cost": cost, "sale_price": price, "warnings": warnings}

    def save(self, data: Dict, product_id: Optional[int] = None) -> Dict:
        """Crée ou met à jour un produit; les composants sont remplacés en bloc"""
        name = (data.get("name") or "").strip()
        if not name:
            raise ValueError("Le nom du produit est obligatoire")
        components = data.get("components") or []
        for c in components:
            if c["quantity"] <= 0:
                raise ValueError("La quantité d'un composant doit être positive")

        product = self._get_product(product_id) if product_id is not None else None
        if product is not None:
            # Le stock du produit couvre toujours les commandes en cours
            outstanding = OrderService(self.db, self.business_id).outstanding_quantity(product.id)
            if data["quantity_available"] < outstanding:
                raise InsufficientStockError(
                    f"Stock insuffisant pour {product.name}: {outstanding} déjà réservé(s) "
                    f"par des commandes en cours, {data['quantity_available']} demandé(s)",
                    [{"product_id": product.id, "required": outstanding, "available": data["quantity_available"]}]
                )
        cost, price, warnings = self.evaluate(
            data["quantity_available"], data["profit_margin"], components, product_id
        )
        if warnings:
            details = ", ".join(
                f"{w['item_name']} (requis {w['required']:g}, disponible {w['available']:g})"
                for w in warnings
            )
            raise InsufficientStockError(f"Stock insuffisant: {details}", warnings)

        if product is None:
            product = models.Product(business_id=self.business_id)
            self.db.add(product)
        product.name = name
        product.quantity_available = data["quantity_available"]
        product.profit_margin = data["profit_margin"]
        product.sale_price = price

        product.components.clear()
        for c in components:
            product.components.append(models.ProductComponent(
                business_id=self.business_id,
                inventory_item_id=c["inventory_item_id"],
                quantity=c["quantity"]
            ))

        self.db.commit()
        self.db.refresh(product)
        logger.info(f"Produit {product.id} enregistré: coût {cost:.2f}, prix {price:.2f}")
        return self.serialize(product)

    def delete_product(self, product_id: int):
        """Les commandes gardent leur copie du nom; leur lien vers le produit est retiré"""
        product = self._get_product(product_id)
        self.db.query(models.Order).filter(
            models.Order.product_id == product.id
        ).update({models.Order.product_id: None}, synchronize_session=False)
        self.db.delete(product)
        self.db.commit()
        logger.info(f"Produit {product_id} supprimé (entreprise {self.business_id})")
