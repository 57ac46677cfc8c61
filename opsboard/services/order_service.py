# OPSBOARD/opsboard/services/order_service.py : commandes et transitions de statut

"""
Règles de stock des commandes:

- à la création et à l'édition, la quantité en cours (ni terminée ni annulée)
  d'un produit ne dépasse pas son quantity_available;
- l'entrée dans "Completed" consomme les articles des composants et le stock
  du produit, une seule fois (drapeau inventory_deducted);
- la sortie de "Completed" les restitue.

Chaque opération est validée puis appliquée dans une seule transaction.
"""

from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from datetime import datetime, date, time
from typing import Dict, List, Optional
import logging
import secrets

from opsboard.config import PUBLIC_BASE_URL
from opsboard.constants import (
    CLOSED_STATUSES,
    ORDER_STATUSES,
    ROLE_DRIVER,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_NEW,
    STATUS_READY,
)
from opsboard.errors import ConflictError, InsufficientStockError
from opsboard.models import models

logger = logging.getLogger(__name__)


def delivery_link(token: str) -> str:
    return f"{PUBLIC_BASE_URL.rstrip('/')}/delivery/{token}"


class OrderService:
    """Commandes d'une entreprise"""

    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    def _get_order(self, order_id: int) -> models.Order:
        order = self.db.query(models.Order).filter(
            models.Order.id == order_id,
            models.Order.business_id == self.business_id
        ).first()
        if not order:
            raise LookupError("Commande non trouvée")
        return order

    def _get_product(self, product_id: int) -> models.Product:
        product = self.db.query(models.Product).filter(
            models.Product.id == product_id,
            models.Product.business_id == self.business_id
        ).first()
        if not product:
            raise LookupError("Produit non trouvé")
        return product

    @staticmethod
    def serialize(order: models.Order) -> Dict:
        confirmation = order.delivery_confirmations[0] if order.delivery_confirmations else None
        return {
            "id": order.id,
            "client_name": order.client_name,
            "client_contact": order.client_contact,
            "product_id": order.product_id,
            "product_name": order.product_name,
            "quantity": order.quantity,
            "sale_price": order.sale_price,
            "delivery_info": order.delivery_info,
            "payment_method": order.payment_method,
            "status": order.status,
            "assigned_driver_id": order.assigned_driver_id,
            "inventory_deducted": bool(order.inventory_deducted),
            "delivery_token": confirmation.driver_token if confirmation else None,
            "delivery_link": delivery_link(confirmation.driver_token) if confirmation else None,
            "confirmed_at": confirmation.confirmed_at if confirmation else None,
            "created_at": order.created_at,
        }

    # ---------- Lecture ----------

    def list_orders(
        self,
        statuses: Optional[List[str]] = None,
        search: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> List[Dict]:
        query = self.db.query(models.Order).filter(
            models.Order.business_id == self.business_id
        )
        if statuses:
            unknown = [s for s in statuses if s not in ORDER_STATUSES]
            if unknown:
                raise ValueError(f"Statut inconnu: {unknown[0]}")
            query = query.filter(models.Order.status.in_(statuses))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                models.Order.client_name.ilike(pattern),
                models.Order.product_name.ilike(pattern)
            ))
        if date_from:
            query = query.filter(models.Order.created_at >= datetime.combine(date_from, time.min))
        if date_to:
            query = query.filter(models.Order.created_at <= datetime.combine(date_to, time.max))

        orders = query.order_by(models.Order.created_at.desc(), models.Order.id.desc()).all()
        return [self.serialize(o) for o in orders]

    def kanban(self) -> List[Dict]:
        """Une colonne par statut, dans l'ordre du tableau"""
        orders = self.list_orders()
        columns = []
        for status in ORDER_STATUSES:
            column = [o for o in orders if o["status"] == status]
            columns.append({"status": status, "count": len(column), "orders": column})
        return columns

    def get_order(self, order_id: int) -> Dict:
        return self.serialize(self._get_order(order_id))

    # ---------- Capacité ----------

    def outstanding_quantity(self, product_id: int, exclude_order_id: Optional[int] = None) -> int:
        query = self.db.query(func.coalesce(func.sum(models.Order.quantity), 0)).filter(
            models.Order.business_id == self.business_id,
            models.Order.product_id == product_id,
            models.Order.status.notin_(sorted(CLOSED_STATUSES))
        )
        if exclude_order_id is not None:
            query = query.filter(models.Order.id != exclude_order_id)
        return int(query.scalar() or 0)

    def _check_capacity(self, product: models.Product, quantity: int, exclude_order_id: Optional[int] = None):
        outstanding = self.outstanding_quantity(product.id, exclude_order_id)
        free = int(product.quantity_available or 0) - outstanding
        if quantity > free:
            raise InsufficientStockError(
                f"Stock insuffisant pour {product.name}: {max(free, 0)} disponible(s), {quantity} demandé(s)",
                [{"product_id": product.id, "required": quantity, "available": max(free, 0)}]
            )

    # ---------- Écriture ----------

    def create_order(self, data: Dict) -> Dict:
        client_name = (data.get("client_name") or "").strip()
        if not client_name:
            raise ValueError("Le nom du client est obligatoire")
        quantity = int(data.get("quantity") or 0)
        if quantity < 1:
            raise ValueError("La quantité doit être au moins 1")

        product = self._get_product(data["product_id"])
        self._check_capacity(product, quantity)

        order = models.Order(
            business_id=self.business_id,
            client_name=client_name,
            client_contact=data.get("client_contact"),
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            sale_price=round(float(product.sale_price or 0) * quantity, 2),
            delivery_info=data.get("delivery_info"),
            payment_method=data.get("payment_method"),
            status=STATUS_NEW,
            inventory_deducted=False
        )
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        logger.info(f"Commande {order.id} créée: {quantity} x {product.name}")
        return self.serialize(order)

    def update_order(self, order_id: int, data: Dict) -> Dict:
        order = self._get_order(order_id)
        if order.status in CLOSED_STATUSES:
            raise ConflictError(f"Une commande au statut {order.status} ne peut plus être modifiée")

        client_name = (data.get("client_name") or "").strip()
        if not client_name:
            raise ValueError("Le nom du client est obligatoire")
        quantity = int(data.get("quantity") or 0)
        if quantity < 1:
            raise ValueError("La quantité doit être au moins 1")

        if quantity != order.quantity:
            if order.product_id is not None:
                self._check_capacity(self._get_product(order.product_id), quantity, order.id)
            unit_price = float(order.sale_price or 0) / order.quantity if order.quantity else 0.0
            order.sale_price = round(unit_price * quantity, 2)
            order.quantity = quantity

        order.client_name = client_name
        order.client_contact = data.get("client_contact")
        order.delivery_info = data.get("delivery_info")
        order.payment_method = data.get("payment_method")
        self.db.commit()
        self.db.refresh(order)
        return self.serialize(order)

    def change_status(self, order_id: int, new_status: str) -> Dict:
        order = self._get_order(order_id)
        self.apply_transition(order, new_status)
        self.db.commit()
        self.db.refresh(order)
        return self.serialize(order)

    def apply_transition(self, order: models.Order, new_status: str):
        """Applique un changement de statut et ses effets de stock, sans valider la transaction"""
        if new_status not in ORDER_STATUSES:
            raise ValueError(f"Statut inconnu: {new_status}")
        old_status = order.status
        if new_status == old_status:
            return

        # Une commande annulée qui redevient en cours reprend sa part du stock produit
        if old_status == STATUS_CANCELLED and new_status != STATUS_COMPLETED and order.product_id is not None:
            self._check_capacity(self._get_product(order.product_id), order.quantity, order.id)

        if old_status == STATUS_COMPLETED and order.inventory_deducted:
            self._restore_inventory(order)
        if new_status == STATUS_COMPLETED and not order.inventory_deducted:
            self._deduct_inventory(order)
        if new_status == STATUS_READY:
            self._ensure_delivery_token(order)

        order.status = new_status
        order.updated_at = datetime.utcnow()
        logger.info(f"Commande {order.id}: {old_status} -> {new_status}")

    def _deduct_inventory(self, order: models.Order):
        product = order.product
        if product is None:
            logger.warning(f"Commande {order.id} sans produit: aucun stock consommé")
            return

        shortages = []
        if int(product.quantity_available or 0) < order.quantity:
            shortages.append({
                "product_id": product.id,
                "name": product.name,
                "required": order.quantity,
                "available": product.quantity_available,
            })
        # Un même article peut figurer sur plusieurs lignes de la nomenclature
        required_by_item: Dict[int, float] = {}
        items = {}
        for component in product.components:
            item = component.inventory_item
            items[item.id] = item
            required_by_item[item.id] = (
                required_by_item.get(item.id, 0.0) + float(component.quantity) * order.quantity
            )
        for item_id, required in required_by_item.items():
            item = items[item_id]
            if float(item.quantity or 0) < required:
                shortages.append({
                    "inventory_item_id": item.id,
                    "name": item.name,
                    "required": required,
                    "available": item.quantity,
                })
        if shortages:
            details = ", ".join(
                f"{s['name']} (requis {s['required']:g}, en stock {float(s['available'] or 0):g})"
                for s in shortages
            )
            raise InsufficientStockError(f"Stock insuffisant pour terminer la commande: {details}", shortages)

        for component in product.components:
            item = component.inventory_item
            item.quantity = float(item.quantity or 0) - float(component.quantity) * order.quantity
            item.total_cost = round(item.quantity * float(item.unit_cost or 0), 2)
        product.quantity_available = int(product.quantity_available or 0) - order.quantity
        order.inventory_deducted = True

    def _restore_inventory(self, order: models.Order):
        product = order.product
        if product is not None:
            for component in product.components:
                item = component.inventory_item
                item.quantity = float(item.quantity or 0) + float(component.quantity) * order.quantity
                item.total_cost = round(item.quantity * float(item.unit_cost or 0), 2)
            product.quantity_available = int(product.quantity_available or 0) + order.quantity
        else:
            logger.warning(f"Commande {order.id} sans produit: stock non restitué")
        order.inventory_deducted = False

    def _ensure_delivery_token(self, order: models.Order) -> models.DeliveryConfirmation:
        if order.delivery_confirmations:
            return order.delivery_confirmations[0]
        confirmation = models.DeliveryConfirmation(
            driver_token=secrets.token_urlsafe(24),
            created_at=datetime.utcnow()
        )
        order.delivery_confirmations.append(confirmation)
        return confirmation

    def assign_driver(self, order_id: int, driver_id: Optional[int]) -> Dict:
        order = self._get_order(order_id)
        if driver_id is not None:
            is_driver = self.db.query(models.UserRole).filter(
                models.UserRole.user_id == driver_id,
                models.UserRole.business_id == self.business_id,
                models.UserRole.role == ROLE_DRIVER
            ).first()
            if not is_driver:
                raise ValueError("Ce membre n'est pas livreur dans l'entreprise")
        order.assigned_driver_id = driver_id
        self.db.commit()
        self.db.refresh(order)
        return self.serialize(order)

    def delete_order(self, order_id: int):
        order = self._get_order(order_id)
        if order.inventory_deducted:
            self._restore_inventory(order)
        self.db.delete(order)
        self.db.commit()
        logger.info(f"Commande {order_id} supprimée (entreprise {self.business_id})")

    def driver_orders(self, driver_id: int) -> List[Dict]:
        """Commandes confiées à un livreur, prêtes ou livrées"""
        orders = self.db.query(models.Order).filter(
            models.Order.business_id == self.business_id,
            models.Order.assigned_driver_id == driver_id,
            models.Order.status.in_([STATUS_READY, STATUS_COMPLETED])
        ).order_by(models.Order.created_at.desc()).all()
        return [self.serialize(o) for o in orders]
