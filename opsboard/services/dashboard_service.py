# OPSBOARD/opsboard/services/dashboard_service.py : le service du tableau de bord

from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime
from typing import Dict

from opsboard.constants import (
    CLOSED_STATUSES,
    RECENT_ORDERS_LIMIT,
    STATUS_COMPLETED,
)
from opsboard.models import models
from opsboard.services.inventory_service import InventoryService
from opsboard.services.order_service import OrderService


class DashboardService:
    """Indicateurs agrégés d'une entreprise"""

    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    def get_summary(self) -> Dict:
        inventory_value = self.db.query(
            func.coalesce(func.sum(models.InventoryItem.total_cost), 0)
        ).filter(
            models.InventoryItem.business_id == self.business_id
        ).scalar()

        total_products = self.db.query(
            func.coalesce(func.sum(models.Product.quantity_available), 0)
        ).filter(
            models.Product.business_id == self.business_id
        ).scalar()

        orders = self.db.query(models.Order).filter(
            models.Order.business_id == self.business_id
        ).order_by(models.Order.created_at.desc(), models.Order.id.desc()).all()

        # Chiffre d'affaires du mois: commandes terminées (mises à jour) ce mois-ci
        month_start = datetime.utcnow().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        monthly_revenue = sum(
            float(o.sale_price or 0) for o in orders
            if o.status == STATUS_COMPLETED and (o.updated_at or o.created_at) >= month_start
        )
        active_orders = len([o for o in orders if o.status not in CLOSED_STATUSES])

        low_stock = InventoryService(self.db, self.business_id).low_stock_items()

        inventory_count = self.db.query(models.InventoryItem).filter(
            models.InventoryItem.business_id == self.business_id
        ).count()
        product_count = self.db.query(models.Product).filter(
            models.Product.business_id == self.business_id
        ).count()
        member_count = self.db.query(models.UserRole.user_id).filter(
            models.UserRole.business_id == self.business_id
        ).distinct().count()

        return {
            "summary": {
                "inventory_value": round(float(inventory_value or 0), 2),
                "total_products": int(total_products or 0),
                "active_orders": active_orders,
                "monthly_revenue": round(monthly_revenue, 2),
                "total_orders": len(orders),
            },
            "low_stock": low_stock,
            "recent_orders": [OrderService.serialize(o) for o in orders[:RECENT_ORDERS_LIMIT]],
            "getting_started": {
                "has_inventory": inventory_count > 0,
                "has_product": product_count > 0,
                "has_order": len(orders) > 0,
                "has_team": member_count > 1,
            },
        }
