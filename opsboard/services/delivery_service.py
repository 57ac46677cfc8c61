# OPSBOARD/opsboard/services/delivery_service.py : confirmation de livraison par lien

from sqlalchemy.orm import Session
from datetime import datetime
from typing import Dict, Optional
import logging

from opsboard.constants import DELIVERY_PHOTOS_BUCKET, STATUS_CANCELLED, STATUS_COMPLETED
from opsboard.errors import ConflictError
from opsboard.models import models
from opsboard.services.order_service import OrderService
from opsboard.services.storage import store_image

logger = logging.getLogger(__name__)


class DeliveryService:
    """Accès public par jeton: le livreur n'a pas besoin de compte"""

    def __init__(self, db: Session):
        self.db = db

    def _get_confirmation(self, token: str) -> models.DeliveryConfirmation:
        confirmation = None
        if token:
            confirmation = self.db.query(models.DeliveryConfirmation).filter(
                models.DeliveryConfirmation.driver_token == token
            ).first()
        if not confirmation:
            raise LookupError("Lien de livraison invalide ou expiré")
        return confirmation

    @staticmethod
    def serialize(confirmation: models.DeliveryConfirmation) -> Dict:
        order = confirmation.order
        return {
            "id": confirmation.id,
            "order": {
                "id": order.id,
                "client_name": order.client_name,
                "product_name": order.product_name,
                "quantity": order.quantity,
                "delivery_info": order.delivery_info,
                "status": order.status,
            },
            "is_confirmed": confirmation.confirmed_at is not None,
            "confirmed_at": confirmation.confirmed_at,
            "delivery_photo_url": confirmation.delivery_photo_url,
            "driver_notes": confirmation.driver_notes,
        }

    def driver_dashboard(self, business_id: int, driver_id: int) -> Dict:
        orders = OrderService(self.db, business_id).driver_orders(driver_id)
        pending = [o for o in orders if o["status"] != STATUS_COMPLETED]
        completed = [o for o in orders if o["status"] == STATUS_COMPLETED]
        today = datetime.utcnow().date()
        completed_today = [
            o for o in completed
            if o["confirmed_at"] is not None and o["confirmed_at"].date() == today
        ]
        return {
            "pending": pending,
            "completed": completed,
            "pending_count": len(pending),
            "completed_count": len(completed),
            "completed_today": len(completed_today),
        }

    def get_delivery(self, token: str) -> Dict:
        return self.serialize(self._get_confirmation(token))

    def confirm_delivery(
        self,
        token: str,
        photo: Optional[bytes],
        content_type: Optional[str],
        notes: Optional[str] = None
    ) -> Dict:
        """Enregistre la photo, horodate la livraison et termine la commande"""
        confirmation = self._get_confirmation(token)
        if confirmation.confirmed_at is not None:
            raise ConflictError("Cette livraison a déjà été confirmée")
        order = confirmation.order
        if order.status == STATUS_CANCELLED:
            raise ConflictError("Cette commande a été annulée")
        if not photo:
            raise ValueError("Une photo de livraison est obligatoire")

        orders = OrderService(self.db, order.business_id)
        # Vérifie le stock avant de stocker la photo
        orders.apply_transition(order, STATUS_COMPLETED)

        photo_url = store_image(DELIVERY_PHOTOS_BUCKET, f"order{order.id}", photo, content_type)
        confirmation.delivery_photo_url = photo_url
        confirmation.driver_notes = (notes or "").strip() or None
        confirmation.confirmed_at = datetime.utcnow()

        self.db.commit()
        self.db.refresh(confirmation)
        logger.info(f"Livraison confirmée pour la commande {order.id}")
        return self.serialize(confirmation)
