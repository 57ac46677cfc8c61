# OPSBOARD/opsboard/services/admin_service.py : opérations privilégiées et vue plateforme

from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Dict, List, Optional
import logging

from opsboard.constants import ROLE_OWNER
from opsboard.errors import ConflictError
from opsboard.models import models

logger = logging.getLogger(__name__)


class AdminService:

    def __init__(self, db: Session):
        self.db = db

    # ---------- Fonctions privilégiées ----------

    def update_profile(
        self,
        target_user_id: int,
        full_name: Optional[str] = None,
        email: Optional[str] = None
    ) -> models.Profile:
        """Modifie le profil d'un utilisateur; un changement d'email touche aussi le compte"""
        user = self.db.query(models.User).filter(models.User.id == target_user_id).first()
        if not user:
            raise LookupError("User not found")

        profile = user.profile
        if profile is None:
            profile = models.Profile(id=user.id, email=user.email)
            self.db.add(profile)

        if full_name is not None:
            profile.full_name = full_name.strip() or None
        if email is not None:
            email = email.strip().lower()
            if "@" not in email:
                raise ValueError("Invalid email")
            taken = self.db.query(models.User).filter(
                models.User.email == email,
                models.User.id != user.id
            ).first()
            if taken:
                raise ConflictError("Email already in use")
            user.email = email
            profile.email = email

        self.db.commit()
        self.db.refresh(profile)
        logger.info(f"Profil {user.id} modifié par un administrateur de la plateforme")
        return profile

    def delete_user(self, business_id: int, target_user_id: int):
        """Supprime un membre de l'entreprise: rôles, profil puis compte"""
        roles = self.db.query(models.UserRole).filter(
            models.UserRole.user_id == target_user_id,
            models.UserRole.business_id == business_id
        ).all()
        if not roles:
            raise LookupError("User not found in your business")
        is_owner = self.db.query(models.UserRole).filter(
            models.UserRole.user_id == target_user_id,
            models.UserRole.role == ROLE_OWNER
        ).first()
        if is_owner:
            raise PermissionError("Cannot delete business owners")

        self.db.query(models.Order).filter(
            models.Order.assigned_driver_id == target_user_id
        ).update({models.Order.assigned_driver_id: None}, synchronize_session=False)

        self.db.query(models.PlatformAdmin).filter(
            models.PlatformAdmin.user_id == target_user_id
        ).delete(synchronize_session=False)

        user = self.db.query(models.User).filter(models.User.id == target_user_id).first()
        self.db.delete(user)
        self.db.commit()
        logger.info(f"Utilisateur {target_user_id} supprimé de l'entreprise {business_id}")

    # ---------- Vue plateforme ----------

    def stats(self) -> Dict:
        return {
            "businesses": self.db.query(models.Business).count(),
            "users": self.db.query(models.User).count(),
            "orders": self.db.query(models.Order).count(),
            "products": self.db.query(models.Product).count(),
            "inventory_items": self.db.query(models.InventoryItem).count(),
        }

    def _business_summary(self, business: models.Business) -> Dict:
        owner = self.db.query(models.Profile).join(
            models.UserRole, models.UserRole.user_id == models.Profile.id
        ).filter(
            models.UserRole.business_id == business.id,
            models.UserRole.role == ROLE_OWNER
        ).first()
        member_count = self.db.query(models.UserRole.user_id).filter(
            models.UserRole.business_id == business.id
        ).distinct().count()
        order_count = self.db.query(func.count(models.Order.id)).filter(
            models.Order.business_id == business.id
        ).scalar()
        return {
            "id": business.id,
            "name": business.name,
            "currency": business.currency,
            "currency_symbol": business.currency_symbol,
            "created_at": business.created_at,
            "owner_email": owner.email if owner else None,
            "member_count": member_count,
            "order_count": order_count or 0,
        }

    def list_businesses(self) -> List[Dict]:
        businesses = self.db.query(models.Business).order_by(models.Business.created_at.desc()).all()
        return [self._business_summary(b) for b in businesses]

    def get_business(self, business_id: int) -> Dict:
        business = self.db.query(models.Business).filter(models.Business.id == business_id).first()
        if not business:
            raise LookupError("Entreprise non trouvée")
        data = self._business_summary(business)
        data["members"] = [
            {"user_id": r.user_id, "role": r.role, "email": r.user.email if r.user else None}
            for r in business.roles
        ]
        data["inventory_count"] = len(business.inventory_items)
        data["product_count"] = len(business.products)
        return data

    def list_users(self) -> List[Dict]:
        users = self.db.query(models.User).order_by(models.User.created_at.desc()).all()
        admin_ids = {a.user_id for a in self.db.query(models.PlatformAdmin).all()}
        result = []
        for user in users:
            profile = user.profile
            result.append({
                "id": user.id,
                "email": user.email,
                "full_name": profile.full_name if profile else None,
                "business_id": profile.business_id if profile else None,
                "roles": sorted({r.role for r in user.roles}),
                "is_platform_admin": user.id in admin_ids,
                "created_at": user.created_at,
            })
        return result
