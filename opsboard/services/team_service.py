# OPSBOARD/opsboard/services/team_service.py : membres et rôles d'une entreprise

from sqlalchemy.orm import Session
from typing import Dict, List, Optional
import logging
import secrets

from opsboard.auth import hash_password
from opsboard.constants import INVITABLE_ROLES, ROLE_OWNER
from opsboard.errors import ConflictError
from opsboard.models import models

logger = logging.getLogger(__name__)


class TeamService:

    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    @staticmethod
    def serialize(role: models.UserRole, profile: Optional[models.Profile]) -> Dict:
        return {
            "id": role.id,
            "user_id": role.user_id,
            "role": role.role,
            "created_at": role.created_at,
            "email": profile.email if profile else None,
            "full_name": profile.full_name if profile else None,
            "phone_number": profile.phone_number if profile else None,
        }

    def list_members(self) -> List[Dict]:
        rows = self.db.query(models.UserRole, models.Profile).outerjoin(
            models.Profile, models.Profile.id == models.UserRole.user_id
        ).filter(
            models.UserRole.business_id == self.business_id
        ).order_by(models.UserRole.created_at, models.UserRole.id).all()
        return [self.serialize(role, profile) for role, profile in rows]

    def invite(self, email: str, role: str, full_name: Optional[str] = None) -> Dict:
        """Ajoute un rôle à un compte existant, ou crée le compte.

        Un compte créé reçoit un mot de passe temporaire, renvoyé une seule fois.
        """
        email = (email or "").strip().lower()
        if "@" not in email:
            raise ValueError("Adresse email invalide")
        if role not in INVITABLE_ROLES:
            raise ValueError(f"Rôle invalide: {role}")

        user = self.db.query(models.User).filter(models.User.email == email).first()
        temporary_password = None
        created_account = False

        if user:
            profile = user.profile
            if profile and profile.business_id and profile.business_id != self.business_id:
                raise ConflictError("Cet utilisateur appartient déjà à une autre entreprise")
            existing = self.db.query(models.UserRole).filter(
                models.UserRole.user_id == user.id,
                models.UserRole.business_id == self.business_id,
                models.UserRole.role == role
            ).first()
            if existing:
                raise ConflictError("Ce membre a déjà ce rôle")
            if profile is None:
                profile = models.Profile(id=user.id, email=user.email, full_name=full_name)
                self.db.add(profile)
            if profile.business_id is None:
                profile.business_id = self.business_id
            if full_name and not profile.full_name:
                profile.full_name = full_name
        else:
            temporary_password = secrets.token_urlsafe(9)
            user = models.User(email=email, password_hash=hash_password(temporary_password))
            self.db.add(user)
            self.db.flush()
            profile = models.Profile(
                id=user.id,
                email=email,
                full_name=full_name,
                business_id=self.business_id
            )
            self.db.add(profile)
            created_account = True

        user_role = models.UserRole(user_id=user.id, business_id=self.business_id, role=role)
        self.db.add(user_role)
        self.db.commit()
        self.db.refresh(user_role)
        logger.info(f"Rôle {role} accordé à l'utilisateur {user.id} (entreprise {self.business_id})")
        return {
            "member": self.serialize(user_role, profile),
            "created_account": created_account,
            "temporary_password": temporary_password,
        }

    def remove_role(self, role_id: int):
        role = self.db.query(models.UserRole).filter(
            models.UserRole.id == role_id,
            models.UserRole.business_id == self.business_id
        ).first()
        if not role:
            raise LookupError("Rôle non trouvé")
        if role.role == ROLE_OWNER:
            raise PermissionError("Le rôle de propriétaire ne peut pas être retiré")

        user_id = role.user_id
        self.db.delete(role)
        self.db.flush()

        remaining = self.db.query(models.UserRole).filter(
            models.UserRole.user_id == user_id,
            models.UserRole.business_id == self.business_id
        ).count()
        if not remaining:
            profile = self.db.query(models.Profile).filter(models.Profile.id == user_id).first()
            if profile and profile.business_id == self.business_id:
                profile.business_id = None
            # Les livraisons en attente ne restent pas attribuées à un ancien membre
            self.db.query(models.Order).filter(
                models.Order.business_id == self.business_id,
                models.Order.assigned_driver_id == user_id
            ).update({models.Order.assigned_driver_id: None}, synchronize_session=False)
        self.db.commit()
        logger.info(f"Rôle {role_id} retiré (entreprise {self.business_id})")
