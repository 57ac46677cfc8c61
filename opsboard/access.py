# OPSBOARD/opsboard/access.py : résolution de l'entreprise et des rôles de l'utilisateur courant

from dataclasses import dataclass, field
from typing import Optional, Set
import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from opsboard.auth import get_current_user
from opsboard.constants import ROLE_OWNER, ROLE_ADMIN, ROLE_DRIVER, MANAGER_ROLES
from opsboard.database import get_db
from opsboard.models import models

logger = logging.getLogger(__name__)


@dataclass
class BusinessContext:
    """Identité résolue: utilisateur, profil, entreprise et ensemble des rôles"""
    user: models.User
    profile: Optional[models.Profile]
    business: Optional[models.Business]
    roles: Set[str] = field(default_factory=set)
    is_platform_admin: bool = False

    @property
    def business_id(self) -> Optional[int]:
        return self.business.id if self.business else None

    @property
    def is_owner(self) -> bool:
        return ROLE_OWNER in self.roles

    @property
    def is_admin(self) -> bool:
        return ROLE_ADMIN in self.roles

    @property
    def is_driver(self) -> bool:
        return ROLE_DRIVER in self.roles

    @property
    def is_manager(self) -> bool:
        return bool(self.roles & set(MANAGER_ROLES))

    @property
    def needs_onboarding(self) -> bool:
        return self.business is None


def is_platform_admin(db: Session, user_id: int) -> bool:
    return db.query(models.PlatformAdmin).filter(
        models.PlatformAdmin.user_id == user_id
    ).first() is not None


def resolve_context(db: Session, user: models.User) -> BusinessContext:
    """Charge le profil, l'entreprise et les rôles de l'utilisateur"""
    profile = db.query(models.Profile).filter(models.Profile.id == user.id).first()
    business = None
    roles = set()
    if profile and profile.business_id:
        business = db.query(models.Business).filter(
            models.Business.id == profile.business_id
        ).first()
    if business:
        rows = db.query(models.UserRole.role).filter(
            models.UserRole.user_id == user.id,
            models.UserRole.business_id == business.id
        ).all()
        roles = {r[0] for r in rows}
    return BusinessContext(
        user=user,
        profile=profile,
        business=business,
        roles=roles,
        is_platform_admin=is_platform_admin(db, user.id),
    )


def get_context(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
) -> BusinessContext:
    """Contexte sans exigence d'entreprise (onboarding, profil)"""
    return resolve_context(db, current_user)


def get_business_context(ctx: BusinessContext = Depends(get_context)) -> BusinessContext:
    """Contexte d'un membre d'entreprise; sinon l'utilisateur doit passer par l'onboarding"""
    if ctx.needs_onboarding:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Aucune entreprise associée: onboarding requis"
        )
    return ctx


def require_roles(*allowed: str):
    """Fabrique de dépendance: au moins un des rôles `allowed` dans l'entreprise courante"""
    def dependency(ctx: BusinessContext = Depends(get_business_context)) -> BusinessContext:
        if not ctx.roles & set(allowed):
            logger.warning(f"Utilisateur {ctx.user.id} refusé (rôles {sorted(ctx.roles)}, requis {list(allowed)})")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Vous n'avez pas les droits nécessaires"
            )
        return ctx
    return dependency


require_manager = require_roles(*MANAGER_ROLES)
require_owner = require_roles(ROLE_OWNER)
require_driver = require_roles(ROLE_DRIVER)


def require_platform_admin(ctx: BusinessContext = Depends(get_context)) -> BusinessContext:
    if not ctx.is_platform_admin:
        logger.warning(f"Utilisateur {ctx.user.id} refusé: pas administrateur de la plateforme")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Réservé aux administrateurs de la plateforme"
        )
    return ctx
