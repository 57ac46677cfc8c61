# OPSBOARD/opsboard/services/business_service.py : onboarding, paramètres et budget

from sqlalchemy.orm import Session
from typing import Dict, List, Optional
import logging

from opsboard.constants import CURRENCIES, ROLE_OWNER
from opsboard.errors import ConflictError
from opsboard.models import models
from opsboard.services import calculations

logger = logging.getLogger(__name__)


def list_currencies() -> List[Dict]:
    return [
        {"code": code, "label": label, "symbol": symbol}
        for code, (label, symbol) in CURRENCIES.items()
    ]


def _check_currency(currency: str) -> str:
    code = (currency or "").strip().upper()
    if code not in CURRENCIES:
        raise ValueError(f"Devise non supportée: {currency}")
    return code


class BusinessService:

    def __init__(self, db: Session):
        self.db = db

    def onboard(self, user: models.User, name: str, currency: str) -> models.Business:
        """Crée l'entreprise, y rattache le profil, donne le rôle owner et un budget à zéro"""
        name = (name or "").strip()
        if not name:
            raise ValueError("Le nom de l'entreprise est obligatoire")
        code = _check_currency(currency)

        profile = self.db.query(models.Profile).filter(models.Profile.id == user.id).first()
        if profile and profile.business_id:
            raise ConflictError("Vous êtes déjà membre d'une entreprise")

        business = models.Business(
            name=name,
            currency=code,
            currency_symbol=calculations.currency_symbol(code)
        )
        self.db.add(business)
        self.db.flush()

        if profile is None:
            profile = models.Profile(id=user.id, email=user.email)
            self.db.add(profile)
        profile.business_id = business.id

        self.db.add(models.UserRole(user_id=user.id, business_id=business.id, role=ROLE_OWNER))
        self.db.add(models.BudgetSettings(business_id=business.id, total_budget=0, amount_spent=0))
        self.db.commit()
        self.db.refresh(business)
        logger.info(f"Entreprise {business.id} créée par l'utilisateur {user.id}")
        return business

    def update(self, business: models.Business, name: Optional[str] = None, currency: Optional[str] = None) -> models.Business:
        if name is not None:
            name = name.strip()
            if not name:
                raise ValueError("Le nom de l'entreprise est obligatoire")
            business.name = name
        if currency is not None:
            code = _check_currency(currency)
            business.currency = code
            business.currency_symbol = calculations.currency_symbol(code)
        self.db.commit()
        self.db.refresh(business)
        return business

    # ---------- Budget ----------

    def _get_budget(self, business_id: int) -> models.BudgetSettings:
        budget = self.db.query(models.BudgetSettings).filter(
            models.BudgetSettings.business_id == business_id
        ).first()
        if budget is None:
            budget = models.BudgetSettings(business_id=business_id, total_budget=0, amount_spent=0)
            self.db.add(budget)
            self.db.commit()
            self.db.refresh(budget)
        return budget

    @staticmethod
    def serialize_budget(budget: models.BudgetSettings) -> Dict:
        remaining = calculations.budget_remaining(budget.total_budget, budget.amount_spent)
        return {
            "id": budget.id,
            "total_budget": budget.total_budget,
            "amount_spent": budget.amount_spent,
            "remaining": remaining,
            "is_over_budget": remaining < 0,
        }

    def get_budget(self, business_id: int) -> Dict:
        return self.serialize_budget(self._get_budget(business_id))

    def update_budget(self, business_id: int, total_budget: float, amount_spent: float) -> Dict:
        if total_budget < 0 or amount_spent < 0:
            raise ValueError("Les montants du budget doivent être positifs")
        budget = self._get_budget(business_id)
        budget.total_budget = total_budget
        budget.amount_spent = amount_spent
        self.db.commit()
        self.db.refresh(budget)
        return self.serialize_budget(budget)
