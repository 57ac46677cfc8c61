# OPSBOARD/opsboard/services/calculations.py : calculs dérivés (disponibilité, coûts, prix)

"""
Fonctions pures, sans accès à la base.

Disponibilité d'un article d'inventaire:
    available = quantity - Σ(component.quantity × product.quantity_available)
pour tous les composants qui référencent l'article.

Prix de vente d'un produit:
    sale_price = round(Σ(unit_cost × component.quantity) × (1 + margin / 100), 2)
"""

from typing import Dict, Iterable, Optional, Tuple

from opsboard.constants import CURRENCIES, DEFAULT_REORDER_LEVEL


def compute_usage(components: Iterable[Tuple[int, float, float]]) -> Dict[int, float]:
    """Quantité réservée par article.

    `components` contient des triplets
    (inventory_item_id, component_quantity, product_quantity_available).
    """
    usage: Dict[int, float] = {}
    for item_id, component_quantity, product_quantity in components:
        used = float(component_quantity or 0) * float(product_quantity or 0)
        usage[item_id] = usage.get(item_id, 0.0) + used
    return usage


def available_quantity(quantity: Optional[float], used: float = 0.0) -> float:
    return float(quantity or 0) - float(used or 0)


def stock_status(available: float, reorder_level: Optional[float] = None) -> str:
    level = DEFAULT_REORDER_LEVEL if reorder_level is None else reorder_level
    if available <= 0:
        return "out-of-stock"
    if available < level:
        return "low-stock"
    return "in-stock"


def total_cost(lines: Iterable[Tuple[Optional[float], float]]) -> float:
    """Coût de revient: somme de unit_cost × quantité sur les composants"""
    return sum(float(unit_cost or 0) * float(quantity or 0) for unit_cost, quantity in lines)


def sale_price(cost: float, profit_margin: Optional[float]) -> float:
    margin = float(profit_margin or 0)
    return round(cost * (1 + margin / 100), 2)


def reconcile_costs(
    quantity: float,
    unit_cost: Optional[float],
    total: Optional[float]
) -> Tuple[float, float]:
    """Complète (unit_cost, total_cost) à partir de ce qui a été saisi.

    Un coût unitaire saisi fait foi; sinon le coût total est réparti sur la quantité.
    """
    qty = float(quantity or 0)
    if unit_cost is not None:
        return float(unit_cost), round(qty * float(unit_cost), 2)
    if total is not None:
        unit = round(float(total) / qty, 2) if qty > 0 else 0.0
        return unit, float(total)
    return 0.0, 0.0


def budget_remaining(total_budget: Optional[float], amount_spent: Optional[float]) -> float:
    return float(total_budget or 0) - float(amount_spent or 0)


def currency_symbol(code: str) -> str:
    entry = CURRENCIES.get(code)
    return entry[1] if entry else "$"


def format_currency(amount: Optional[float], symbol: str = "$") -> str:
    return f"{symbol}{float(amount or 0):,.2f}"
