"""Derived-field recalculation after an upstream value changes."""

import logging
from typing import Any, Iterable, List, Optional

from core.errors import ValidationAppException
from modules.costing.calculator import apply_line_cost, is_finite

logger = logging.getLogger(__name__)


def compute_final_price(price: float, price_adjustment: float) -> float:
    price = price or 0.0
    price_adjustment = price_adjustment or 0.0
    if not (is_finite(price) and is_finite(price_adjustment)):
        raise ValidationAppException("Price and price adjustment must be finite numbers", code="invalid_price")
    return price + price_adjustment


def apply_final_price(variation: Any, price: float) -> Any:
    variation.final_price = compute_final_price(price, variation.price_adjustment)
    return variation


def reprice_variations(product: Any, variations: Optional[Iterable[Any]] = None) -> List[Any]:
    """Recompute ``final_price`` for a product's variations; returns the ones that changed."""
    variations = list(variations if variations is not None else product.variations or [])
    changed = []
    for variation in variations:
        previous = variation.final_price
        apply_final_price(variation, product.price)
        if previous != variation.final_price:
            changed.append(variation)
    if changed:
        logger.info("Repriced %d variation(s) of product %s", len(changed), product.id)
    return changed


def recost_bom_rows(rows: Iterable[Any], unit_cost: float) -> List[Any]:
    """Give every active row the new unit cost and recompute its total."""
    if not is_finite(unit_cost) or unit_cost < 0:
        raise ValidationAppException("Unit cost must be a finite number, zero or positive", code="invalid_cost")
    changed = []
    for row in rows:
        if not row.is_active:
            continue
        row.unit_cost = unit_cost
        apply_line_cost(row)
        changed.append(row)
    return changed


def check_stock(value: Optional[float], field: str = "stock_quantity") -> None:
    if value is not None and (not is_finite(value) or value < 0):
        raise ValidationAppException(f"{field} must be a finite number and not negative", code="negative_stock")
