"""Cost roll-up for BOM rows, products and product variations.

Everything here is a pure function over entity objects (persisted or
transient); nothing touches the store.
"""

import math
from typing import Any, Dict, Iterable, List, Optional

from core.errors import ValidationAppException


def is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def compute_line_cost(quantity: float, unit_cost: float) -> float:
    if not is_finite(quantity) or quantity < 0:
        raise ValidationAppException("Quantity must be a finite number, zero or positive", code="invalid_quantity")
    if not is_finite(unit_cost) or unit_cost < 0:
        raise ValidationAppException("Unit cost must be a finite number, zero or positive", code="invalid_cost")
    return quantity * unit_cost


def apply_line_cost(row: Any) -> Any:
    """Set ``total_cost`` on a BOMItem or BOMVariation from its own factors."""
    row.total_cost = compute_line_cost(row.quantity, row.unit_cost)
    return row


def active_rows(rows: Iterable[Any]) -> List[Any]:
    return [row for row in rows or [] if row.is_active]


def aggregate_material_cost(items: Iterable[Any]) -> float:
    return sum((item.total_cost or 0.0) for item in active_rows(items))


def margin_for(price: float, material_cost: float) -> Optional[float]:
    if not price:
        return None
    return (price - material_cost) / price


def profit_margin(product: Any) -> Optional[float]:
    return margin_for(product.price, aggregate_material_cost(product.bom_items))


def effective_bom(product: Any, variation: Any) -> List[Any]:
    """Product BOM with rows overridden or extended by the variation's own rows.

    Only active rows take part. A variation row replaces the product row for
    the same material in place; variation rows for materials the product does
    not use are appended in their own order.
    """
    overrides: Dict[str, Any] = {}
    for row in active_rows(variation.bom_variations):
        overrides[row.material_id] = row

    merged: List[Any] = []
    used = set()
    for item in active_rows(product.bom_items):
        if item.material_id in overrides:
            merged.append(overrides[item.material_id])
            used.add(item.material_id)
        else:
            merged.append(item)
    for material_id, row in overrides.items():
        if material_id not in used:
            merged.append(row)
    return merged


def variation_material_cost(variation: Any, product: Any = None) -> float:
    product = product if product is not None else variation.product
    return aggregate_material_cost(effective_bom(product, variation))


def variation_profit_margin(variation: Any, product: Any = None) -> Optional[float]:
    return margin_for(variation.final_price, variation_material_cost(variation, product))


def _bom_line(row: Any) -> Dict[str, Any]:
    material = getattr(row, "material", None)
    return {
        "id": row.id,
        "material_id": row.material_id,
        "material_name": material.name if material is not None else None,
        "unit": material.unit if material is not None else None,
        "quantity": row.quantity,
        "unit_cost": row.unit_cost,
        "total_cost": row.total_cost,
        "source": "variation" if hasattr(row, "product_variation_id") else "product",
    }


def variation_cost_summary(variation: Any, product: Any = None) -> Dict[str, Any]:
    product = product if product is not None else variation.product
    rows = effective_bom(product, variation)
    material_cost = aggregate_material_cost(rows)
    return {
        "variation_id": variation.id,
        "name": variation.name,
        "final_price": variation.final_price,
        "total_material_cost": material_cost,
        "profit_margin": margin_for(variation.final_price, material_cost),
        "bom": [_bom_line(row) for row in rows],
    }


def product_cost_summary(product: Any) -> Dict[str, Any]:
    rows = active_rows(product.bom_items)
    material_cost = aggregate_material_cost(rows)
    variations = [v for v in getattr(product, "variations", None) or [] if v.is_active]
    return {
        "product_id": product.id,
        "name": product.name,
        "price": product.price,
        "total_material_cost": material_cost,
        "profit_margin": margin_for(product.price, material_cost),
        "bom": [_bom_line(row) for row in rows],
        "variations": [variation_cost_summary(v, product) for v in variations],
    }


def rank_by_margin(products: Iterable[Any]) -> List[Dict[str, Any]]:
    """Products with a BOM, highest margin first; undefined margins sort last."""
    ranked = []
    for product in products:
        if not active_rows(product.bom_items):
            continue
        material_cost = aggregate_material_cost(product.bom_items)
        ranked.append(
            {
                "product_id": product.id,
                "name": product.name,
                "price": product.price,
                "total_material_cost": material_cost,
                "profit_margin": margin_for(product.price, material_cost),
            }
        )
    ranked.sort(key=lambda x: (x["profit_margin"] is None, -(x["profit_margin"] or 0.0)))
    return ranked
