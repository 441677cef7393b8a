"""BOM rows for products (BOMItem) and for product variations (BOMVariation)."""

import logging
from typing import Any, Iterable, List, Optional, Type

from core.errors import ConflictException, ValidationAppException
from core.store import Store
from modules.costing.calculator import apply_line_cost, compute_line_cost
from modules.materials.models import Material
from modules.products import schemas as product_schemas
from modules.products.models import BOMItem, Product
from modules.variations import schemas as variation_schemas
from modules.variations.models import BOMVariation, ProductVariation

logger = logging.getLogger(__name__)


def _active_material(store: Store, material_id: str) -> Material:
    material = store.get(Material, material_id).unwrap()
    if not material.is_active:
        raise ValidationAppException(f"Material '{material.name}' is inactive", code="inactive_material")
    return material


def _ensure_material_free(rows: Iterable[Any], material_id: str, exclude_id: Optional[str] = None) -> None:
    for row in rows:
        if row.is_active and row.material_id == material_id and row.id != exclude_id:
            raise ConflictException("This material is already in the bill of materials", code="duplicate_bom_item")


def build_row(
    store: Store,
    model: Type[Any],
    material_id: str,
    quantity: float,
    unit_cost: Optional[float],
    notes: Optional[str],
    **parent,
) -> Any:
    """Validated, costed and unsaved BOM row; unit cost falls back to the material's."""
    material = _active_material(store, material_id)
    row = model(
        user_id=store.user_id,
        material_id=material.id,
        material=material,
        quantity=quantity,
        unit_cost=material.unit_cost if unit_cost is None else unit_cost,
        notes=notes,
        is_active=True,
        **parent,
    )
    return apply_line_cost(row)


def build_product_rows(
    store: Store, items_in: Iterable[product_schemas.BOMItemCreate], shop_id: Optional[str] = None
) -> List[BOMItem]:
    rows: List[BOMItem] = []
    for item_in in items_in:
        _ensure_material_free(rows, item_in.material_id)
        rows.append(
            build_row(store, BOMItem, item_in.material_id, item_in.quantity, item_in.unit_cost, item_in.notes, shop_id=shop_id)
        )
    return rows


def _apply_changes(row: Any, changes: dict) -> Any:
    quantity = changes.get("quantity", row.quantity)
    unit_cost = changes.get("unit_cost", row.unit_cost)
    total_cost = compute_line_cost(quantity, unit_cost)
    row.quantity, row.unit_cost, row.total_cost = quantity, unit_cost, total_cost
    if "notes" in changes:
        row.notes = changes["notes"]
    if "is_active" in changes:
        row.is_active = changes["is_active"]
    return row


# -- product BOM ------------------------------------------------------------


def add_bom_item(store: Store, product_id: str, item_in: product_schemas.BOMItemCreate) -> BOMItem:
    product = store.get(Product, product_id).unwrap()
    _ensure_material_free(product.bom_items, item_in.material_id)
    row = build_row(
        store,
        BOMItem,
        item_in.material_id,
        item_in.quantity,
        item_in.unit_cost,
        item_in.notes,
        product_id=product.id,
        shop_id=product.shop_id,
    )
    row = store.insert(row).unwrap()
    logger.info("Added BOM item %s to product %s (total %.2f)", row.id, product.id, row.total_cost)
    return row


def list_bom_items(store: Store, product_id: str, include_inactive: bool = False) -> List[BOMItem]:
    store.get(Product, product_id).unwrap()
    filters = {"product_id": product_id}
    if not include_inactive:
        filters["is_active"] = True
    return store.find(BOMItem, order_by=BOMItem.created_at, **filters).unwrap()


def get_bom_item(store: Store, item_id: str) -> BOMItem:
    return store.get(BOMItem, item_id).unwrap()


def update_bom_item(store: Store, item_id: str, item_in: product_schemas.BOMItemUpdate) -> BOMItem:
    row = get_bom_item(store, item_id)
    changes = item_in.model_dump(exclude_unset=True, exclude_none=True)
    if changes.get("is_active") and not row.is_active:
        _ensure_material_free(row.product.bom_items, row.material_id, exclude_id=row.id)
    _apply_changes(row, changes)
    return store.save([row]).unwrap()[0]


def deactivate_bom_item(store: Store, item_id: str) -> BOMItem:
    return store.soft_delete(get_bom_item(store, item_id)).unwrap()


def duplicate_bom_item(store: Store, item_id: str, duplicate_in: product_schemas.BOMItemDuplicate) -> BOMItem:
    """Copy a BOM item onto another product.

    Without ``copy_quantity`` the copy uses quantity 1, without
    ``copy_unit_cost`` it uses unit cost 0.
    """
    source = get_bom_item(store, item_id)
    target = store.get(Product, duplicate_in.target_product_id).unwrap()
    _ensure_material_free(target.bom_items, source.material_id)
    row = build_row(
        store,
        BOMItem,
        source.material_id,
        source.quantity if duplicate_in.copy_quantity else 1.0,
        source.unit_cost if duplicate_in.copy_unit_cost else 0.0,
        source.notes,
        product_id=target.id,
        shop_id=target.shop_id,
    )
    row = store.insert(row).unwrap()
    logger.info("Duplicated BOM item %s onto product %s as %s", source.id, target.id, row.id)
    return row


# -- variation BOM ----------------------------------------------------------


def add_bom_variation(store: Store, variation_id: str, row_in: variation_schemas.BOMVariationCreate) -> BOMVariation:
    variation = store.get(ProductVariation, variation_id).unwrap()
    _ensure_material_free(variation.bom_variations, row_in.material_id)
    row = build_row(
        store,
        BOMVariation,
        row_in.material_id,
        row_in.quantity,
        row_in.unit_cost,
        row_in.notes,
        product_variation_id=variation.id,
        shop_id=variation.product.shop_id,
    )
    row = store.insert(row).unwrap()
    logger.info("Added BOM variation %s to variation %s (total %.2f)", row.id, variation.id, row.total_cost)
    return row


def list_bom_variations(store: Store, variation_id: str, include_inactive: bool = False) -> List[BOMVariation]:
    store.get(ProductVariation, variation_id).unwrap()
    filters = {"product_variation_id": variation_id}
    if not include_inactive:
        filters["is_active"] = True
    return store.find(BOMVariation, order_by=BOMVariation.created_at, **filters).unwrap()


def get_bom_variation(store: Store, row_id: str) -> BOMVariation:
    return store.get(BOMVariation, row_id).unwrap()


def update_bom_variation(store: Store, row_id: str, row_in: variation_schemas.BOMVariationUpdate) -> BOMVariation:
    row = get_bom_variation(store, row_id)
    changes = row_in.model_dump(exclude_unset=True, exclude_none=True)
    if changes.get("is_active") and not row.is_active:
        _ensure_material_free(row.product_variation.bom_variations, row.material_id, exclude_id=row.id)
    _apply_changes(row, changes)
    return store.save([row]).unwrap()[0]


def deactivate_bom_variation(store: Store, row_id: str) -> BOMVariation:
    return store.soft_delete(get_bom_variation(store, row_id)).unwrap()
