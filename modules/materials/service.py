import logging
from typing import List, Optional

from core.errors import ValidationAppException
from core.store import Store
from modules.costing.calculator import is_finite
from modules.costing.recalc import check_stock, recost_bom_rows
from modules.materials import models, schemas
from modules.products.models import BOMItem
from modules.variations.models import BOMVariation

logger = logging.getLogger(__name__)

STOCK_FIELDS = ("quantity_on_hand", "current_stock", "min_stock")


def _validate_amounts(values: dict) -> None:
    for field in STOCK_FIELDS:
        check_stock(values.get(field), field)
    for field in ("unit_cost", "unit_price"):
        value = values.get(field)
        if value is not None and (not is_finite(value) or value < 0):
            raise ValidationAppException(f"{field} must be a finite number, zero or positive", code="invalid_cost")


def create_material(store: Store, material_in: schemas.MaterialCreate) -> models.Material:
    values = material_in.model_dump()
    _validate_amounts(values)
    material = models.Material(user_id=store.user_id, is_active=True, **values)
    material = store.insert(material).unwrap()
    logger.info("Created material %s (%s)", material.id, material.name)
    return material


def list_materials(store: Store, include_inactive: bool = False, shop_id: Optional[str] = None) -> List[models.Material]:
    filters = {}
    if not include_inactive:
        filters["is_active"] = True
    if shop_id is not None:
        filters["shop_id"] = shop_id
    return store.find(models.Material, order_by=models.Material.name, **filters).unwrap()


def get_material(store: Store, material_id: str) -> models.Material:
    return store.get(models.Material, material_id).unwrap()


def list_low_stock(store: Store, shop_id: Optional[str] = None) -> List[models.Material]:
    return [m for m in list_materials(store, shop_id=shop_id) if m.current_stock <= m.min_stock]


def update_material(store: Store, material_id: str, material_in: schemas.MaterialUpdate) -> models.Material:
    material = get_material(store, material_id)
    changes = material_in.model_dump(exclude_unset=True, exclude_none=True)
    _validate_amounts(changes)

    to_save = [material]
    new_cost = changes.get("unit_cost")
    if new_cost is not None and new_cost != material.unit_cost:
        bom_items = store.find(BOMItem, material_id=material.id, is_active=True).unwrap()
        bom_variations = store.find(BOMVariation, material_id=material.id, is_active=True).unwrap()
        recosted = recost_bom_rows(bom_items, new_cost) + recost_bom_rows(bom_variations, new_cost)
        to_save.extend(recosted)
        logger.info(
            "Material %s unit cost %s -> %s, re-costed %d BOM row(s)",
            material.id,
            material.unit_cost,
            new_cost,
            len(recosted),
        )

    for field, value in changes.items():
        setattr(material, field, value)
    store.save(to_save).unwrap()
    return material


def deactivate_material(store: Store, material_id: str) -> models.Material:
    material = get_material(store, material_id)
    return store.soft_delete(material).unwrap()
