import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError

from core.errors import ConflictException, StoreException, ValidationAppException
from core.store import Store
from modules.costing.calculator import variation_material_cost
from modules.costing.recalc import apply_final_price, check_stock
from modules.products.models import Product
from modules.variations import models, presets, schemas
from modules.variations.composer import (
    VariationComposer,
    ensure_unique_combination,
    ensure_unique_sku,
    option_set,
)

logger = logging.getLogger(__name__)


# -- variation types and options ---------------------------------------------


def list_variation_types(store: Store) -> List[models.VariationType]:
    """The caller's own types followed by the shared system presets."""
    types = store.find(models.VariationType, shared=True, order_by=models.VariationType.name).unwrap()
    return sorted(types, key=lambda t: t.user_id != store.user_id)


def create_variation_type(store: Store, type_in: schemas.VariationTypeCreate) -> models.VariationType:
    variation_type = models.VariationType(user_id=store.user_id, name=type_in.name, description=type_in.description)
    return store.insert(variation_type).unwrap()


def update_variation_type(store: Store, type_id: str, type_in: schemas.VariationTypeUpdate) -> models.VariationType:
    variation_type = store.get(models.VariationType, type_id).unwrap()
    return store.update(variation_type, **type_in.model_dump(exclude_unset=True, exclude_none=True)).unwrap()


def _ensure_unused(store: Store, option_ids: List[str]) -> None:
    # combinations of every owner count; system presets are shared
    if not option_ids:
        return
    if store.is_referenced(models.VariationCombination, variation_option_id=option_ids).unwrap():
        raise ConflictException("Variation option is used by a product variation", code="option_in_use")


def delete_variation_type(store: Store, type_id: str) -> None:
    variation_type = store.get(models.VariationType, type_id).unwrap()
    _ensure_unused(store, [o.id for o in variation_type.options])
    store.delete(variation_type).unwrap()
    logger.info("Deleted variation type %s", type_id)


def list_options(store: Store, type_id: str) -> List[models.VariationOption]:
    store.get(models.VariationType, type_id, shared=True).unwrap()
    return store.find(
        models.VariationOption, shared=True, order_by=models.VariationOption.name, variation_type_id=type_id
    ).unwrap()


def create_option(store: Store, type_id: str, option_in: schemas.VariationOptionCreate) -> models.VariationOption:
    variation_type = store.get(models.VariationType, type_id).unwrap()
    option = models.VariationOption(
        user_id=store.user_id,
        variation_type_id=variation_type.id,
        name=option_in.name,
        description=option_in.description,
    )
    return store.insert(option).unwrap()


def update_option(store: Store, option_id: str, option_in: schemas.VariationOptionUpdate) -> models.VariationOption:
    option = store.get(models.VariationOption, option_id).unwrap()
    return store.update(option, **option_in.model_dump(exclude_unset=True, exclude_none=True)).unwrap()


def delete_option(store: Store, option_id: str) -> None:
    option = store.get(models.VariationOption, option_id).unwrap()
    _ensure_unused(store, [option.id])
    store.delete(option).unwrap()
    logger.info("Deleted variation option %s", option_id)


def apply_presets(store: Store) -> List[models.VariationType]:
    try:
        return presets.ensure_user_variation_types(store.db, store.user_id, store.system_owner_id)
    except SQLAlchemyError as exc:
        store.db.rollback()
        logger.error("Copying variation presets for %s failed: %s", store.user_id, exc)
        raise StoreException("Could not copy variation presets") from exc


# -- product variations ------------------------------------------------------


def serialize_variation(variation: models.ProductVariation) -> Dict[str, Any]:
    combinations = []
    for combination in variation.combinations or []:
        option = combination.variation_option
        combinations.append(
            {
                "id": combination.id,
                "variation_option_id": combination.variation_option_id,
                "option_name": option.name,
                "variation_type_id": option.variation_type_id,
                "variation_type_name": option.variation_type.name,
            }
        )
    return {
        "id": variation.id,
        "product_id": variation.product_id,
        "name": variation.name,
        "sku": variation.sku,
        "price_adjustment": variation.price_adjustment,
        "final_price": variation.final_price,
        "stock_quantity": variation.stock_quantity,
        "is_active": variation.is_active,
        "combinations": combinations,
        "option_names": [c["option_name"] for c in combinations],
        "total_bom_cost": variation_material_cost(variation),
        "created_at": variation.created_at,
        "updated_at": variation.updated_at,
    }


def _siblings(store: Store, product_id: str) -> List[models.ProductVariation]:
    return store.find(models.ProductVariation, product_id=product_id).unwrap()


def create_product_variation(
    store: Store, product_id: str, variation_in: schemas.ProductVariationCreate
) -> Dict[str, Any]:
    product = store.get(Product, product_id).unwrap()
    if not product.is_active:
        raise ValidationAppException("Cannot add a variation to an inactive product", code="inactive_product")

    selected = list(variation_in.selected_options)
    known = store.find(models.VariationOption, shared=True, id=selected).unwrap() if selected else []
    composer = VariationComposer({option.id: option for option in known})
    try:
        variation = composer.compose(
            product,
            name=variation_in.name,
            selected_option_ids=selected,
            price_adjustment=variation_in.price_adjustment,
            stock_quantity=variation_in.stock_quantity,
            sku=variation_in.sku,
            siblings=_siblings(store, product.id),
        )
    except (ValidationAppException, ConflictException) as exc:
        logger.warning("Rejected variation '%s' for product %s: %s", variation_in.name, product.id, exc.code)
        raise

    variation = store.insert(variation).unwrap()
    logger.info(
        "Created variation %s for product %s (final price %.2f, %d option(s))",
        variation.id,
        product.id,
        variation.final_price,
        len(variation.combinations),
    )
    return serialize_variation(variation)


def list_product_variations(store: Store, product_id: str, include_inactive: bool = False) -> List[Dict[str, Any]]:
    store.get(Product, product_id).unwrap()
    filters = {"product_id": product_id}
    if not include_inactive:
        filters["is_active"] = True
    variations = store.find(models.ProductVariation, order_by=models.ProductVariation.name, **filters).unwrap()
    return [serialize_variation(v) for v in variations]


def _get_variation_model(store: Store, variation_id: str) -> models.ProductVariation:
    return store.get(models.ProductVariation, variation_id).unwrap()


def get_product_variation(store: Store, variation_id: str) -> Dict[str, Any]:
    return serialize_variation(_get_variation_model(store, variation_id))


def update_product_variation(
    store: Store, variation_id: str, variation_in: schemas.ProductVariationUpdate
) -> Dict[str, Any]:
    variation = _get_variation_model(store, variation_id)
    changes = variation_in.model_dump(exclude_unset=True, exclude_none=True)
    check_stock(changes.get("stock_quantity"))
    if "sku" in changes:
        changes["sku"] = changes["sku"].strip() or None

    will_be_active = changes.get("is_active", variation.is_active)
    if will_be_active:
        reactivating = not variation.is_active
        sku_changed = changes.get("sku", variation.sku) != variation.sku
        if reactivating or sku_changed:
            siblings = _siblings(store, variation.product_id)
            if reactivating:
                ensure_unique_combination(option_set(variation), siblings, exclude_id=variation.id)
            ensure_unique_sku(changes.get("sku", variation.sku), siblings, exclude_id=variation.id)

    for field, value in changes.items():
        setattr(variation, field, value)
    apply_final_price(variation, variation.product.price)

    store.save([variation]).unwrap()
    return serialize_variation(variation)


def deactivate_product_variation(store: Store, variation_id: str) -> Dict[str, Any]:
    variation = store.soft_delete(_get_variation_model(store, variation_id)).unwrap()
    return serialize_variation(variation)
