import logging
from typing import List, Optional

from core.errors import ValidationAppException
from core.store import Store
from modules.bom import service as bom_service
from modules.costing.calculator import is_finite
from modules.costing.recalc import check_stock, reprice_variations
from modules.products import models, schemas
from modules.variations.models import ProductVariation

logger = logging.getLogger(__name__)


def _check_prices(values: dict) -> None:
    for field in ("price", "cost_price"):
        value = values.get(field)
        if value is not None and not is_finite(value):
            raise ValidationAppException(f"{field} must be a finite number", code="invalid_price")


def create_product(store: Store, product_in: schemas.ProductCreate) -> models.Product:
    check_stock(product_in.stock_quantity)
    _check_prices(product_in.model_dump(include={"price", "cost_price"}))
    # Every BOM row is validated before the product is written
    bom_rows = bom_service.build_product_rows(store, product_in.bom_items or [], shop_id=product_in.shop_id)

    product = models.Product(
        user_id=store.user_id,
        shop_id=product_in.shop_id,
        category_id=product_in.category_id,
        name=product_in.name,
        sku=product_in.sku,
        price=product_in.price,
        cost_price=product_in.cost_price,
        stock_quantity=product_in.stock_quantity,
        is_active=True,
    )
    product.bom_items.extend(bom_rows)

    product = store.insert(product).unwrap()
    logger.info("Created product %s (%s) with %d BOM item(s)", product.id, product.name, len(bom_rows))
    return product


def list_products(
    store: Store,
    include_inactive: bool = False,
    shop_id: Optional[str] = None,
    category_id: Optional[str] = None,
) -> List[models.Product]:
    filters = {}
    if not include_inactive:
        filters["is_active"] = True
    if shop_id is not None:
        filters["shop_id"] = shop_id
    if category_id is not None:
        filters["category_id"] = category_id
    return store.find(models.Product, order_by=models.Product.name, **filters).unwrap()


def get_product(store: Store, product_id: str) -> models.Product:
    return store.get(models.Product, product_id).unwrap()


def update_product(store: Store, product_id: str, product_in: schemas.ProductUpdate) -> models.Product:
    """Apply changes; a price change re-prices every variation in the same write."""
    product = get_product(store, product_id)
    changes = product_in.model_dump(exclude_unset=True, exclude_none=True)
    check_stock(changes.get("stock_quantity"))
    _check_prices(changes)

    old_price = product.price
    for field, value in changes.items():
        setattr(product, field, value)

    to_save = [product]
    if "price" in changes and changes["price"] != old_price:
        variations = store.find(ProductVariation, product_id=product.id).unwrap()
        to_save.extend(reprice_variations(product, variations))
        logger.info("Product %s price %s -> %s", product.id, old_price, product.price)

    store.save(to_save).unwrap()
    return product


def deactivate_product(store: Store, product_id: str) -> models.Product:
    return store.soft_delete(get_product(store, product_id)).unwrap()
