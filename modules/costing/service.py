from typing import Any, Dict, List, Optional

from core.store import Store
from modules.costing import calculator
from modules.products.models import Product
from modules.variations.models import ProductVariation


def product_cost(store: Store, product_id: str) -> Dict[str, Any]:
    product = store.get(Product, product_id).unwrap()
    return calculator.product_cost_summary(product)


def variation_cost(store: Store, variation_id: str) -> Dict[str, Any]:
    variation = store.get(ProductVariation, variation_id).unwrap()
    return calculator.variation_cost_summary(variation)


def margin_ranking(store: Store, shop_id: Optional[str] = None) -> List[Dict[str, Any]]:
    filters = {"is_active": True}
    if shop_id is not None:
        filters["shop_id"] = shop_id
    products = store.find(Product, **filters).unwrap()
    return calculator.rank_by_margin(products)
