from typing import Optional

from fastapi import APIRouter, Depends

from core.identity import get_store
from core.store import Store
from modules.costing import service

router = APIRouter(prefix="/costing", tags=["costing"])


@router.get("/products")
def margin_ranking_endpoint(shop_id: Optional[str] = None, store: Store = Depends(get_store)):
    return service.margin_ranking(store, shop_id=shop_id)


@router.get("/products/{product_id}")
def product_cost_endpoint(product_id: str, store: Store = Depends(get_store)):
    return service.product_cost(store, product_id)


@router.get("/variations/{variation_id}")
def variation_cost_endpoint(variation_id: str, store: Store = Depends(get_store)):
    return service.variation_cost(store, variation_id)
