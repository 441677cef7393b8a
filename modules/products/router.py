from typing import Optional

from fastapi import APIRouter, Depends

from core.identity import get_store
from core.store import Store
from modules.bom import service as bom_service
from modules.products import schemas, service

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=schemas.ProductRead)
def create_product_endpoint(product_in: schemas.ProductCreate, store: Store = Depends(get_store)):
    return service.create_product(store, product_in)


@router.get("", response_model=list[schemas.ProductRead])
def list_products_endpoint(
    include_inactive: bool = False,
    shop_id: Optional[str] = None,
    category_id: Optional[str] = None,
    store: Store = Depends(get_store),
):
    return service.list_products(store, include_inactive=include_inactive, shop_id=shop_id, category_id=category_id)


@router.get("/{product_id}", response_model=schemas.ProductRead)
def get_product_endpoint(product_id: str, store: Store = Depends(get_store)):
    return service.get_product(store, product_id)


@router.patch("/{product_id}", response_model=schemas.ProductRead)
def update_product_endpoint(product_id: str, product_in: schemas.ProductUpdate, store: Store = Depends(get_store)):
    return service.update_product(store, product_id, product_in)


@router.delete("/{product_id}", response_model=schemas.ProductRead)
def deactivate_product_endpoint(product_id: str, store: Store = Depends(get_store)):
    return service.deactivate_product(store, product_id)


@router.post("/{product_id}/bom-items", response_model=schemas.BOMItemRead)
def add_bom_item_endpoint(product_id: str, item_in: schemas.BOMItemCreate, store: Store = Depends(get_store)):
    return bom_service.add_bom_item(store, product_id, item_in)


@router.get("/{product_id}/bom-items", response_model=list[schemas.BOMItemRead])
def list_bom_items_endpoint(product_id: str, include_inactive: bool = False, store: Store = Depends(get_store)):
    return bom_service.list_bom_items(store, product_id, include_inactive=include_inactive)
