from fastapi import APIRouter, Depends

from core.identity import get_store
from core.store import Store
from modules.bom import service
from modules.products import schemas as product_schemas
from modules.variations import schemas as variation_schemas

router = APIRouter(tags=["bom"])


@router.get("/bom-items/{item_id}", response_model=product_schemas.BOMItemRead)
def get_bom_item_endpoint(item_id: str, store: Store = Depends(get_store)):
    return service.get_bom_item(store, item_id)


@router.patch("/bom-items/{item_id}", response_model=product_schemas.BOMItemRead)
def update_bom_item_endpoint(item_id: str, item_in: product_schemas.BOMItemUpdate, store: Store = Depends(get_store)):
    return service.update_bom_item(store, item_id, item_in)


@router.delete("/bom-items/{item_id}", response_model=product_schemas.BOMItemRead)
def deactivate_bom_item_endpoint(item_id: str, store: Store = Depends(get_store)):
    return service.deactivate_bom_item(store, item_id)


@router.post("/bom-items/{item_id}/duplicate", response_model=product_schemas.BOMItemRead)
def duplicate_bom_item_endpoint(
    item_id: str, duplicate_in: product_schemas.BOMItemDuplicate, store: Store = Depends(get_store)
):
    return service.duplicate_bom_item(store, item_id, duplicate_in)


@router.post("/variations/{variation_id}/bom-variations", response_model=variation_schemas.BOMVariationRead)
def add_bom_variation_endpoint(
    variation_id: str, row_in: variation_schemas.BOMVariationCreate, store: Store = Depends(get_store)
):
    return service.add_bom_variation(store, variation_id, row_in)


@router.get("/variations/{variation_id}/bom-variations", response_model=list[variation_schemas.BOMVariationRead])
def list_bom_variations_endpoint(variation_id: str, include_inactive: bool = False, store: Store = Depends(get_store)):
    return service.list_bom_variations(store, variation_id, include_inactive=include_inactive)


@router.get("/bom-variations/{row_id}", response_model=variation_schemas.BOMVariationRead)
def get_bom_variation_endpoint(row_id: str, store: Store = Depends(get_store)):
    return service.get_bom_variation(store, row_id)


@router.patch("/bom-variations/{row_id}", response_model=variation_schemas.BOMVariationRead)
def update_bom_variation_endpoint(
    row_id: str, row_in: variation_schemas.BOMVariationUpdate, store: Store = Depends(get_store)
):
    return service.update_bom_variation(store, row_id, row_in)


@router.delete("/bom-variations/{row_id}", response_model=variation_schemas.BOMVariationRead)
def deactivate_bom_variation_endpoint(row_id: str, store: Store = Depends(get_store)):
    return service.deactivate_bom_variation(store, row_id)
