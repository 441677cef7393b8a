from fastapi import APIRouter, Depends, Response, status

from core.identity import get_store
from core.store import Store
from modules.variations import schemas, service

router = APIRouter(tags=["variations"])


@router.get("/variation-types", response_model=list[schemas.VariationTypeRead])
def list_variation_types_endpoint(store: Store = Depends(get_store)):
    return service.list_variation_types(store)


@router.post("/variation-types", response_model=schemas.VariationTypeRead)
def create_variation_type_endpoint(type_in: schemas.VariationTypeCreate, store: Store = Depends(get_store)):
    return service.create_variation_type(store, type_in)


@router.patch("/variation-types/{type_id}", response_model=schemas.VariationTypeRead)
def update_variation_type_endpoint(
    type_id: str, type_in: schemas.VariationTypeUpdate, store: Store = Depends(get_store)
):
    return service.update_variation_type(store, type_id, type_in)


@router.delete("/variation-types/{type_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_variation_type_endpoint(type_id: str, store: Store = Depends(get_store)):
    service.delete_variation_type(store, type_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/variation-types/{type_id}/options", response_model=list[schemas.VariationOptionRead])
def list_options_endpoint(type_id: str, store: Store = Depends(get_store)):
    return service.list_options(store, type_id)


@router.post("/variation-types/{type_id}/options", response_model=schemas.VariationOptionRead)
def create_option_endpoint(type_id: str, option_in: schemas.VariationOptionCreate, store: Store = Depends(get_store)):
    return service.create_option(store, type_id, option_in)


@router.patch("/variation-options/{option_id}", response_model=schemas.VariationOptionRead)
def update_option_endpoint(
    option_id: str, option_in: schemas.VariationOptionUpdate, store: Store = Depends(get_store)
):
    return service.update_option(store, option_id, option_in)


@router.delete("/variation-options/{option_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_option_endpoint(option_id: str, store: Store = Depends(get_store)):
    service.delete_option(store, option_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/variation-presets/apply", response_model=list[schemas.VariationTypeRead])
def apply_presets_endpoint(store: Store = Depends(get_store)):
    return service.apply_presets(store)


@router.post("/products/{product_id}/variations", response_model=schemas.ProductVariationRead)
def create_product_variation_endpoint(
    product_id: str, variation_in: schemas.ProductVariationCreate, store: Store = Depends(get_store)
):
    return service.create_product_variation(store, product_id, variation_in)


@router.get("/products/{product_id}/variations", response_model=list[schemas.ProductVariationRead])
def list_product_variations_endpoint(product_id: str, include_inactive: bool = False, store: Store = Depends(get_store)):
    return service.list_product_variations(store, product_id, include_inactive=include_inactive)


@router.get("/variations/{variation_id}", response_model=schemas.ProductVariationRead)
def get_product_variation_endpoint(variation_id: str, store: Store = Depends(get_store)):
    return service.get_product_variation(store, variation_id)


@router.patch("/variations/{variation_id}", response_model=schemas.ProductVariationRead)
def update_product_variation_endpoint(
    variation_id: str, variation_in: schemas.ProductVariationUpdate, store: Store = Depends(get_store)
):
    return service.update_product_variation(store, variation_id, variation_in)


@router.delete("/variations/{variation_id}", response_model=schemas.ProductVariationRead)
def deactivate_product_variation_endpoint(variation_id: str, store: Store = Depends(get_store)):
    return service.deactivate_product_variation(store, variation_id)
