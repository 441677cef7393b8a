from typing import Optional

from fastapi import APIRouter, Depends

from core.identity import get_store
from core.store import Store
from modules.materials import schemas, service

router = APIRouter(prefix="/materials", tags=["materials"])


@router.post("", response_model=schemas.MaterialRead)
def create_material_endpoint(material_in: schemas.MaterialCreate, store: Store = Depends(get_store)):
    return service.create_material(store, material_in)


@router.get("", response_model=list[schemas.MaterialRead])
def list_materials_endpoint(
    include_inactive: bool = False,
    shop_id: Optional[str] = None,
    store: Store = Depends(get_store),
):
    return service.list_materials(store, include_inactive=include_inactive, shop_id=shop_id)


@router.get("/low-stock", response_model=list[schemas.MaterialRead])
def list_low_stock_endpoint(shop_id: Optional[str] = None, store: Store = Depends(get_store)):
    return service.list_low_stock(store, shop_id=shop_id)


@router.get("/{material_id}", response_model=schemas.MaterialRead)
def get_material_endpoint(material_id: str, store: Store = Depends(get_store)):
    return service.get_material(store, material_id)


@router.patch("/{material_id}", response_model=schemas.MaterialRead)
def update_material_endpoint(material_id: str, material_in: schemas.MaterialUpdate, store: Store = Depends(get_store)):
    return service.update_material(store, material_id, material_in)


@router.delete("/{material_id}", response_model=schemas.MaterialRead)
def deactivate_material_endpoint(material_id: str, store: Store = Depends(get_store)):
    return service.deactivate_material(store, material_id)
