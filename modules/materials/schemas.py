from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MaterialBase(BaseModel):
    name: str = Field(..., min_length=1, description="Material name")
    description: Optional[str] = None
    sku: Optional[str] = None
    unit: str = Field("pcs", description="Unit of measure")
    unit_cost: float = Field(0.0, description="Purchase cost per unit")
    unit_price: float = Field(0.0, description="Reference price per unit")
    quantity_on_hand: float = 0.0
    current_stock: float = 0.0
    min_stock: float = 0.0
    shop_id: Optional[str] = None


class MaterialCreate(MaterialBase):
    pass


class MaterialUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    sku: Optional[str] = None
    unit: Optional[str] = None
    unit_cost: Optional[float] = None
    unit_price: Optional[float] = None
    quantity_on_hand: Optional[float] = None
    current_stock: Optional[float] = None
    min_stock: Optional[float] = None
    is_active: Optional[bool] = None


class MaterialRead(MaterialBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
