from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BOMItemBase(BaseModel):
    material_id: str = Field(..., description="Material consumed")
    quantity: float = Field(..., description="Quantity per unit of product")
    unit_cost: Optional[float] = Field(None, description="Cost per unit; defaults to the material's unit cost")
    notes: Optional[str] = None


class BOMItemCreate(BOMItemBase):
    pass


class BOMItemUpdate(BaseModel):
    quantity: Optional[float] = None
    unit_cost: Optional[float] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class BOMItemDuplicate(BaseModel):
    target_product_id: str
    copy_quantity: bool = True
    copy_unit_cost: bool = True


class BOMItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    material_id: str
    quantity: float
    unit_cost: float
    total_cost: float
    notes: Optional[str] = None
    is_active: bool
    shop_id: Optional[str] = None


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1)
    sku: Optional[str] = None
    price: float = Field(0.0, ge=0, description="Base selling price")
    cost_price: float = Field(0.0, ge=0)
    stock_quantity: int = 0
    category_id: Optional[str] = None
    shop_id: Optional[str] = None


class ProductCreate(ProductBase):
    bom_items: Optional[List[BOMItemCreate]] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    sku: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = None
    category_id: Optional[str] = None
    is_active: Optional[bool] = None


class ProductRead(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    is_active: bool
    bom_items: List[BOMItemRead] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("bom_items", mode="before")
    @classmethod
    def only_active_rows(cls, v):
        # retired rows stay reachable through /products/{id}/bom-items?include_inactive=true
        return [row for row in v or [] if (row.get("is_active", True) if isinstance(row, dict) else row.is_active)]
