from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VariationTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Variation axis, e.g. Size")
    description: Optional[str] = None


class VariationTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class VariationOptionCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Value on the axis, e.g. Large")
    description: Optional[str] = None


class VariationOptionUpdate(VariationTypeUpdate):
    pass


class VariationOptionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    variation_type_id: str
    name: str
    description: Optional[str] = None
    user_id: str


class VariationTypeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    user_id: str
    options: List[VariationOptionRead] = Field(default_factory=list)


class ProductVariationCreate(BaseModel):
    name: str = Field(..., min_length=1)
    sku: Optional[str] = None
    price_adjustment: float = Field(0.0, description="Signed amount added to the product price")
    stock_quantity: int = 0
    selected_options: List[str] = Field(default_factory=list, description="Variation option ids")


class ProductVariationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    sku: Optional[str] = None
    price_adjustment: Optional[float] = None
    stock_quantity: Optional[int] = None
    is_active: Optional[bool] = None


class VariationCombinationRead(BaseModel):
    id: str
    variation_option_id: str
    option_name: str
    variation_type_id: str
    variation_type_name: str


class ProductVariationRead(BaseModel):
    id: str
    product_id: str
    name: str
    sku: Optional[str] = None
    price_adjustment: float
    final_price: float
    stock_quantity: int
    is_active: bool
    combinations: List[VariationCombinationRead] = Field(default_factory=list)
    option_names: List[str] = Field(default_factory=list)
    total_bom_cost: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BOMVariationCreate(BaseModel):
    material_id: str
    quantity: float
    unit_cost: Optional[float] = None
    notes: Optional[str] = None


class BOMVariationUpdate(BaseModel):
    quantity: Optional[float] = None
    unit_cost: Optional[float] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class BOMVariationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_variation_id: str
    material_id: str
    quantity: float
    unit_cost: float
    total_cost: float
    notes: Optional[str] = None
    is_active: bool
    shop_id: Optional[str] = None
