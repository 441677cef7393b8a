from sqlalchemy import Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from core.models import Base, OwnedMixin, SoftDeleteMixin, TimestampMixin, new_id
from modules.materials.models import Material


class Product(Base, TimestampMixin, OwnedMixin, SoftDeleteMixin):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    shop_id = Column(String(64), nullable=True, index=True)
    category_id = Column(String(64), nullable=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(64), nullable=True)
    price = Column(Float, nullable=False, default=0.0)
    cost_price = Column(Float, nullable=False, default=0.0)
    stock_quantity = Column(Integer, nullable=False, default=0)

    bom_items = relationship("BOMItem", back_populates="product", order_by="BOMItem.created_at")


class BOMItem(Base, TimestampMixin, OwnedMixin, SoftDeleteMixin):
    __tablename__ = "bom_items"

    id = Column(String(36), primary_key=True, default=new_id)
    shop_id = Column(String(64), nullable=True, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    material_id = Column(String(36), ForeignKey("materials.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Float, nullable=False, default=1.0)
    unit_cost = Column(Float, nullable=False, default=0.0)
    total_cost = Column(Float, nullable=False, default=0.0)
    notes = Column(String(1024), nullable=True)

    product = relationship("Product", back_populates="bom_items")
    material = relationship(Material)
