from sqlalchemy import Column, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import backref, relationship

from core.models import Base, OwnedMixin, SoftDeleteMixin, TimestampMixin, new_id
from modules.materials.models import Material
from modules.products.models import Product


class VariationType(Base, TimestampMixin, OwnedMixin):
    __tablename__ = "variation_types"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    description = Column(String(1024), nullable=True)

    options = relationship(
        "VariationOption",
        back_populates="variation_type",
        cascade="all, delete-orphan",
        order_by="VariationOption.name",
    )


class VariationOption(Base, TimestampMixin, OwnedMixin):
    __tablename__ = "variation_options"

    id = Column(String(36), primary_key=True, default=new_id)
    variation_type_id = Column(String(36), ForeignKey("variation_types.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1024), nullable=True)

    variation_type = relationship("VariationType", back_populates="options")


class ProductVariation(Base, TimestampMixin, OwnedMixin, SoftDeleteMixin):
    __tablename__ = "product_variations"

    id = Column(String(36), primary_key=True, default=new_id)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(64), nullable=True)
    price_adjustment = Column(Float, nullable=False, default=0.0)
    final_price = Column(Float, nullable=False, default=0.0)
    stock_quantity = Column(Integer, nullable=False, default=0)

    product = relationship(Product, backref=backref("variations", order_by="ProductVariation.name"))
    combinations = relationship(
        "VariationCombination",
        back_populates="product_variation",
        cascade="all, delete-orphan",
    )
    bom_variations = relationship(
        "BOMVariation",
        back_populates="product_variation",
        order_by="BOMVariation.created_at",
    )


class VariationCombination(Base, TimestampMixin, OwnedMixin):
    __tablename__ = "variation_combinations"
    __table_args__ = (
        UniqueConstraint("product_variation_id", "variation_option_id", name="uq_combination_variation_option"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    product_variation_id = Column(
        String(36), ForeignKey("product_variations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    variation_option_id = Column(
        String(36), ForeignKey("variation_options.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    product_variation = relationship("ProductVariation", back_populates="combinations")
    variation_option = relationship("VariationOption")


class BOMVariation(Base, TimestampMixin, OwnedMixin, SoftDeleteMixin):
    __tablename__ = "bom_variations"

    id = Column(String(36), primary_key=True, default=new_id)
    shop_id = Column(String(64), nullable=True, index=True)
    product_variation_id = Column(
        String(36), ForeignKey("product_variations.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    material_id = Column(String(36), ForeignKey("materials.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Float, nullable=False, default=1.0)
    unit_cost = Column(Float, nullable=False, default=0.0)
    total_cost = Column(Float, nullable=False, default=0.0)
    notes = Column(String(1024), nullable=True)

    product_variation = relationship("ProductVariation", back_populates="bom_variations")
    material = relationship(Material)
