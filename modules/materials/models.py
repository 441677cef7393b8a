from sqlalchemy import Column, Float, String

from core.models import Base, OwnedMixin, SoftDeleteMixin, TimestampMixin, new_id


class Material(Base, TimestampMixin, OwnedMixin, SoftDeleteMixin):
    __tablename__ = "materials"

    id = Column(String(36), primary_key=True, default=new_id)
    shop_id = Column(String(64), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1024), nullable=True)
    sku = Column(String(64), nullable=True)
    unit = Column(String(64), nullable=False, default="pcs")
    unit_cost = Column(Float, nullable=False, default=0.0)
    unit_price = Column(Float, nullable=False, default=0.0)
    quantity_on_hand = Column(Float, nullable=False, default=0.0)
    current_stock = Column(Float, nullable=False, default=0.0)
    min_stock = Column(Float, nullable=False, default=0.0)
