from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String

from inventory_api.core.constants import DEFAULT_CATEGORY, DEFAULT_UNIT
from inventory_api.database.base import Base

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)

    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False, default="")
    sku = Column(String(64), unique=True)
    category = Column(String(100), nullable=False, default=DEFAULT_CATEGORY)

    price = Column(Float, nullable=False)
    cost = Column(Float, nullable=False, default=0)

    quantity = Column(Float, nullable=False, default=0)
    min_quantity = Column(Float, nullable=False, default=0)
    max_quantity = Column(Float)
    unit = Column(String(30), nullable=False, default=DEFAULT_UNIT)

    supplier_name = Column(String(120))
    supplier_contact = Column(String(120))
    location = Column(String(120))

    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_products_owner_active", "created_by", "is_active"),
        Index("idx_products_category", "category"),
        Index("idx_products_active", "is_active"),
    )

    @property
    def supplier(self):
        if self.supplier_name is None and self.supplier_contact is None:
            return None
        return {"name": self.supplier_name, "contact": self.supplier_contact}

__all__ = ["Product"]
