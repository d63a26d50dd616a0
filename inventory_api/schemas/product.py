from datetime import datetime
from typing import Literal, Optional

from pydantic import ConfigDict, Field, computed_field, field_serializer, field_validator, model_validator

from inventory_api.core.constants import DEFAULT_CATEGORY, DEFAULT_UNIT
from inventory_api.core.stock_rules import profit_margin as compute_profit_margin
from inventory_api.core.stock_rules import stock_status as compute_stock_status
from inventory_api.schemas.common import CamelModel, RequestModel, drop_integral_fraction

_NON_NULLABLE_UPDATE_FIELDS = (
    "name",
    "description",
    "category",
    "price",
    "cost",
    "quantity",
    "min_quantity",
    "unit",
)


def _normalize_sku(value):
    if value is None:
        return None
    value = str(value).strip().upper()
    return value or None


class SupplierSchema(RequestModel):
    name: Optional[str] = Field(None, max_length=120)
    contact: Optional[str] = Field(None, max_length=120)


class ProductCreate(RequestModel):
    name: str = Field(min_length=2, max_length=100)
    description: str = Field("", max_length=500)
    sku: Optional[str] = Field(None, max_length=64)
    category: str = Field(DEFAULT_CATEGORY, min_length=1, max_length=100)
    price: float = Field(ge=0, allow_inf_nan=False)
    cost: float = Field(0, ge=0, allow_inf_nan=False)
    quantity: int = Field(ge=0)
    min_quantity: float = Field(0, ge=0, allow_inf_nan=False)
    max_quantity: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    unit: str = Field(DEFAULT_UNIT, min_length=1, max_length=30)
    supplier: Optional[SupplierSchema] = None
    location: Optional[str] = Field(None, max_length=120)

    @field_validator("sku")
    @classmethod
    def uppercase_sku(cls, value):
        return _normalize_sku(value)


class ProductUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    sku: Optional[str] = Field(None, max_length=64)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    cost: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    quantity: Optional[int] = Field(None, ge=0)
    min_quantity: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    max_quantity: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    unit: Optional[str] = Field(None, min_length=1, max_length=30)
    supplier: Optional[SupplierSchema] = None
    location: Optional[str] = Field(None, max_length=120)

    @field_validator("sku")
    @classmethod
    def uppercase_sku(cls, value):
        return _normalize_sku(value)

    @model_validator(mode="after")
    def reject_nulls(self):
        for field_name in _NON_NULLABLE_UPDATE_FIELDS:
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError("{} cannot be null".format(type(self).model_fields[field_name].alias or field_name))
        return self


class QuantityAdjust(RequestModel):
    # JSON strings and booleans are not coerced into amounts.
    quantity: float = Field(strict=True, ge=0, allow_inf_nan=False)
    operation: Literal["set", "add", "subtract"] = "set"


class ProductRead(CamelModel):
    id: int
    name: str
    description: str
    sku: Optional[str] = None
    category: str
    price: float
    cost: float
    quantity: float
    min_quantity: float
    max_quantity: Optional[float] = None
    unit: str
    supplier: Optional[SupplierSchema] = None
    location: Optional[str] = None
    is_active: bool
    created_by: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field(alias="profitMargin")
    @property
    def profit_margin(self) -> float:
        return compute_profit_margin(self.price, self.cost)

    @computed_field(alias="stockStatus")
    @property
    def stock_status(self) -> str:
        return compute_stock_status(self.quantity, self.min_quantity)

    @field_serializer("quantity", "min_quantity", "max_quantity")
    def serialize_amount(self, value):
        return drop_integral_fraction(value)


__all__ = ["ProductCreate", "ProductRead", "ProductUpdate", "QuantityAdjust", "SupplierSchema"]
