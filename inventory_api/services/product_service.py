from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, cast

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_api.core.constants import (
    DEFAULT_PAGE_SIZE,
    IN_STOCK,
    LOW_STOCK,
    OUT_OF_STOCK,
    QUANTITY_OPERATIONS,
)
from inventory_api.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from inventory_api.models.product import Product
from inventory_api.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

DUPLICATE_SKU_MESSAGE = "A product with this SKU already exists"

_SORT_COLUMNS = {
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
    "name": Product.name,
    "price": Product.price,
    "quantity": Product.quantity,
    "category": Product.category,
    "sku": Product.sku,
}


@dataclass
class ProductFilters:
    category: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    stock_status: Optional[str] = None


def _filter_conditions(owner_id: int, filters: ProductFilters) -> list:
    conditions = [Product.created_by == owner_id, Product.is_active.is_(True)]

    if filters.category:
        conditions.append(Product.category.icontains(filters.category, autoescape=True))
    if filters.search:
        term = filters.search
        conditions.append(
            or_(
                Product.name.icontains(term, autoescape=True),
                Product.description.icontains(term, autoescape=True),
                Product.sku.icontains(term, autoescape=True),
            )
        )
    if filters.min_price is not None:
        conditions.append(Product.price >= filters.min_price)
    if filters.max_price is not None:
        conditions.append(Product.price <= filters.max_price)

    if filters.stock_status == IN_STOCK:
        conditions.append(Product.quantity > 0)
    elif filters.stock_status == OUT_OF_STOCK:
        conditions.append(Product.quantity == 0)
    elif filters.stock_status == LOW_STOCK:
        conditions.append(Product.quantity <= Product.min_quantity)

    return conditions


def _ensure_sku_available(db: Session, sku: Optional[str], exclude_id: Optional[int] = None) -> None:
    if not sku:
        return
    stmt = select(Product.id).where(Product.sku == sku)
    if exclude_id is not None:
        stmt = stmt.where(Product.id != exclude_id)
    if db.execute(stmt).first() is not None:
        raise ConflictError(DUPLICATE_SKU_MESSAGE)


def _commit_product(db: Session, product: Product) -> Product:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(DUPLICATE_SKU_MESSAGE) from exc
    db.refresh(product)
    return product


def create_product(db: Session, owner_id: int, payload: ProductCreate) -> Product:
    _ensure_sku_available(db, payload.sku)

    fields = payload.model_dump(exclude={"supplier"})
    supplier = payload.supplier
    product = Product(
        **fields,
        supplier_name=supplier.name if supplier else None,
        supplier_contact=supplier.contact if supplier else None,
        created_by=owner_id,
        is_active=True,
    )
    db.add(product)
    _commit_product(db, product)
    logger.info("Product id=%s created by user id=%s", product.id, owner_id)
    return product


def list_products(
    db: Session,
    owner_id: int,
    filters: Optional[ProductFilters] = None,
    *,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> tuple[list[Product], dict]:
    conditions = _filter_conditions(owner_id, filters or ProductFilters())

    sort_column = _SORT_COLUMNS.get(sort_by)
    if sort_column is None:
        raise ValidationError("sortBy must be one of: {}".format(", ".join(_SORT_COLUMNS)))
    if sort_order == "desc":
        ordering = (sort_column.desc(), Product.id.desc())
    else:
        ordering = (sort_column.asc(), Product.id.asc())

    offset = (page - 1) * limit
    products = (
        db.execute(
            select(Product)
            .where(and_(*conditions))
            .order_by(*ordering)
            .offset(offset)
            .limit(limit)
        )
        .scalars()
        .all()
    )
    total = db.execute(select(func.count(Product.id)).where(and_(*conditions))).scalar_one()

    pagination = {
        "currentPage": page,
        "totalPages": math.ceil(total / limit) if limit else 0,
        "totalProducts": total,
        "hasNextPage": offset + len(products) < total,
        "hasPrevPage": page > 1,
    }
    return cast(list[Product], list(products)), pagination


def get_owned_product(db: Session, owner_id: int, product_id: int, action: str = "access") -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    if product.created_by != owner_id:
        raise AuthorizationError("You can only {} your own products".format(action))
    return product


def update_product(db: Session, owner_id: int, product_id: int, payload: ProductUpdate) -> Product:
    product = get_owned_product(db, owner_id, product_id, action="update")

    changes = payload.model_dump(exclude_unset=True)
    if "sku" in changes:
        _ensure_sku_available(db, changes["sku"], exclude_id=product.id)
    if "supplier" in changes:
        supplier = changes.pop("supplier") or {}
        product.supplier_name = supplier.get("name")
        product.supplier_contact = supplier.get("contact")
    for field_name, value in changes.items():
        setattr(product, field_name, value)

    return _commit_product(db, product)


def soft_delete_product(db: Session, owner_id: int, product_id: int) -> Product:
    product = get_owned_product(db, owner_id, product_id, action="delete")
    product.is_active = False
    db.commit()
    db.refresh(product)
    logger.info("Product id=%s deactivated by user id=%s", product.id, owner_id)
    return product


def adjust_quantity(
    db: Session,
    owner_id: int,
    product_id: int,
    amount,
    operation: str = "set",
) -> Product:
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValidationError("Quantity must be a non-negative number")
    if math.isnan(amount) or math.isinf(amount) or amount < 0:
        raise ValidationError("Quantity must be a non-negative number")
    if operation not in QUANTITY_OPERATIONS:
        raise ValidationError("Operation must be one of: add, subtract, set")

    product = get_owned_product(db, owner_id, product_id, action="update quantity for")

    amount = float(amount)
    if operation == "add":
        new_quantity = Product.quantity + amount
    elif operation == "subtract":
        new_quantity = case((Product.quantity > amount, Product.quantity - amount), else_=0.0)
    else:
        new_quantity = amount

    # Single UPDATE so concurrent adjustments cannot overwrite each other.
    db.execute(
        update(Product)
        .where(Product.id == product.id)
        .values(quantity=new_quantity, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(product)
    return product


def inventory_statistics(db: Session, owner_id: int) -> dict:
    scope = and_(Product.created_by == owner_id, Product.is_active.is_(True))
    value_expr = Product.price * Product.quantity
    cost_expr = Product.cost * Product.quantity

    row = db.execute(
        select(
            func.count(Product.id),
            func.coalesce(func.sum(value_expr), 0.0),
            func.coalesce(func.sum(cost_expr), 0.0),
            func.coalesce(func.sum(case((Product.quantity <= Product.min_quantity, 1), else_=0)), 0),
            func.coalesce(func.sum(case((Product.quantity == 0, 1), else_=0)), 0),
        ).where(scope)
    ).one()
    total_products, total_value, total_cost, low_stock, out_of_stock = row

    count_expr = func.count(Product.id)
    category_rows = db.execute(
        select(Product.category, count_expr, func.coalesce(func.sum(value_expr), 0.0))
        .where(scope)
        .group_by(Product.category)
        .order_by(count_expr.desc(), Product.category.asc())
    ).all()

    stats = {
        "totalProducts": int(total_products or 0),
        "totalValue": round(float(total_value or 0), 2),
        "totalCost": round(float(total_cost or 0), 2),
        "lowStockProducts": int(low_stock or 0),
        "outOfStockProducts": int(out_of_stock or 0),
    }
    category_stats = [
        {"category": category, "count": int(count), "totalValue": round(float(value or 0), 2)}
        for category, count, value in category_rows
    ]
    return {"stats": stats, "categoryStats": category_stats}


__all__ = [
    "DUPLICATE_SKU_MESSAGE",
    "ProductFilters",
    "adjust_quantity",
    "create_product",
    "get_owned_product",
    "inventory_statistics",
    "list_products",
    "soft_delete_product",
    "update_product",
]
