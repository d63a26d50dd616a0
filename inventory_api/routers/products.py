from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from inventory_api.core.constants import DEFAULT_PAGE_SIZE, MAX_DB_INTEGER, MAX_PAGE, MAX_PAGE_SIZE
from inventory_api.dependencies import get_current_user, get_db
from inventory_api.models.product import Product
from inventory_api.models.user import User
from inventory_api.schemas.product import ProductCreate, ProductRead, ProductUpdate, QuantityAdjust
from inventory_api.services.product_service import (
    ProductFilters,
    adjust_quantity,
    create_product,
    get_owned_product,
    inventory_statistics,
    list_products,
    soft_delete_product,
    update_product,
)

router = APIRouter(prefix="/products", tags=["Products"])

SortField = Literal["createdAt", "updatedAt", "name", "price", "quantity", "category", "sku"]
StockStatus = Literal["in-stock", "low-stock", "out-of-stock"]
ProductId = Annotated[int, Path(ge=1, le=MAX_DB_INTEGER)]


def serialize_product(product: Product) -> dict:
    return ProductRead.model_validate(product).model_dump(by_alias=True, mode="json")


def product_filters(
    category: Optional[str] = Query(None, description="Case-insensitive category match"),
    search: Optional[str] = Query(None, description="Matches name, description or SKU"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    stock_status: Optional[StockStatus] = Query(None, alias="stockStatus"),
) -> ProductFilters:
    return ProductFilters(
        category=category.strip() if category and category.strip() else None,
        search=search.strip() if search and search.strip() else None,
        min_price=min_price,
        max_price=max_price,
        stock_status=stock_status,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def create(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = create_product(db, current_user.id, payload)
    return {
        "status": "success",
        "message": "Product created successfully",
        "product": serialize_product(product),
    }


@router.get("")
def list_all(
    filters: ProductFilters = Depends(product_filters),
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    products, pagination = list_products(
        db,
        current_user.id,
        filters,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {
        "status": "success",
        "message": "Products retrieved successfully",
        "products": [serialize_product(product) for product in products],
        "pagination": pagination,
    }


@router.get("/stats")
def stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    summary = inventory_statistics(db, current_user.id)
    return {
        "status": "success",
        "message": "Inventory statistics retrieved successfully",
        **summary,
    }


@router.get("/{product_id}")
def get_one(
    product_id: ProductId,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = get_owned_product(db, current_user.id, product_id)
    return {
        "status": "success",
        "message": "Product retrieved successfully",
        "product": serialize_product(product),
    }


@router.put("/{product_id}")
def update(
    product_id: ProductId,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = update_product(db, current_user.id, product_id, payload)
    return {
        "status": "success",
        "message": "Product updated successfully",
        "product": serialize_product(product),
    }


@router.delete("/{product_id}")
def delete(
    product_id: ProductId,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = soft_delete_product(db, current_user.id, product_id)
    return {
        "status": "success",
        "message": "Product deleted successfully",
        "product": serialize_product(product),
    }


@router.patch("/{product_id}/quantity")
def patch_quantity(
    product_id: ProductId,
    payload: QuantityAdjust,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = adjust_quantity(db, current_user.id, product_id, payload.quantity, payload.operation)
    return {
        "status": "success",
        "message": "Product quantity updated successfully",
        "product": serialize_product(product),
    }


__all__ = ["router"]
