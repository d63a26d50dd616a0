from inventory_api.services.auth_service import authenticate_user, register_user, update_profile
from inventory_api.services.product_service import (
    ProductFilters,
    adjust_quantity,
    create_product,
    inventory_statistics,
    list_products,
    soft_delete_product,
    update_product,
)

__all__ = [
    "ProductFilters",
    "adjust_quantity",
    "authenticate_user",
    "create_product",
    "inventory_statistics",
    "list_products",
    "register_user",
    "soft_delete_product",
    "update_profile",
]
