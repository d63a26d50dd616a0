from inventory_api.routers.auth import router as auth_router
from inventory_api.routers.health import router as health_router
from inventory_api.routers.products import router as products_router

__all__ = [
    "auth_router",
    "health_router",
    "products_router",
]
