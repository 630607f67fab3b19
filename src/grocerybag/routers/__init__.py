"""API routers for the grocerybag application."""

from grocerybag.routers.inventory import router as inventory_router

__all__ = [
    "inventory_router",
]
