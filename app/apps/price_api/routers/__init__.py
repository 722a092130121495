"""
Routers for price_api.
"""

from app.apps.price_api.routers.keys import router as keys_router
from app.apps.price_api.routers.meta import router as meta_router
from app.apps.price_api.routers.prices import router as prices_router

__all__ = [
    "keys_router",
    "meta_router",
    "prices_router",
]
