"""
app/api/routers package marker.
"""

from app.api.routers.catalog_router import router as catalog_router
from app.api.routers.comparison_router import router as comparison_router
from app.api.routers.countries_router import router as countries_router
from app.api.routers.preferences_router import router as preferences_router

__all__ = [
    "catalog_router",
    "comparison_router",
    "countries_router",
    "preferences_router",
]
