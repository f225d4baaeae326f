"""API route modules."""

from taller.api.routes.folios import router as folios_router
from taller.api.routes.health import router as health_router
from taller.api.routes.inventory import router as inventory_router
from taller.api.routes.pipeline import router as pipeline_router

__all__ = [
    "health_router",
    "pipeline_router",
    "folios_router",
    "inventory_router",
]
