from fastapi import APIRouter
from api.v1.catalog import catalog_router, connections_router
from api.v1.forms import forms_router
from api.v1.health import health_router
from api.v1.nit import nit_router

v1_router = APIRouter(prefix="/api/v1")


v1_router.include_router(connections_router)
v1_router.include_router(catalog_router)
v1_router.include_router(forms_router)
v1_router.include_router(nit_router)
v1_router.include_router(health_router)

__all__ = ["v1_router"]
