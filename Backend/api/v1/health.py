from fastapi import APIRouter, status
from pydantic import BaseModel

from core.environment import settings


health_router = APIRouter(tags=["Health"])


class HealthCheck(BaseModel):
    name: str = "FormGen"
    version: str
    description: str = "Dynamic form builder service"
    catalog_source: str
    status: str


@health_router.get("/status", status_code=status.HTTP_200_OK)
async def health_check() -> HealthCheck:
    return HealthCheck(
        version="0.1.0", catalog_source=str(settings.CATALOG_SOURCE), status="ok"
    )
