from fastapi import APIRouter, Depends, Query, status

from core.di_container import DependencyContainer
from dependency_injector.wiring import Provide, inject

from model.dto.base import BaseResponseDTO
from model.dto.catalog import ConnectionConfigDTO, TableDescriptionDTO
from service.tables import TableService


connections_router = APIRouter(prefix="/connections", tags=["Connections"])
catalog_router = APIRouter(prefix="/catalog", tags=["Catalog"])

TableServiceDependency = Depends(Provide[DependencyContainer.table_service_factory])


@connections_router.post("/test", status_code=status.HTTP_200_OK)
@inject
async def test_connection(
    dto: ConnectionConfigDTO, service: TableService = TableServiceDependency
) -> BaseResponseDTO:
    connection_status = await service.test_connection(dto)

    return BaseResponseDTO(
        data=connection_status,
        message=f"Connected to {dto.database}.",
    )


@catalog_router.get("/tables", status_code=status.HTTP_200_OK)
@inject
async def list_tables(
    search: str | None = None, service: TableService = TableServiceDependency
) -> BaseResponseDTO:
    tables = await service.list_tables(search)

    return BaseResponseDTO(data=tables, message="Tables retrieved successfully.")


@catalog_router.patch("/tables/{table_name}", status_code=status.HTTP_200_OK)
@inject
async def update_table_description(
    table_name: str,
    dto: TableDescriptionDTO,
    service: TableService = TableServiceDependency,
) -> BaseResponseDTO:
    table_info = await service.update_table_description(table_name, dto.description)

    return BaseResponseDTO(data=table_info, message="Table description updated.")


@catalog_router.get("/tables/{table_name}/columns", status_code=status.HTTP_200_OK)
@inject
async def list_columns(
    table_name: str, service: TableService = TableServiceDependency
) -> BaseResponseDTO:
    columns = await service.get_columns(table_name)

    return BaseResponseDTO(data=columns, message="Table structure retrieved successfully.")


@catalog_router.get(
    "/tables/{table_name}/foreign-key-options", status_code=status.HTTP_200_OK
)
@inject
async def list_foreign_key_options(
    table_name: str,
    display_fields: list[str] | None = Query(default=None),
    service: TableService = TableServiceDependency,
) -> BaseResponseDTO:
    options = await service.get_foreign_key_options(table_name, display_fields)

    return BaseResponseDTO(data=options, message="Options retrieved successfully.")


@catalog_router.get("/tables/{table_name}/crud-procedure", status_code=status.HTTP_200_OK)
@inject
async def generate_crud_procedure(
    table_name: str, service: TableService = TableServiceDependency
) -> BaseResponseDTO:
    procedure = await service.generate_crud_procedure(table_name)

    return BaseResponseDTO(data=procedure, message="Stored procedure generated.")
