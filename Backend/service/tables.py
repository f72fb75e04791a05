from logging import Logger

from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import NotFoundException, ServiceUnavailableException
from core.logger import app_logger
from model.dto.catalog import (
    ColumnMetadataDTO,
    ConnectionConfigDTO,
    ConnectionStatusDTO,
    FieldOptionDTO,
    TableInfoDTO,
)
from model.dto.forms import GeneratedSourceDTO
from service.catalog import CatalogService
from service.code_generator import CodeGenerator


class TableService:
    def __init__(
        self,
        catalog: CatalogService,
        code_generator: CodeGenerator,
        logger: Logger = app_logger,
    ):
        self._catalog = catalog
        self._code_generator = code_generator
        self._logger = logger

    async def test_connection(self, dto: ConnectionConfigDTO) -> ConnectionStatusDTO:
        try:
            connected = await self._catalog.test_connection(dto)
        except (OSError, SQLAlchemyError) as exc:
            self._logger.error(f"Connection to `{dto.server}` failed: {exc}")
            raise ServiceUnavailableException("Could not connect to the database")

        return ConnectionStatusDTO(
            server=dto.server, database=dto.database, connected=connected
        )

    async def list_tables(self, search: str | None = None) -> list[TableInfoDTO]:
        tables = await self._catalog.fetch_tables()
        if not search:
            return tables

        term = search.lower()
        return [
            table
            for table in tables
            if term in table.name.lower() or term in table.description.lower()
        ]

    async def update_table_description(
        self, table_name: str, description: str
    ) -> TableInfoDTO:
        table_info = await self._catalog.update_table_description(table_name, description)
        if table_info is None:
            raise NotFoundException(f"Table `{table_name}` not found")
        return table_info

    async def get_columns(self, table_name: str) -> list[ColumnMetadataDTO]:
        return await self._catalog.fetch_columns(table_name)

    async def get_foreign_key_options(
        self, table_name: str, display_fields: list[str] | None = None
    ) -> list[FieldOptionDTO]:
        return await self._catalog.fetch_foreign_key_options(table_name, display_fields)

    async def generate_crud_procedure(self, table_name: str) -> GeneratedSourceDTO:
        columns = await self._catalog.fetch_columns(table_name)
        return self._code_generator.generate_crud_procedure(table_name, columns)
