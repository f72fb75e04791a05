import re
from abc import ABC, abstractmethod
from logging import Logger
from typing import Any, Iterable

from sqlalchemy import URL, Connection, MetaData, Table, column, func, inspect, select, table
from sqlalchemy.schema import SetTableComment

from core.database import SQLDatabase, check_connection
from core.environment import settings
from core.exceptions import UnsupportedDisplayFieldException
from core.logger import app_logger
from model.dao.enums import AuthenticationMode
from model.dto.catalog import (
    ColumnMetadataDTO,
    ConnectionConfigDTO,
    FieldOptionDTO,
    TableInfoDTO,
)
from service.field_derivation import DEFAULT_FOREIGN_KEY_FIELDS


_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
OPTION_LABEL_SEPARATOR = " - "


def _check_display_fields(display_fields: Iterable[str] | None) -> list[str]:
    display_fields = list(display_fields or DEFAULT_FOREIGN_KEY_FIELDS)
    invalid = [f for f in display_fields if not _IDENTIFIER_PATTERN.match(f)]
    if invalid:
        raise UnsupportedDisplayFieldException(
            f"Display fields must be plain column names: {', '.join(invalid)}"
        )
    return display_fields


def rows_to_options(
    rows: Iterable[dict[str, Any]], display_fields: list[str]
) -> list[FieldOptionDTO]:
    """The first display field is the option value; all of them form the label."""
    options = []
    for row in rows:
        parts = [str(row[f]) for f in display_fields if row.get(f) is not None]
        value = row.get(display_fields[0])
        options.append(
            FieldOptionDTO(
                label=OPTION_LABEL_SEPARATOR.join(parts),
                value="" if value is None else str(value),
            )
        )
    return options


class CatalogService(ABC):
    """Source of table and column metadata for the form builder."""

    @abstractmethod
    async def test_connection(self, config: ConnectionConfigDTO) -> bool: ...

    @abstractmethod
    async def fetch_tables(self) -> list[TableInfoDTO]: ...

    @abstractmethod
    async def fetch_columns(self, table_name: str) -> list[ColumnMetadataDTO]: ...

    @abstractmethod
    async def fetch_foreign_key_options(
        self, referenced_table: str, display_fields: list[str] | None = None
    ) -> list[FieldOptionDTO]: ...

    @abstractmethod
    async def update_table_description(
        self, table_name: str, description: str
    ) -> TableInfoDTO | None:
        """Store the guide text shown for a table; None when the table is unknown."""


def _columns(*rows: tuple) -> list[ColumnMetadataDTO]:
    return [
        ColumnMetadataDTO(
            name=name,
            data_type=data_type,
            nullable=nullable,
            is_primary_key=is_primary_key,
            is_foreign_key=referenced_table is not None,
            referenced_table=referenced_table,
        )
        for name, data_type, nullable, is_primary_key, referenced_table in rows
    ]


MOCK_TABLES = [
    TableInfoDTO(name="Customers", size_kb=256, record_count=1053, description="Customer information table"),
    TableInfoDTO(name="Orders", size_kb=512, record_count=5127, description="Order records"),
    TableInfoDTO(name="Products", size_kb=128, record_count=412, description="Product catalog"),
    TableInfoDTO(name="Employees", size_kb=96, record_count=87, description="Employee information"),
    TableInfoDTO(name="Suppliers", size_kb=120, record_count=45, description="Supplier contacts and details"),
    TableInfoDTO(name="Categories", size_kb=32, record_count=18, description="Product categories"),
    TableInfoDTO(name="Payments", size_kb=256, record_count=4891, description="Payment transactions"),
    TableInfoDTO(name="Shipments", size_kb=320, record_count=4213, description="Shipment tracking info"),
]

# name, data type, nullable, primary key, referenced table
MOCK_COLUMNS = {
    "Customers": _columns(
        ("CustomerID", "int", False, True, None),
        ("CompanyName", "varchar(100)", False, False, None),
        ("ContactName", "varchar(100)", True, False, None),
        ("ContactTitle", "varchar(50)", True, False, None),
        ("Address", "varchar(255)", True, False, None),
        ("City", "varchar(50)", True, False, None),
        ("Region", "varchar(50)", True, False, None),
        ("PostalCode", "varchar(20)", True, False, None),
        ("Country", "varchar(50)", True, False, None),
        ("Phone", "varchar(20)", True, False, None),
        ("Fax", "varchar(20)", True, False, None),
        ("IsActive", "bit", False, False, None),
    ),
    "Orders": _columns(
        ("OrderID", "int", False, True, None),
        ("CustomerID", "int", False, False, "Customers"),
        ("EmployeeID", "int", False, False, "Employees"),
        ("OrderDate", "datetime", False, False, None),
        ("RequiredDate", "datetime", True, False, None),
        ("ShippedDate", "datetime", True, False, None),
        ("ShipVia", "int", True, False, "Shippers"),
        ("Freight", "decimal(10,2)", True, False, None),
        ("ShipName", "varchar(100)", True, False, None),
        ("ShipAddress", "varchar(255)", True, False, None),
        ("ShipCity", "varchar(50)", True, False, None),
        ("ShipRegion", "varchar(50)", True, False, None),
        ("ShipPostalCode", "varchar(20)", True, False, None),
        ("ShipCountry", "varchar(50)", True, False, None),
        ("Status", "varchar(20)", False, False, None),
    ),
    "Products": _columns(
        ("ProductID", "int", False, True, None),
        ("ProductName", "varchar(100)", False, False, None),
        ("SupplierID", "int", True, False, "Suppliers"),
        ("CategoryID", "int", True, False, "Categories"),
        ("QuantityPerUnit", "varchar(50)", True, False, None),
        ("UnitPrice", "decimal(10,2)", True, False, None),
        ("UnitsInStock", "int", True, False, None),
        ("UnitsOnOrder", "int", True, False, None),
        ("ReorderLevel", "int", True, False, None),
        ("Discontinued", "bit", False, False, None),
    ),
}

MOCK_ROWS = {
    "Customers": [
        {"id": 1, "name": "Acme Inc.", "code": "ACME", "country": "USA"},
        {"id": 2, "name": "Globex Corporation", "code": "GLOB", "country": "USA"},
        {"id": 3, "name": "Soylent Corp", "code": "SOYL", "country": "Canada"},
    ],
    "Employees": [
        {"id": 1, "name": "John Doe", "title": "Sales Manager", "department": "Sales"},
        {"id": 2, "name": "Jane Smith", "title": "Developer", "department": "IT"},
        {"id": 3, "name": "Bob Johnson", "title": "CEO", "department": "Executive"},
    ],
    "Suppliers": [
        {"id": 1, "name": "Supplier A", "contactName": "Contact A", "country": "USA"},
        {"id": 2, "name": "Supplier B", "contactName": "Contact B", "country": "Mexico"},
        {"id": 3, "name": "Supplier C", "contactName": "Contact C", "country": "Canada"},
    ],
    "Categories": [
        {"id": 1, "name": "Beverages", "description": "Soft drinks, coffees, teas, beers, and ales"},
        {"id": 2, "name": "Condiments", "description": "Sweet and savory sauces, relishes, spreads, and seasonings"},
        {"id": 3, "name": "Confections", "description": "Desserts, candies, and sweet breads"},
    ],
}


class MockCatalogService(CatalogService):
    """Static catalog used when no database is configured."""

    def __init__(self, logger: Logger = app_logger):
        self._tables = {t.name: t.model_copy() for t in MOCK_TABLES}
        self._logger = logger

    async def test_connection(self, config: ConnectionConfigDTO) -> bool:
        self._logger.debug(f"Testing connection to `{config.server}/{config.database}`")
        return True

    async def fetch_tables(self) -> list[TableInfoDTO]:
        return [t.model_copy() for t in self._tables.values()]

    async def fetch_columns(self, table_name: str) -> list[ColumnMetadataDTO]:
        self._logger.debug(f"Fetching structure for table `{table_name}`")
        return list(MOCK_COLUMNS.get(table_name, []))

    async def fetch_foreign_key_options(
        self, referenced_table: str, display_fields: list[str] | None = None
    ) -> list[FieldOptionDTO]:
        display_fields = _check_display_fields(display_fields)
        self._logger.debug(
            f"Fetching foreign key data from `{referenced_table}` using fields: {', '.join(display_fields)}"
        )
        return rows_to_options(MOCK_ROWS.get(referenced_table, []), display_fields)

    async def update_table_description(
        self, table_name: str, description: str
    ) -> TableInfoDTO | None:
        if table_name not in self._tables:
            return None

        updated = self._tables[table_name].model_copy(update={"description": description})
        self._tables[table_name] = updated
        return updated.model_copy()


class SQLCatalogService(CatalogService):
    """Catalog read from the configured database through SQLAlchemy's inspector."""

    def __init__(
        self,
        pg_database: SQLDatabase,
        options_limit: int = settings.FOREIGN_KEY_OPTIONS_LIMIT,
        driver: str = settings.PG_DB_CONFIG.driver,
        logger: Logger = app_logger,
    ):
        self._db = pg_database
        self._driver = driver
        self._options_limit = options_limit
        self._logger = logger

    def connection_url(self, config: ConnectionConfigDTO) -> URL:
        # Windows authentication carries no credentials of its own
        with_credentials = config.authentication == AuthenticationMode.SQL
        return URL.create(
            drivername=self._driver,
            username=config.username if with_credentials else None,
            password=config.password if with_credentials else None,
            host=config.server,
            port=config.port,
            database=config.database,
        )

    async def test_connection(self, config: ConnectionConfigDTO) -> bool:
        self._logger.debug(f"Testing connection to `{config.server}/{config.database}`")
        await check_connection(self.connection_url(config))
        return True

    @staticmethod
    def _read_table(connection: Connection, name: str) -> TableInfoDTO:
        record_count = connection.execute(
            select(func.count()).select_from(table(name))
        ).scalar_one()

        description = ""
        if connection.dialect.supports_comments:
            description = inspect(connection).get_table_comment(name).get("text") or ""

        return TableInfoDTO(name=name, record_count=record_count, description=description)

    @classmethod
    def _read_tables(cls, connection: Connection) -> list[TableInfoDTO]:
        return [
            cls._read_table(connection, name)
            for name in inspect(connection).get_table_names()
        ]

    @classmethod
    def _write_table_comment(
        cls, connection: Connection, table_name: str, description: str
    ) -> TableInfoDTO | None:
        if not inspect(connection).has_table(table_name):
            return None

        connection.execute(
            SetTableComment(Table(table_name, MetaData(), comment=description))
        )
        connection.commit()
        return cls._read_table(connection, table_name)

    @staticmethod
    def _read_columns(connection: Connection, table_name: str) -> list[ColumnMetadataDTO]:
        inspector = inspect(connection)
        if not inspector.has_table(table_name):
            return []

        primary_keys = set(
            inspector.get_pk_constraint(table_name).get("constrained_columns") or []
        )
        references = {}
        for foreign_key in inspector.get_foreign_keys(table_name):
            for name in foreign_key["constrained_columns"]:
                references[name] = foreign_key["referred_table"]

        return [
            ColumnMetadataDTO(
                name=col["name"],
                data_type=str(col["type"]).lower(),
                nullable=bool(col.get("nullable", True)),
                is_primary_key=col["name"] in primary_keys,
                is_foreign_key=col["name"] in references,
                referenced_table=references.get(col["name"]),
            )
            for col in inspector.get_columns(table_name)
        ]

    async def fetch_tables(self) -> list[TableInfoDTO]:
        return await self._db.run_sync(self._read_tables)

    async def fetch_columns(self, table_name: str) -> list[ColumnMetadataDTO]:
        self._logger.debug(f"Inspecting columns of `{table_name}`")
        return await self._db.run_sync(self._read_columns, table_name)

    async def update_table_description(
        self, table_name: str, description: str
    ) -> TableInfoDTO | None:
        self._logger.info(f"Updating description of `{table_name}`")
        return await self._db.run_sync(self._write_table_comment, table_name, description)

    async def fetch_foreign_key_options(
        self, referenced_table: str, display_fields: list[str] | None = None
    ) -> list[FieldOptionDTO]:
        display_fields = _check_display_fields(display_fields)
        query = (
            select(*[column(f) for f in display_fields])
            .select_from(table(referenced_table))
            .limit(self._options_limit)
        )

        async with self._db.session() as session:
            rows = (await session.execute(query)).mappings().all()

        self._logger.debug(f"Loaded {len(rows)} options from `{referenced_table}`")
        return rows_to_options([dict(row) for row in rows], display_fields)
