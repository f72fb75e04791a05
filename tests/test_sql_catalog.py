import unittest

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError

from core.exceptions import ServiceUnavailableException
from model.dto.catalog import ConnectionConfigDTO
from service.catalog import MockCatalogService, SQLCatalogService
from service.code_generator import CodeGenerator
from service.tables import TableService


class InspectorTests(unittest.TestCase):
    def setUp(self):
        engine = create_engine("sqlite://")
        self.addCleanup(engine.dispose)

        self.connection = engine.connect()
        self.addCleanup(self.connection.close)

        self.connection.exec_driver_sql(
            "CREATE TABLE customers (id INTEGER PRIMARY KEY, name VARCHAR(100) NOT NULL)"
        )
        self.connection.exec_driver_sql(
            "CREATE TABLE orders ("
            "order_id INTEGER PRIMARY KEY, "
            "customer_id INTEGER REFERENCES customers(id), "
            "shipped_date DATETIME, "
            "notes TEXT)"
        )
        self.connection.exec_driver_sql("INSERT INTO customers (id, name) VALUES (1, 'Acme')")
        self.connection.exec_driver_sql("INSERT INTO customers (id, name) VALUES (2, 'Globex')")
        self.connection.exec_driver_sql("INSERT INTO orders (order_id, customer_id) VALUES (10, 1)")

    def test_read_columns(self):
        columns = {c.name: c for c in SQLCatalogService._read_columns(self.connection, "orders")}

        self.assertEqual(list(columns), ["order_id", "customer_id", "shipped_date", "notes"])
        self.assertTrue(columns["order_id"].is_primary_key)
        self.assertFalse(columns["order_id"].is_foreign_key)
        self.assertTrue(columns["customer_id"].is_foreign_key)
        self.assertEqual(columns["customer_id"].referenced_table, "customers")
        self.assertEqual(columns["customer_id"].data_type, "integer")
        self.assertEqual(columns["shipped_date"].data_type, "datetime")
        self.assertTrue(columns["shipped_date"].nullable)
        self.assertEqual(columns["notes"].data_type, "text")

    def test_read_columns_keeps_length_and_nullability(self):
        name = SQLCatalogService._read_columns(self.connection, "customers")[1]

        self.assertEqual(name.data_type, "varchar(100)")
        self.assertFalse(name.nullable)
        self.assertIsNone(name.referenced_table)

    def test_unknown_table_has_no_columns(self):
        self.assertEqual(SQLCatalogService._read_columns(self.connection, "invoices"), [])

    def test_read_tables_counts_records(self):
        tables = {t.name: t for t in SQLCatalogService._read_tables(self.connection)}

        self.assertEqual(set(tables), {"customers", "orders"})
        self.assertEqual(tables["customers"].record_count, 2)
        self.assertEqual(tables["orders"].record_count, 1)
        self.assertEqual(tables["orders"].description, "")

    def test_comment_on_unknown_table(self):
        self.assertIsNone(
            SQLCatalogService._write_table_comment(self.connection, "invoices", "Invoices")
        )


class ConnectionUrlTests(unittest.TestCase):
    def setUp(self):
        self.catalog = SQLCatalogService(pg_database=None, driver="postgresql+asyncpg")

    def test_sql_authentication_sends_credentials(self):
        url = self.catalog.connection_url(
            ConnectionConfigDTO(
                server="db.internal",
                database="Northwind",
                authentication="sql",
                port=5433,
                username="reporter",
                password="s3cret",
            )
        )

        self.assertEqual(url.drivername, "postgresql+asyncpg")
        self.assertEqual(url.host, "db.internal")
        self.assertEqual(url.port, 5433)
        self.assertEqual(url.database, "Northwind")
        self.assertEqual(url.username, "reporter")
        self.assertEqual(url.password, "s3cret")

    def test_windows_authentication_omits_credentials(self):
        url = self.catalog.connection_url(
            ConnectionConfigDTO(
                server="localhost",
                database="Northwind",
                username="ignored",
                password="ignored",
            )
        )

        self.assertIsNone(url.username)
        self.assertIsNone(url.password)
        self.assertIsNone(url.port)
        self.assertEqual(url.host, "localhost")


class UnreachableCatalog(MockCatalogService):
    async def test_connection(self, config: ConnectionConfigDTO) -> bool:
        raise OperationalError("SELECT 1", {}, Exception("password authentication failed"))


class ConnectionFailureTests(unittest.IsolatedAsyncioTestCase):
    async def test_driver_error_becomes_service_unavailable(self):
        service = TableService(UnreachableCatalog(), CodeGenerator())

        with self.assertRaises(ServiceUnavailableException) as ctx:
            await service.test_connection(
                ConnectionConfigDTO(server="localhost", database="Northwind")
            )

        self.assertEqual(ctx.exception.status_code, 503)
