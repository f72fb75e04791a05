from logging import Logger

from dependency_injector import containers, providers

from core.environment import settings
from core.database import SQLDatabase
from core.logger import app_logger
from service.catalog import MockCatalogService, SQLCatalogService
from service.code_generator import CodeGenerator
from service.form_session_store import FormSessionStore
from service.form_store import InMemoryFormRepository, SQLFormRepository
from service.forms import FormService
from service.tables import TableService


class DependencyContainer(containers.DeclarativeContainer):
    # Dependency wiring
    wiring_config = containers.WiringConfiguration(
        modules=["api.v1.catalog", "api.v1.forms"]
    )

    # Resources/Singletons
    logger: Logger = providers.Object(app_logger)
    pg_database = providers.Resource(
        SQLDatabase,
        db_config=settings.PG_DB_CONFIG,
        logger=logger,
    )

    catalog = providers.Selector(
        providers.Object(str(settings.CATALOG_SOURCE)),
        mock=providers.Singleton(MockCatalogService, logger=logger),
        database=providers.Factory(
            SQLCatalogService,
            pg_database=pg_database,
            options_limit=settings.FOREIGN_KEY_OPTIONS_LIMIT,
            logger=logger,
        ),
    )

    form_repository = providers.Selector(
        providers.Object(str(settings.FORM_STORE)),
        memory=providers.Singleton(InMemoryFormRepository, logger=logger),
        database=providers.Factory(
            SQLFormRepository, pg_database=pg_database, logger=logger
        ),
    )

    session_store = providers.Singleton(FormSessionStore, logger=logger)
    code_generator = providers.Singleton(CodeGenerator, logger=logger)

    # Factories
    table_service_factory = providers.Factory(
        TableService,
        catalog=catalog,
        code_generator=code_generator,
        logger=logger,
    )

    form_service_factory = providers.Factory(
        FormService,
        catalog=catalog,
        repository=form_repository,
        session_store=session_store,
        code_generator=code_generator,
        weight_order=settings.NIT_WEIGHT_ORDER,
        logger=logger,
    )
