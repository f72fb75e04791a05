from contextlib import asynccontextmanager
from inspect import isawaitable

from fastapi import FastAPI

from core.di_container import DependencyContainer
from core.environment import FormStore, settings
from core.logger import app_logger, configure_uvicorn_logger
from model.dao.forms import FormConfigDAO


@asynccontextmanager
async def lifespan_manager(app: FastAPI):
    """Context manager that runs tasks at app start and shutdown."""

    # Run at start
    configure_uvicorn_logger()
    container = DependencyContainer()
    app.state.container = container

    if settings.FORM_STORE == FormStore.DATABASE:
        pg_database = await container.pg_database()
        await pg_database.create_tables(FormConfigDAO.metadata)

    # Yield to app
    yield

    # Run at shutdown
    try:
        result = container.shutdown_resources()
        if isawaitable(result):
            await result
    except Exception as exc:
        app_logger.error(f"Error shutting down resources: {exc}")
    finally:
        container.unwire()
