from contextlib import asynccontextmanager
import logging
from typing import Any, AsyncIterator, Callable, Self
from dependency_injector.resources import AsyncResource
from sqlalchemy import URL, Connection, MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.environment import SQLConfig
from core.logger import app_logger


class SQLDatabase(AsyncResource):
    async def init(
        self, db_config: SQLConfig, logger: logging.Logger = app_logger
    ) -> Self:
        db_url = URL.create(
            drivername=db_config.driver,
            username=db_config.username,
            password=db_config.password,
            host=db_config.host,
            port=db_config.port,
            database=db_config.database,
            query=db_config.additional_config,
        )
        self._logger = logger

        self._engine = create_async_engine(db_url, pool_recycle=3600)

        self._session_factory = async_sessionmaker(
            class_=AsyncSession, autocommit=False, autoflush=False, bind=self._engine
        )

        return self

    async def shutdown(self, _: None) -> None:
        self._logger.info("Shutting down...")
        await self._engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        session: AsyncSession = self._session_factory()
        try:
            yield session
        except Exception as e:
            self._logger.error("An error occurred. Rolling back", exc_info=e)
            await session.rollback()
            raise
        finally:
            self._logger.debug("Closing session")
            await session.close()

    async def run_sync(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking callable against a sync ``Connection``, e.g. for inspection."""
        async with self._engine.connect() as connection:
            return await connection.run_sync(fn, *args)

    async def create_tables(self, metadata: MetaData) -> None:
        async with self._engine.begin() as connection:
            await connection.run_sync(metadata.create_all)
        self._logger.info(f"Ensured tables: {', '.join(metadata.tables)}")


def _ping(connection: Connection) -> None:
    connection.exec_driver_sql("SELECT 1")


async def check_connection(db_url: URL) -> None:
    """Open and close a throwaway engine against ``db_url``."""
    engine = create_async_engine(db_url)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_ping)
    finally:
        await engine.dispose()
