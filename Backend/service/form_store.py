from abc import ABC, abstractmethod
from logging import Logger
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from core.database import SQLDatabase
from core.exceptions import DAOException
from core.logger import app_logger
from model.dao.forms import FormConfigDAO
from model.dto.forms import FormConfigDTO


class FormRepository(ABC):
    """Destination for saved form snapshots."""

    @abstractmethod
    async def save(self, config: FormConfigDTO) -> None: ...

    @abstractmethod
    async def list_forms(self, table_name: str | None = None) -> list[FormConfigDTO]: ...

    @abstractmethod
    async def get(self, form_id: UUID) -> FormConfigDTO | None: ...


class InMemoryFormRepository(FormRepository):
    def __init__(self, logger: Logger = app_logger):
        self._forms: dict[UUID, FormConfigDTO] = {}
        self._logger = logger

    async def save(self, config: FormConfigDTO) -> None:
        self._logger.debug(f"Saving form configuration `{config.id}` ({config.name})")
        self._forms[config.id] = config

    async def list_forms(self, table_name: str | None = None) -> list[FormConfigDTO]:
        forms = [
            form
            for form in self._forms.values()
            if table_name is None or form.table_name == table_name
        ]
        return sorted(forms, key=lambda form: form.created_at, reverse=True)

    async def get(self, form_id: UUID) -> FormConfigDTO | None:
        return self._forms.get(form_id)


class SQLFormRepository(FormRepository):
    def __init__(self, pg_database: SQLDatabase, logger: Logger = app_logger):
        self._db = pg_database
        self._logger = logger

    async def save(self, config: FormConfigDTO) -> None:
        self._logger.debug(f"Persisting form configuration `{config.id}` ({config.name})")
        try:
            await FormConfigDAO.from_dto(config).save(self._db)
        except SQLAlchemyError as exc:
            self._logger.error(f"Could not persist form `{config.id}`: {exc}")
            raise DAOException("Could not save the form configuration") from exc

    async def list_forms(self, table_name: str | None = None) -> list[FormConfigDTO]:
        forms = await FormConfigDAO.filter(table_name=table_name, db_resource=self._db)
        return [form.to_dto() for form in forms]

    async def get(self, form_id: UUID) -> FormConfigDTO | None:
        form = await FormConfigDAO.get(form_id, db_resource=self._db)
        return form.to_dto() if form is not None else None
