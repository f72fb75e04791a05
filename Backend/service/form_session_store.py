from logging import Logger
from uuid import UUID, uuid4

from core.logger import app_logger
from service.form_configuration import FormConfigurationModel


class FormSessionStore:
    """Process-local registry of open form editing sessions."""

    def __init__(self, logger: Logger = app_logger):
        self._sessions: dict[UUID, FormConfigurationModel] = {}
        self._logger = logger

    def open(self, model: FormConfigurationModel) -> UUID:
        session_id = uuid4()
        self._sessions[session_id] = model
        self._logger.debug(f"Opened form session `{session_id}` for `{model.table_name}`")
        return session_id

    def get(self, session_id: UUID) -> FormConfigurationModel | None:
        return self._sessions.get(session_id)

    def close(self, session_id: UUID) -> bool:
        closed = self._sessions.pop(session_id, None) is not None
        if closed:
            self._logger.debug(f"Closed form session `{session_id}`")
        return closed
