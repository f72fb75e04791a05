from logging import Logger
from typing import Any
from uuid import UUID

from core.environment import WeightOrder, settings
from core.exceptions import BadRequestException, FormGenServiceException, NotFoundException
from core.logger import app_logger
from model.dao.enums import FieldType
from model.dto.forms import (
    FormConfigDTO,
    FormDetailsDTO,
    FormFieldDTO,
    FormFieldUpdateDTO,
    FormPreviewDTO,
    FormSessionDTO,
    GeneratedSourceDTO,
    ReorderFieldsDTO,
)
from service.catalog import CatalogService
from service.code_generator import CodeGenerator
from service.field_derivation import FieldDerivationEngine
from service.form_configuration import FormConfigurationModel
from service.form_session_store import FormSessionStore
from service.form_store import FormRepository


class FormService:
    def __init__(
        self,
        catalog: CatalogService,
        repository: FormRepository,
        session_store: FormSessionStore,
        code_generator: CodeGenerator,
        weight_order: WeightOrder = settings.NIT_WEIGHT_ORDER,
        logger: Logger = app_logger,
    ):
        self._catalog = catalog
        self._repository = repository
        self._sessions = session_store
        self._code_generator = code_generator
        self._engine = FieldDerivationEngine(logger)
        self._weight_order = weight_order
        self._logger = logger

    def _session_dto(self, session_id: UUID, model: FormConfigurationModel) -> FormSessionDTO:
        return FormSessionDTO(
            id=session_id,
            table_name=model.table_name,
            name=model.name,
            description=model.description,
            fields=model.fields,
            selected_field_id=model.selected_field_id,
        )

    def _get_model(self, session_id: UUID) -> FormConfigurationModel:
        model = self._sessions.get(session_id)
        if model is None:
            raise NotFoundException("Form session not found")
        return model

    def _get_field(self, model: FormConfigurationModel, field_id: str) -> FormFieldDTO:
        field = model.get_field(field_id)
        if field is None:
            raise NotFoundException(f"Field `{field_id}` not found")
        return field

    async def start_session(self, table_name: str) -> FormSessionDTO:
        columns = await self._catalog.fetch_columns(table_name)
        model = FormConfigurationModel.from_columns(
            table_name, columns, engine=self._engine, logger=self._logger
        )
        session_id = self._sessions.open(model)

        return self._session_dto(session_id, model)

    async def get_session(self, session_id: UUID) -> FormSessionDTO:
        return self._session_dto(session_id, self._get_model(session_id))

    async def close_session(self, session_id: UUID) -> None:
        if not self._sessions.close(session_id):
            raise NotFoundException("Form session not found")

    async def change_table(self, session_id: UUID, table_name: str) -> FormSessionDTO:
        model = self._get_model(session_id)
        columns = await self._catalog.fetch_columns(table_name)
        model.load_table(table_name, columns, engine=self._engine)

        return self._session_dto(session_id, model)

    async def update_details(self, session_id: UUID, dto: FormDetailsDTO) -> FormSessionDTO:
        model = self._get_model(session_id)
        model.update_details(name=dto.name, description=dto.description)

        return self._session_dto(session_id, model)

    async def select_field(self, session_id: UUID, field_id: str) -> FormSessionDTO:
        model = self._get_model(session_id)
        if model.select_field(field_id) is None:
            raise NotFoundException(f"Field `{field_id}` not found")

        return self._session_dto(session_id, model)

    async def update_field(
        self, session_id: UUID, field_id: str, dto: FormFieldUpdateDTO
    ) -> FormFieldDTO:
        model = self._get_model(session_id)
        updated = model.update_field(field_id, dto)
        if updated is None:
            raise NotFoundException(f"Field `{field_id}` not found")
        return updated

    async def update_selected_field(
        self, session_id: UUID, dto: FormFieldUpdateDTO
    ) -> FormFieldDTO:
        model = self._get_model(session_id)
        if model.selected_field_id is None:
            raise BadRequestException("No field is selected")
        return await self.update_field(session_id, model.selected_field_id, dto)

    async def reorder_fields(self, session_id: UUID, dto: ReorderFieldsDTO) -> FormSessionDTO:
        model = self._get_model(session_id)
        if not model.reorder(dto.source_index, dto.destination_index):
            self._logger.debug(
                f"Ignored reorder {dto.source_index} -> {dto.destination_index} in `{session_id}`"
            )

        return self._session_dto(session_id, model)

    async def load_field_options(self, session_id: UUID, field_id: str) -> FormFieldDTO:
        """Replace a foreign key field's placeholder options with referenced rows."""
        model = self._get_model(session_id)
        field = self._get_field(model, field_id)
        if field.type != FieldType.SELECT or not field.referenced_table:
            raise BadRequestException(f"Field `{field_id}` has no referenced table")

        options = await self._catalog.fetch_foreign_key_options(
            field.referenced_table, field.foreign_key_fields
        )
        return model.update_field(field_id, {"options": options})

    async def preview(self, session_id: UUID, values: dict[str, Any]) -> FormPreviewDTO:
        return self._get_model(session_id).preview(values, self._weight_order)

    async def save_form(self, session_id: UUID) -> FormConfigDTO:
        model = self._get_model(session_id)
        try:
            config = model.to_snapshot()
        except FormGenServiceException as exc:
            self._logger.info(f"Form session `{session_id}` not saved: {exc.kind}")
            raise

        await self._repository.save(config)
        self._logger.info(f"Saved form `{config.name}` ({config.id}) for `{config.table_name}`")
        return config

    async def list_forms(self, table_name: str | None = None) -> list[FormConfigDTO]:
        return await self._repository.list_forms(table_name)

    async def get_form(self, form_id: UUID) -> FormConfigDTO:
        config = await self._repository.get(form_id)
        if config is None:
            raise NotFoundException("Form not found")
        return config

    async def generate_form_source(self, form_id: UUID) -> GeneratedSourceDTO:
        return self._code_generator.generate_form_source(await self.get_form(form_id))
