from logging import Logger
from typing import Any, Iterable, Mapping, Self
from uuid import uuid4

from core.environment import WeightOrder
from core.exceptions import EmptyNameException, LockedFieldException, NoFieldsException
from core.logger import app_logger
from core.utils import naive_utc_now
from model.dto.catalog import ColumnMetadataDTO
from model.dto.forms import (
    FormConfigDTO,
    FormFieldDTO,
    FormFieldUpdateDTO,
    FormPreviewDTO,
)
from service.field_derivation import FieldDerivationEngine
from service.verification_digit import build_verification_digit_field


UNTITLED_FORM = "Untitled Form"


def default_form_name(table_name: str) -> str:
    return f"{table_name} Form"


class FormConfigurationModel:
    """Editable field list for one form, owned by a single editing session.

    The selected field is tracked by id so reordering or editing the list
    never leaves a stale reference behind.
    """

    def __init__(
        self,
        table_name: str,
        fields: Iterable[FormFieldDTO] = (),
        name: str | None = None,
        description: str = "",
        logger: Logger = app_logger,
    ):
        self.table_name = table_name
        self.name = default_form_name(table_name) if name is None else name
        self.description = description
        self._fields: list[FormFieldDTO] = list(fields)
        self._selected_field_id: str | None = None
        self._logger = logger

    @classmethod
    def from_columns(
        cls,
        table_name: str,
        columns: Iterable[ColumnMetadataDTO],
        engine: FieldDerivationEngine | None = None,
        logger: Logger = app_logger,
    ) -> Self:
        engine = engine or FieldDerivationEngine(logger)
        return cls(table_name, engine.derive(table_name, columns), logger=logger)

    @property
    def fields(self) -> list[FormFieldDTO]:
        return list(self._fields)

    @property
    def selected_field_id(self) -> str | None:
        return self._selected_field_id

    @property
    def selected_field(self) -> FormFieldDTO | None:
        if self._selected_field_id is None:
            return None
        return self.get_field(self._selected_field_id)

    def get_field(self, field_id: str) -> FormFieldDTO | None:
        return next((f for f in self._fields if f.id == field_id), None)

    def load_table(
        self,
        table_name: str,
        columns: Iterable[ColumnMetadataDTO],
        engine: FieldDerivationEngine | None = None,
    ) -> None:
        """Re-derive the field list for a new table, dropping unsaved edits."""
        engine = engine or FieldDerivationEngine(self._logger)
        self.table_name = table_name
        self.name = default_form_name(table_name)
        self._fields = engine.derive(table_name, columns)
        self.clear_selection()

    def update_details(
        self, name: str | None = None, description: str | None = None
    ) -> None:
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description

    def select_field(self, field_id: str) -> FormFieldDTO | None:
        field = self.get_field(field_id)
        if field is None:
            self._logger.debug(f"Field `{field_id}` not found, selection unchanged")
            return None

        self._selected_field_id = field_id
        return field

    def clear_selection(self) -> None:
        self._selected_field_id = None

    def _check_locked_attributes(
        self, field: FormFieldDTO, changes: Mapping[str, Any]
    ) -> None:
        is_key = field.is_primary_key or field.is_foreign_key
        if is_key and "name" in changes and changes["name"] != field.name:
            raise LockedFieldException(f"The name of key field `{field.name}` cannot be changed")
        if field.is_foreign_key and "type" in changes and changes["type"] != field.type:
            raise LockedFieldException(
                f"The type of foreign key field `{field.name}` cannot be changed"
            )

    def update_field(
        self, field_id: str, changes: FormFieldUpdateDTO | Mapping[str, Any]
    ) -> FormFieldDTO | None:
        """Apply a partial edit to one field.

        Returns the updated field, or None when no field has that id. Editing
        the name of a key field, or the type of a foreign key, raises
        ``LockedFieldException`` and leaves the field untouched.
        """
        if not isinstance(changes, FormFieldUpdateDTO):
            changes = FormFieldUpdateDTO.model_validate(changes)
        updates = changes.model_dump(exclude_unset=True, exclude_none=True)

        for index, field in enumerate(self._fields):
            if field.id != field_id:
                continue

            try:
                self._check_locked_attributes(field, updates)
            except LockedFieldException as exc:
                self._logger.info(f"Rejected edit on `{field_id}`: {exc.message}")
                raise

            updated = FormFieldDTO.model_validate({**field.model_dump(), **updates})
            self._fields[index] = updated
            return updated

        self._logger.debug(f"Field `{field_id}` not found, nothing to update")
        return None

    def update_selected_field(
        self, changes: FormFieldUpdateDTO | Mapping[str, Any]
    ) -> FormFieldDTO | None:
        if self._selected_field_id is None:
            return None
        return self.update_field(self._selected_field_id, changes)

    def reorder(self, source_index: int, destination_index: int | None) -> bool:
        """Move a field and renumber ``order`` densely from zero.

        Returns False, without touching the list, when either index is
        missing or out of range.
        """
        size = len(self._fields)
        if destination_index is None or not 0 <= destination_index < size:
            return False
        if not 0 <= source_index < size:
            return False

        items = list(self._fields)
        moved = items.pop(source_index)
        items.insert(destination_index, moved)

        self._fields = [
            field.model_copy(update={"order": position})
            for position, field in enumerate(items)
        ]
        return True

    def validate_for_save(self) -> None:
        if not self.name or not self.name.strip():
            raise EmptyNameException()
        if not self._fields:
            raise NoFieldsException()

    def to_snapshot(self) -> FormConfigDTO:
        self.validate_for_save()

        fields = sorted(self._fields, key=lambda field: field.order)
        return FormConfigDTO(
            id=uuid4(),
            name=self.name,
            table_name=self.table_name,
            description=self.description,
            fields=tuple(field.model_copy(deep=True) for field in fields),
            version=1,
            created_at=naive_utc_now(),
        )

    def preview(
        self,
        values: Mapping[str, Any] | None = None,
        weight_order: WeightOrder | None = None,
    ) -> FormPreviewDTO:
        fields = sorted(self._fields, key=lambda field: field.order)
        auxiliary = build_verification_digit_field(fields, values, weight_order)

        return FormPreviewDTO(
            title=self.name or UNTITLED_FORM,
            description=self.description,
            fields=[field.model_copy(deep=True) for field in fields],
            auxiliary_fields=[auxiliary] if auxiliary is not None else [],
        )
