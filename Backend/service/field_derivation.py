import re
from logging import Logger
from typing import Iterable

from core.logger import app_logger
from model.dao.enums import FieldType
from model.dto.catalog import ColumnMetadataDTO, FieldOptionDTO
from model.dto.forms import FormFieldDTO


DEFAULT_FOREIGN_KEY_FIELDS = ["id", "name"]
LOADING_OPTION = FieldOptionDTO(label="Loading...", value="loading")
TEXTAREA_MIN_LENGTH = 255

_UPPERCASE_PATTERN = re.compile(r"(?<=.)([A-Z])")
_INTEGER_PATTERN = re.compile(r"\d+")


def derive_label(name: str) -> str:
    """Turn a column identifier into a human-readable label.

    A space goes before every uppercase letter except the first character,
    underscores become spaces and the first character is capitalized.
    Acronyms are not special-cased: ``CustomerID`` becomes ``Customer I D``.
    """
    label = _UPPERCASE_PATTERN.sub(r" \1", name).replace("_", " ")
    return label[:1].upper() + label[1:]


def _declared_length(data_type: str) -> int:
    match = _INTEGER_PATTERN.search(data_type)
    return int(match.group()) if match else 0


def select_field_type(column: ColumnMetadataDTO) -> FieldType:
    if column.is_foreign_key:
        return FieldType.SELECT

    data_type = column.data_type.lower()
    if "bit" in data_type:
        return FieldType.SWITCH
    if "int" in data_type:
        return FieldType.NUMBER
    if "date" in data_type:
        return FieldType.DATE
    if "text" in data_type or (
        "varchar" in data_type and _declared_length(data_type) > TEXTAREA_MIN_LENGTH
    ):
        return FieldType.TEXTAREA
    return FieldType.TEXT


class FieldDerivationEngine:
    """Builds the initial form field list from a table's column metadata."""

    def __init__(self, logger: Logger = app_logger):
        self._logger = logger

    def derive_field(self, column: ColumnMetadataDTO, position: int) -> FormFieldDTO:
        return FormFieldDTO(
            id=f"field-{position}",
            name=column.name,
            label=derive_label(column.name),
            type=select_field_type(column),
            required=not column.nullable,
            is_primary_key=column.is_primary_key,
            is_foreign_key=column.is_foreign_key,
            referenced_table=column.referenced_table,
            foreign_key_fields=(
                list(DEFAULT_FOREIGN_KEY_FIELDS) if column.is_foreign_key else None
            ),
            options=[LOADING_OPTION.model_copy()] if column.is_foreign_key else None,
            order=position,
        )

    def derive(
        self, table_name: str, columns: Iterable[ColumnMetadataDTO]
    ) -> list[FormFieldDTO]:
        fields = [
            self.derive_field(column, position)
            for position, column in enumerate(columns)
        ]
        self._logger.debug(f"Derived {len(fields)} fields for table `{table_name}`")
        return fields
