from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from model.dao.enums import FieldType
from model.dto.catalog import FieldOptionDTO


class FormFieldDTO(BaseModel):
    """One form input. Edits go through `model_copy` or a fresh validation."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    label: str
    type: FieldType
    required: bool
    is_primary_key: bool = False
    is_foreign_key: bool = False
    referenced_table: str | None = None
    foreign_key_fields: tuple[str, ...] | None = None
    options: tuple[FieldOptionDTO, ...] | None = None
    order: int


class FormFieldUpdateDTO(BaseModel):
    """Partial edit of a field; unset attributes are left untouched."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    label: str | None = None
    type: FieldType | None = None
    required: bool | None = None
    foreign_key_fields: list[str] | None = None
    options: list[FieldOptionDTO] | None = None


class FormConfigDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str = Field(min_length=1)
    table_name: str
    description: str = ""
    fields: tuple[FormFieldDTO, ...]
    version: int = 1
    created_at: datetime

    @field_serializer("created_at")
    def serialize_dt(self, dt: datetime, _info):
        return dt.replace(tzinfo=UTC).isoformat(timespec="seconds")


class FormSessionDTO(BaseModel):
    id: UUID
    table_name: str
    name: str
    description: str
    fields: list[FormFieldDTO]
    selected_field_id: str | None = None


class StartFormSessionDTO(BaseModel):
    table_name: str


class ChangeTableDTO(BaseModel):
    table_name: str


class FormDetailsDTO(BaseModel):
    name: str | None = None
    description: str | None = None


class ReorderFieldsDTO(BaseModel):
    source_index: int
    destination_index: int | None = None


class PreviewRequestDTO(BaseModel):
    values: dict[str, Any] = {}


class AuxiliaryFieldDTO(BaseModel):
    label: str
    value: int | None = None
    read_only: bool = True


class FormPreviewDTO(BaseModel):
    title: str
    description: str
    fields: list[FormFieldDTO]
    auxiliary_fields: list[AuxiliaryFieldDTO] = []


class GeneratedSourceDTO(BaseModel):
    file_name: str
    source: str
