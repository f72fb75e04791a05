"""Source generators for saved forms.

Templates live next to this module. The TSX template swaps Jinja's brace
delimiters for ``[[ ]]`` / ``[% %]`` so JSX braces can be written as-is.
"""

import json
import re
from logging import Logger
from pathlib import Path
from typing import Iterable

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from core.exceptions import MissingPrimaryKeyException
from core.logger import app_logger
from model.dao.enums import FieldType
from model.dto.catalog import ColumnMetadataDTO
from model.dto.forms import FormConfigDTO, FormFieldDTO, GeneratedSourceDTO
from service.field_derivation import DEFAULT_FOREIGN_KEY_FIELDS


_TEMPLATE_DIR = Path(__file__).parent / "templates"
_WHITESPACE = re.compile(r"\s+")

_STRING_TYPES = {FieldType.TEXT, FieldType.TEXTAREA, FieldType.SELECT, FieldType.DATE}


def capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def component_name(form_name: str) -> str:
    return _WHITESPACE.sub("", form_name)


def zod_rule(field: FormFieldDTO) -> str:
    if field.type == FieldType.SWITCH:
        return "z.boolean().default(false)"

    rule = "z.number()" if field.type == FieldType.NUMBER else "z.string()"
    return rule if field.required else f"{rule}.optional()"


def option_label(field: FormFieldDTO) -> str:
    display_fields = field.foreign_key_fields or DEFAULT_FOREIGN_KEY_FIELDS
    return ' + " - " + '.join(f"item.{name}" for name in display_fields)


def option_value(field: FormFieldDTO) -> str:
    display_fields = field.foreign_key_fields or DEFAULT_FOREIGN_KEY_FIELDS
    return f"item.{display_fields[0]}"


def options_source(field: FormFieldDTO) -> str:
    """JS expression holding a select's options."""
    if field.is_foreign_key:
        return f"{field.name}Options"
    options = [option.model_dump() for option in field.options or []]
    return json.dumps(options, ensure_ascii=False)


def _create_tsx_env() -> Environment:
    env = Environment(
        block_start_string="[%",
        block_end_string="%]",
        variable_start_string="[[",
        variable_end_string="]]",
        comment_start_string="[#",
        comment_end_string="#]",
        trim_blocks=True,
        lstrip_blocks=True,
        autoescape=False,
        undefined=StrictUndefined,
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    )
    env.filters["capitalize_first"] = capitalize_first
    env.filters["zod_rule"] = zod_rule
    env.filters["option_label"] = option_label
    env.filters["option_value"] = option_value
    env.filters["options_source"] = options_source
    return env


def _create_sql_env() -> Environment:
    return Environment(
        trim_blocks=True,
        lstrip_blocks=True,
        autoescape=False,
        undefined=StrictUndefined,
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    )


class CodeGenerator:
    def __init__(self, logger: Logger = app_logger):
        self._tsx_env = _create_tsx_env()
        self._sql_env = _create_sql_env()
        self._logger = logger

    def generate_form_source(self, config: FormConfigDTO) -> GeneratedSourceDTO:
        """Render a React form component for a saved form."""
        fields = sorted(config.fields, key=lambda field: field.order)
        name = component_name(config.name)

        template = self._tsx_env.get_template("form_component.tsx.j2")
        source = template.render(
            form=config,
            component_name=name,
            fields=fields,
            option_fields=[
                f for f in fields if f.is_foreign_key and f.type == FieldType.SELECT
            ],
            table_path=config.table_name.lower(),
        )

        self._logger.debug(f"Generated {len(fields)} form fields for `{name}`")
        return GeneratedSourceDTO(file_name=f"{name}.tsx", source=source)

    def generate_crud_procedure(
        self, table_name: str, columns: Iterable[ColumnMetadataDTO]
    ) -> GeneratedSourceDTO:
        """Render a SQL Server stored procedure covering CREATE/READ/UPDATE/DELETE."""
        columns = list(columns)
        primary_key = next((col for col in columns if col.is_primary_key), None)
        if primary_key is None:
            raise MissingPrimaryKeyException(f"No primary key found in table `{table_name}`")

        template = self._sql_env.get_template("crud_procedure.sql.j2")
        source = template.render(
            table_name=table_name,
            primary_key=primary_key.name,
            param_list=",\n    ".join(
                f"@{col.name} {col.data_type}{' = NULL' if col.nullable else ''}"
                for col in columns
            ),
            column_list=", ".join(col.name for col in columns),
            value_list=", ".join(f"@{col.name}" for col in columns),
            update_set_clause=",\n        ".join(
                f"{col.name} = @{col.name}" for col in columns if not col.is_primary_key
            ),
        )
        return GeneratedSourceDTO(file_name=f"sp_{table_name}_CRUD.sql", source=source)
