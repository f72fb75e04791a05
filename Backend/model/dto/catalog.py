from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from model.dao.enums import AuthenticationMode


class ColumnMetadataDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    data_type: str
    nullable: bool
    is_primary_key: bool = False
    is_foreign_key: bool = False
    referenced_table: str | None = None

    @model_validator(mode="after")
    def check_referenced_table(self) -> Self:
        if self.is_foreign_key and not self.referenced_table:
            raise ValueError(f"Foreign key column `{self.name}` needs a referenced_table")
        if not self.is_foreign_key and self.referenced_table is not None:
            raise ValueError(f"Column `{self.name}` is not a foreign key")
        return self


class TableInfoDTO(BaseModel):
    name: str
    size_kb: int | None = None
    record_count: int | None = None
    description: str = ""


class TableDescriptionDTO(BaseModel):
    description: str = Field(max_length=2000)


class FieldOptionDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class ConnectionConfigDTO(BaseModel):
    server: str
    database: str
    authentication: AuthenticationMode = AuthenticationMode.WINDOWS
    port: int | None = None
    username: str | None = None
    password: str | None = None

    @model_validator(mode="after")
    def check_credentials(self) -> Self:
        if self.authentication == AuthenticationMode.SQL and not self.username:
            raise ValueError("SQL authentication requires a username")
        return self


class ConnectionStatusDTO(BaseModel):
    server: str
    database: str
    connected: bool
