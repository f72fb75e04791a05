from typing import Self

from sqlalchemy import ScalarResult
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Column, Field, desc, select

from core.database import SQLDatabase
from model.dao.base import TimestampDAO, UuidDAO
from model.dto.forms import FormConfigDTO


class FormConfigDAO(UuidDAO, TimestampDAO, table=True):
    # model config
    __tablename__ = "form_configs"

    name: str
    table_name: str = Field(index=True)
    description: str = ""
    version: int = Field(default=1, nullable=False)
    form_fields: list = Field(sa_column=Column(JSONB, nullable=False))

    @classmethod
    async def filter(
        cls,
        *,
        db_resource: SQLDatabase,
        id=None,
        table_name: str | None = None,
        name: str | None = None,
    ) -> ScalarResult[Self]:
        """Filter saved forms by id, table and name, newest first."""
        async with db_resource.session() as session:
            query = select(FormConfigDAO)
            if id is not None:
                query = query.where(FormConfigDAO.id == id)
            if table_name is not None:
                query = query.where(FormConfigDAO.table_name == table_name)
            if name is not None:
                query = query.where(FormConfigDAO.name == name)

            query = query.order_by(desc(FormConfigDAO.created_at))

            return await session.scalars(query)

    def to_dto(self) -> FormConfigDTO:
        return FormConfigDTO(
            id=self.id,
            name=self.name,
            table_name=self.table_name,
            description=self.description,
            fields=tuple(self.form_fields),
            version=self.version,
            created_at=self.created_at,
        )

    @classmethod
    def from_dto(cls, dto: FormConfigDTO) -> Self:
        return cls(
            id=dto.id,
            name=dto.name,
            table_name=dto.table_name,
            description=dto.description,
            version=dto.version,
            form_fields=[field.model_dump(mode="json") for field in dto.fields],
            created_at=dto.created_at,
        )
