from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Self
from uuid import UUID, uuid4

from pydantic import BaseModel, field_serializer
from sqlmodel import Field, SQLModel, select

from core.database import SQLDatabase
from core.utils import naive_utc_now


class BaseDAO(SQLModel, ABC):
    async def save(self, db_resource: SQLDatabase) -> None:
        async with db_resource.session() as session:
            session.add(self)
            await session.commit()
            await session.refresh(self)

    @abstractmethod
    def to_dto(self) -> BaseModel:
        """Convert the stored row to its DTO."""


class UuidDAO(BaseDAO):
    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
    )

    @classmethod
    async def get(cls, id: UUID, db_resource: SQLDatabase) -> Self | None:
        async with db_resource.session() as session:
            query = select(cls).where(cls.id == id)
            return (await session.scalars(query)).one_or_none()


class TimestampDAO(BaseDAO):
    created_at: datetime = Field(default_factory=naive_utc_now, nullable=False)
    updated_at: datetime = Field(
        default_factory=naive_utc_now,
        sa_column_kwargs={"onupdate": naive_utc_now},
    )

    @field_serializer("created_at", "updated_at")
    def serialize_dt(self, dt: datetime, _info):
        return dt.replace(tzinfo=UTC).isoformat(timespec="seconds")
