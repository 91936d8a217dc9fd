"""
Base repository for integer-keyed SQLAlchemy models.

Provides the create/get/update/delete operations shared by entity
repositories. Input objects may be pydantic models or plain dicts.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

ModelType = TypeVar("ModelType", bound=DeclarativeBase)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


def _as_dict(obj_in: Union[BaseModel, dict[str, Any]], *, partial: bool) -> dict[str, Any]:
    if isinstance(obj_in, dict):
        return obj_in
    return obj_in.model_dump(exclude_unset=partial)


class BaseSQLAlchemyRepository(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Common persistence operations for one model class.

    Parameters
    ----------
    model : type[ModelType]
        Mapped class handled by the repository. Its primary key column
        must be named ``id``.
    """

    def __init__(self, model: type[ModelType]):
        self.model = model

    async def create(
        self,
        session: AsyncSession,
        *,
        obj_in: Union[CreateSchemaType, dict[str, Any]],
    ) -> ModelType:
        """Insert a new row and return it with server defaults loaded."""
        db_obj = self.model(**_as_dict(obj_in, partial=False))
        session.add(db_obj)
        await session.flush()
        await session.refresh(db_obj)
        return db_obj

    async def get(self, session: AsyncSession, id: int) -> Optional[ModelType]:
        """Get a row by primary key."""
        result = await session.execute(
            select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        )
        return result.scalar_one_or_none()

    async def exists(self, session: AsyncSession, id: int) -> bool:
        """Check whether a row with this primary key exists."""
        result = await session.execute(
            select(self.model.id).where(self.model.id == id)  # type: ignore[attr-defined]
        )
        return result.first() is not None

    async def update(
        self,
        session: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, dict[str, Any]],
    ) -> ModelType:
        """Apply the fields set on *obj_in* to *db_obj*."""
        for field, value in _as_dict(obj_in, partial=True).items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await session.flush()
        await session.refresh(db_obj)
        return db_obj

    async def delete(self, session: AsyncSession, *, id: int) -> Optional[ModelType]:
        """Delete a row by primary key, returning it if it existed."""
        db_obj = await self.get(session, id)
        if db_obj is not None:
            await session.delete(db_obj)
            await session.flush()
        return db_obj
