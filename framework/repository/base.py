"""
Repository abstract base class and generic implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import ColumnElement
from sqlmodel import SQLModel, select

from framework.database.context import DbContext
from framework.logging.logger import get_logger
from .result import Failed, Found, NotFound, Result

T = TypeVar("T", bound=SQLModel)


class IRepository(ABC, Generic[T]):
    """Repository interface; defines standard data access API."""

    @abstractmethod
    async def all(self) -> List[T]:
        """Get every entity."""
        pass

    @abstractmethod
    async def get_by_id(self, id: UUID) -> Optional[T]:
        """Get entity by ID."""
        pass

    @abstractmethod
    async def add(self, entity: T) -> bool:
        """Insert entity."""
        pass

    @abstractmethod
    async def delete(self, id: UUID) -> bool:
        """Delete entity by ID."""
        pass

    @abstractmethod
    async def upsert(self, entity: T) -> bool:
        """Insert entity, or update the stored entity with the same ID."""
        pass

    @abstractmethod
    async def find(self, *criteria: ColumnElement[bool]) -> List[T]:
        """Get entities matching every criterion."""
        pass


class BaseRepository(IRepository[T]):
    """Generic repository with SQLModel CRUD.

    Strict policy: a missing entity raises EntityNotFoundException and
    provider errors (e.g. IntegrityError) propagate. Every write is staged in
    its own savepoint, so a failed write leaves other pending work intact, and
    then persisted through ``DbContext.save_changes``, which commits on its own
    only when no explicit transaction is open.
    """

    def __init__(self, context: DbContext, model: Type[T], logger=None):
        """Initialize repository with the shared context and the model it serves."""
        self.context = context
        self.model = model
        self.logger = logger or get_logger("repository")

    @property
    def session(self):
        return self.context.session

    def __repr__(self) -> str:
        return f"{type(self).__name__}[{self.model.__name__}]"

    def _primary_key(self):
        return self.model.__table__.primary_key.columns.values()[0]

    def _identity(self, entity: T) -> Any:
        return getattr(entity, self._primary_key().key)

    async def all(self) -> List[T]:
        """Get every entity."""
        result = await self.session.exec(select(self.model))
        return list(result.all())

    async def lookup(self, id: Any) -> Result[T]:
        """Get entity by ID as Found / NotFound / Failed."""
        try:
            statement = select(self.model).where(self._primary_key() == id)
            result = await self.session.exec(statement)
            entity = result.first()
        except SQLAlchemyError as exc:
            return Failed(exc)
        if entity is None:
            return NotFound(self.model.__name__, id)
        return Found(entity)

    async def get_by_id(self, id: Any) -> T:
        """Get entity by ID; raises EntityNotFoundException when absent."""
        return (await self.lookup(id)).unwrap()

    async def add(self, entity: T) -> bool:
        """Insert entity and persist it."""
        try:
            async with self.context.write_scope():
                self.session.add(entity)
        except Exception:
            # Staging can fail before the savepoint owns the entity
            if entity in self.session:
                self.session.expunge(entity)
            raise
        return await self.context.save_changes() > 0

    async def delete(self, id: Any) -> bool:
        """Delete entity by ID and persist; raises EntityNotFoundException when absent."""
        entity = await self.get_by_id(id)
        async with self.context.write_scope():
            await self.session.delete(entity)
        return await self.context.save_changes() > 0

    async def upsert(self, entity: T) -> bool:
        """Insert, or copy every non-key column onto the stored entity, then persist."""
        found = await self.lookup(self._identity(entity))
        if isinstance(found, Failed):
            raise found.error
        if isinstance(found, NotFound):
            return await self.add(entity)

        existing = found.value
        async with self.context.write_scope():
            for column in self.model.__table__.columns:
                if not column.primary_key:
                    setattr(existing, column.key, getattr(entity, column.key))
        return await self.context.save_changes() > 0

    async def find(self, *criteria: ColumnElement[bool]) -> List[T]:
        """Find entities matching every criterion, e.g. find(User.email == "a@x.com")."""
        result = await self.session.exec(select(self.model).where(*criteria))
        return list(result.all())

    async def find_one(self, *criteria: ColumnElement[bool]) -> Optional[T]:
        """Find the first entity matching every criterion."""
        result = await self.session.exec(select(self.model).where(*criteria).limit(1))
        return result.first()

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        """Count entities matching every criterion."""
        statement = select(func.count()).select_from(self.model).where(*criteria)
        result = await self.session.exec(statement)
        return result.one()
