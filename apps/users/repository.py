"""Users module repository implementations."""

from abc import abstractmethod
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.sql import ColumnElement

from framework.database.context import DbContext
from framework.logging.logger import get_logger
from framework.repository.base import BaseRepository, IRepository
from framework.repository.result import Failed, Found, NotFound, Result
from .models import User


class IUserRepository(IRepository[User]):
    """User repository interface: generic CRUD plus lookup by email."""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Find user by email."""
        pass


class UserRepository(IUserRepository):
    """User repository.

    Wraps a generic repository and never lets an exception out: failures are
    logged with the repository and operation name, then turned into an empty
    list, False or None. ``lookup_by_id`` and ``lookup_by_email`` keep the
    "not found" / "failed" distinction for callers that need it.

    ``upsert`` of an existing user and ``delete`` only stage the change; it is
    persisted when the unit of work saves.
    """

    def __init__(self, context: DbContext, model=User, logger=None, base: BaseRepository = None):
        self.context = context
        self.logger = logger or get_logger("repository")
        self._base = base or BaseRepository(context, model, self.logger)

    @property
    def session(self):
        return self.context.session

    def _log_failure(self, operation: str, error: BaseException) -> None:
        self.logger.opt(exception=error).error(
            "{repo} {operation} function error",
            repo=type(self).__name__,
            operation=operation,
        )

    def _collapse(self, operation: str, result: Result[User]) -> Optional[User]:
        if isinstance(result, Found):
            return result.value
        if isinstance(result, NotFound):
            self.logger.warning(
                "{repo} {operation} found no {entity} for {key}",
                repo=type(self).__name__,
                operation=operation,
                entity=result.entity,
                key=str(result.key),
            )
        else:
            self._log_failure(operation, result.error)
        return None

    async def lookup_by_id(self, id: Any) -> Result[User]:
        try:
            return await self._base.lookup(id)
        except Exception as exc:
            return Failed(exc)

    async def lookup_by_email(self, email: str) -> Result[User]:
        try:
            user = await self._base.find_one(User.email == email)
        except Exception as exc:
            return Failed(exc)
        if user is None:
            return NotFound(User.__name__, email)
        return Found(user)

    async def all(self) -> List[User]:
        try:
            return await self._base.all()
        except Exception as exc:
            self._log_failure("all", exc)
            return []

    async def get_by_id(self, id: UUID) -> Optional[User]:
        return self._collapse("get_by_id", await self.lookup_by_id(id))

    async def get_by_email(self, email: str) -> Optional[User]:
        return self._collapse("get_by_email", await self.lookup_by_email(email))

    async def add(self, entity: User) -> bool:
        try:
            return await self._base.add(entity)
        except Exception as exc:
            self._log_failure("add", exc)
            return False

    async def upsert(self, entity: User) -> bool:
        try:
            found = await self._base.lookup(entity.id)
            if isinstance(found, Failed):
                raise found.error
            if isinstance(found, NotFound):
                return await self._base.add(entity)

            existing = found.value
            existing.first_name = entity.first_name
            existing.last_name = entity.last_name
            existing.email = entity.email
            existing.password = entity.password
            return True
        except Exception as exc:
            self._log_failure("upsert", exc)
            return False

    async def delete(self, id: UUID) -> bool:
        try:
            found = await self._base.lookup(id)
            if isinstance(found, Failed):
                raise found.error
            if isinstance(found, NotFound):
                return False

            await self.session.delete(found.value)
            return True
        except Exception as exc:
            self._log_failure("delete", exc)
            return False

    async def find(self, *criteria: ColumnElement[bool]) -> List[User]:
        try:
            return await self._base.find(*criteria)
        except Exception as exc:
            self._log_failure("find", exc)
            return []
