"""
Unit of Work: owns the persistence context, caches repositories, brackets transactions.
"""

from typing import Dict, Type
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.database.context import DbContext, DbTransaction
from framework.logging.logger import get_logger
from .base import BaseRepository, IRepository


class UnitOfWork:
    """Manages related repositories sharing one session and its transaction boundaries.

    Repositories are created on first access and cached per model for the
    lifetime of the unit of work. Only one explicit transaction may be open
    at a time; leaving ``async with`` (or calling ``close``) rolls back a
    transaction that was never committed and releases the session.
    """

    repository_classes: Dict[Type[SQLModel], Type[IRepository]] = {}

    def __init__(self, session: AsyncSession = None, logger=None):
        """Initialize UnitOfWork; session must be provided (e.g. UnitOfWork.from_session())."""
        if session is None:
            raise ValueError("Session must be provided. Use UnitOfWork.from_session() or pass session explicitly.")

        self.context = DbContext(session)
        self.logger = logger or get_logger("repository")
        self._repositories: Dict[Type[SQLModel], IRepository] = {}

    @classmethod
    async def from_session(cls, session: AsyncSession, logger=None) -> "UnitOfWork":
        """Create UnitOfWork from an existing session."""
        return cls(session=session, logger=logger)

    @property
    def session(self) -> AsyncSession:
        return self.context.session

    def repository(self, model_class: Type[SQLModel]) -> IRepository:
        """Get or create the repository for a model.

        There is one repository per model: the class registered in
        ``repository_classes``, or ``BaseRepository`` for unregistered models.
        """
        if model_class not in self._repositories:
            repo_class = self.repository_classes.get(model_class, BaseRepository)
            self._repositories[model_class] = repo_class(self.context, model_class, self.logger)
        return self._repositories[model_class]

    async def begin_transaction(self) -> DbTransaction:
        """Open an explicit transaction; raises TransactionError if one is open."""
        return await self.context.begin_transaction()

    async def commit_transaction(self) -> None:
        await self.context.commit_transaction()

    async def rollback_transaction(self) -> None:
        await self.context.rollback_transaction()

    async def save_changes(self) -> int:
        """Persist staged changes from every repository; returns affected row count."""
        return await self.context.save_changes()

    async def complete(self) -> None:
        """Persist staged changes without reporting a count."""
        await self.context.save_changes()

    async def close(self) -> None:
        """Dispose: roll back an uncommitted transaction and release the session."""
        await self.context.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
