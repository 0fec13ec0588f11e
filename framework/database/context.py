"""
Persistence context: wraps one AsyncSession with save and transaction semantics.

Repositories borrow a DbContext; the UnitOfWork owns it.

``save_changes`` flushes staged inserts, updates and deletes and reports how
many rows they touched. Outside an explicit transaction it also commits, so a
single repository call is persisted on its own. Inside a transaction opened
with ``begin_transaction`` it only flushes; the transaction decides.

Explicit transactions and single repository writes each run in a SAVEPOINT.
Rolling one back undoes only what happened inside it; changes staged earlier
in the unit of work are flushed when the savepoint opens and survive.
"""

from contextlib import asynccontextmanager
from typing import Optional
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSessionTransaction
from sqlmodel.ext.asyncio.session import AsyncSession


class TransactionError(RuntimeError):
    """Transaction lifecycle misuse (nested begin, commit/rollback with none open)."""


class DbTransaction:
    """Handle for an explicit transaction; commit or roll back exactly once."""

    def __init__(self, context: "DbContext", savepoint: AsyncSessionTransaction, affected_at_begin: int):
        self._context = context
        self.savepoint = savepoint
        self.affected_at_begin = affected_at_begin
        self.is_active = True

    async def commit(self) -> None:
        self._ensure_active()
        await self._context.commit_transaction()

    async def rollback(self) -> None:
        self._ensure_active()
        await self._context.rollback_transaction()

    def _ensure_active(self) -> None:
        if not self.is_active:
            raise TransactionError("Transaction has already been completed")

    async def __aenter__(self) -> "DbTransaction":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        # Leaving the block without an explicit commit discards the changes
        if self.is_active:
            await self.rollback()


class DbContext:
    """Shared persistence session for all repositories of one unit of work."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._transaction: Optional[DbTransaction] = None
        self._affected = 0
        self._closed = False
        event.listen(self.session.sync_session, "after_flush", self._count_flushed)

    def _count_flushed(self, sync_session, flush_context) -> None:
        # new/dirty/deleted still hold the pre-flush state here
        modified = [obj for obj in sync_session.dirty if sync_session.is_modified(obj)]
        self._affected += len(sync_session.new) + len(sync_session.deleted) + len(modified)

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    async def _begin_savepoint(self) -> AsyncSessionTransaction:
        # begin_nested flushes earlier staged changes into the enclosing transaction
        try:
            return await self.session.begin_nested()
        except Exception:
            if self._transaction is None:
                await self._reset()
            raise

    @asynccontextmanager
    async def write_scope(self):
        """Savepoint around one repository write.

        The block stages the change; on exit it is flushed and the savepoint
        released. If staging or the flush fails, only this savepoint is rolled
        back: entities added inside it are expunged and other staged work in
        the session is kept.
        """
        savepoint = await self._begin_savepoint()
        affected_before = self._affected
        try:
            yield savepoint
            await self.session.flush()
            await savepoint.commit()
        except Exception:
            await savepoint.rollback()
            self._affected = affected_before
            raise

    async def save_changes(self) -> int:
        """Flush staged changes and return the number of affected rows."""
        try:
            await self.session.flush()
            affected = self._affected
            if self._transaction is None:
                await self.session.commit()
        except Exception:
            # Nothing narrower to undo: the whole pending unit failed together
            if self._transaction is None:
                await self._reset()
            raise
        self._affected = 0
        return affected

    async def begin_transaction(self) -> DbTransaction:
        if self._transaction is not None:
            raise TransactionError("A transaction is already open on this context")
        savepoint = await self._begin_savepoint()
        self._transaction = DbTransaction(self, savepoint, self._affected)
        return self._transaction

    async def commit_transaction(self) -> None:
        transaction = self._require_transaction("commit")
        try:
            try:
                await transaction.savepoint.commit()
            except Exception:
                # A failed flush left the savepoint unusable; discard it
                await transaction.savepoint.rollback()
                self._affected = transaction.affected_at_begin
                raise
        finally:
            transaction.is_active = False
            self._transaction = None
        try:
            await self.session.commit()
        except Exception:
            await self._reset()
            raise
        self._affected = 0

    async def rollback_transaction(self) -> None:
        transaction = self._require_transaction("roll back")
        try:
            await transaction.savepoint.rollback()
            self._affected = transaction.affected_at_begin
        finally:
            transaction.is_active = False
            self._transaction = None

    def _require_transaction(self, action: str) -> DbTransaction:
        if self._transaction is None:
            raise TransactionError(f"Cannot {action}: no transaction is open")
        return self._transaction

    async def _reset(self) -> None:
        await self.session.rollback()
        self._affected = 0

    async def close(self) -> None:
        """Roll back an open transaction and release the session."""
        if self._closed:
            return
        self._closed = True
        try:
            if self._transaction is not None:
                await self.rollback_transaction()
        finally:
            event.remove(self.session.sync_session, "after_flush", self._count_flushed)
            await self.session.close()
