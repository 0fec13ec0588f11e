from sqlmodel import SQLModel
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from .base import BaseDatabaseDriver


def enable_sqlite_savepoints(engine: AsyncEngine) -> AsyncEngine:
    """Let SQLAlchemy own BEGIN on SQLite so SAVEPOINTs nest inside it.

    The sqlite3 driver otherwise defers BEGIN to the first DML statement,
    which breaks begin_nested().
    """
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


class SQLDriver(BaseDatabaseDriver):
    """Async SQLAlchemy engine plus an AsyncSession factory for one database URL."""

    def __init__(self, url: str, echo: bool = False, **engine_kwargs):
        self.url = url
        self.engine = create_async_engine(url, echo=echo, future=True, **engine_kwargs)
        if self.engine.dialect.name == "sqlite":
            enable_sqlite_savepoints(self.engine)
        self.session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def connect(self):
        """Verify the database is reachable (the engine manages connections)."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

    async def disconnect(self):
        """Dispose the engine and its connections."""
        await self.engine.dispose()

    async def create_all(self):
        """Create tables for every registered SQLModel table model."""
        # Register models in metadata before create_all
        import apps.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def get_session(self):
        async with self.session_factory() as session:
            yield session
