import asyncio
import enum
import logging
from contextlib import contextmanager, suppress
from typing import Iterator, Optional, Union

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import SQLModel, create_engine

from .config import (
    DATABASE_URL,
    DB_HOST,
    DB_INIT_RETRY_SECONDS,
    DB_NAME,
    DB_PASSWORD,
    DB_POOL_SIZE,
    DB_PORT,
    DB_USER,
)

# Import all models to ensure they are registered with SQLModel metadata
from .models import Task  # noqa: F401

logger = logging.getLogger(__name__)


def build_database_url() -> URL:
    """Resolve the store URL from ``DATABASE_URL`` or the ``DB_*`` settings."""
    if DATABASE_URL:
        return make_url(DATABASE_URL)
    return URL.create(
        "mysql+pymysql",
        username=DB_USER,
        password=DB_PASSWORD,
        host=DB_HOST,
        port=DB_PORT,
        database=DB_NAME,
    )


def _create_engine(url: URL, pool_size: int) -> Engine:
    if url.get_backend_name() == "sqlite":
        if not url.database or url.database == ":memory:":
            # A single shared connection keeps the in-memory database alive.
            return create_engine(
                url,
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    # Bounded pool: once pool_size connections are checked out, callers wait
    # for one to be returned, with no overflow and no checkout timeout.
    return create_engine(
        url,
        echo=False,
        pool_size=pool_size,
        max_overflow=0,
        pool_timeout=None,
        pool_pre_ping=True,
    )


class Database:
    """Pooled handle on the task store.

    One instance is created per application and handed to request handlers
    through :func:`get_db`. Sessions are scoped with :meth:`session` and
    always returned to the pool, including when the handler raises.
    """

    def __init__(self, url: Union[str, URL], pool_size: int = DB_POOL_SIZE):
        self.url = make_url(url)
        self.engine = _create_engine(self.url, pool_size)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Get a database session (context manager style).

        Usage:
            with database.session() as session:
                # do something with session
        """
        session = self._session_factory()
        try:
            yield session
        finally:
            session.close()

    def create_database(self) -> None:
        """Create the target database on the server if it does not exist.

        Backends without a database namespace (SQLite) are skipped.
        """
        name = self.url.database
        if self.url.get_backend_name() == "sqlite" or not name:
            return

        server_engine = create_engine(self.url.set(database=None), poolclass=NullPool)
        try:
            quoted = server_engine.dialect.identifier_preparer.quote_identifier(name)
            with server_engine.connect() as conn:
                conn.execute(text(f"CREATE DATABASE IF NOT EXISTS {quoted}"))
                conn.commit()
        finally:
            server_engine.dispose()

    def create_tables(self) -> None:
        """Create all database tables."""
        SQLModel.metadata.create_all(bind=self.engine)

    def initialize(self) -> None:
        self.create_database()
        self.create_tables()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """Dependency to get database session."""
    database: Database = request.app.state.database
    with database.session() as session:
        yield session


class InitState(str, enum.Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class SchemaInitializer:
    """Background task that brings the schema up, retrying until it succeeds.

    The HTTP server does not wait for it. Requests made before the first
    successful attempt fail with store errors.
    """

    def __init__(self, database: Database, retry_seconds: float = DB_INIT_RETRY_SECONDS):
        self._database = database
        self._retry_seconds = retry_seconds
        self._task: Optional[asyncio.Task] = None
        self.state = InitState.PENDING
        self.attempts = 0
        self.last_error: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.state is InitState.READY

    def snapshot(self) -> dict:
        return {
            "state": self.state.value,
            "attempts": self.attempts,
            "last_error": self.last_error,
        }

    async def run(self) -> None:
        while True:
            self.attempts += 1
            try:
                await asyncio.to_thread(self._database.initialize)
            except Exception as exc:
                self.state = InitState.FAILED
                self.last_error = str(exc)
                logger.error(
                    "Error initializing database (attempt %d), retrying in %.1fs: %s",
                    self.attempts,
                    self._retry_seconds,
                    exc,
                )
                await asyncio.sleep(self._retry_seconds)
            else:
                self.state = InitState.READY
                self.last_error = None
                logger.info("Database and tables initialized successfully")
                return

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.get_running_loop().create_task(self.run(), name="schema-initializer")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
