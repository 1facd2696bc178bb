"""
CaseDesk Legal - Database Connection Lifecycle and Session Management

One ConnectionManager owns the process-wide engine. Stores never touch it
directly; they receive an AsyncSession from get_db().
"""

import asyncio
import enum
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from src.config import settings
from src.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)


# Base class for models
class Base(DeclarativeBase):
    pass


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConnectionManager:
    """
    Owns the shared database engine and its connection lifecycle.

    State machine: DISCONNECTED -> CONNECTING -> CONNECTED, back to
    DISCONNECTED when the backend reports a disconnect or when every
    connection attempt failed. Concurrent connect() calls share the
    attempt already in flight.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        server_selection_timeout: float = 5.0,
        socket_timeout: float = 45.0,
        max_attempts: int = 3,
        retry_delay: float = 0.5,
        echo: bool = False,
    ):
        self.url = url
        self.pool_size = pool_size
        self.server_selection_timeout = server_selection_timeout
        self.socket_timeout = socket_timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.echo = echo

        self.state = ConnectionState.DISCONNECTED
        self.attempts = 0
        self.engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None
        self._pending: Optional[asyncio.Task] = None

    @property
    def safe_url(self) -> str:
        """The connection URL with any password masked, for logs."""
        return make_url(self.url).render_as_string(hide_password=True)

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED and self.engine is not None

    async def connect(self) -> AsyncEngine:
        """Connect, or reuse the live connection or the attempt in flight."""
        if self.is_connected:
            return self.engine

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._connect_with_retry())
        else:
            logger.debug("Database connection attempt already in progress, waiting")

        # Shield so one cancelled caller does not abort the shared attempt
        return await asyncio.shield(self._pending)

    async def close(self) -> None:
        """Dispose of the engine and reset the connection state."""
        if self._pending is not None:
            try:
                await asyncio.shield(self._pending)
            except DatabaseConnectionError:
                pass

        if self.engine is not None:
            await self.engine.dispose()
        self.engine = None
        self._session_factory = None
        self.attempts = 0
        self._set_state(ConnectionState.DISCONNECTED)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session bound to the shared engine, connecting first if needed."""
        await self.connect()
        async with self._session_factory() as session:
            yield session

    async def create_all(self) -> None:
        """Create all tables registered on Base.metadata."""
        engine = await self.connect()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _connect_with_retry(self) -> AsyncEngine:
        self._set_state(ConnectionState.CONNECTING)
        try:
            while True:
                self.attempts += 1
                logger.info(
                    "Connecting to database %s (attempt %d/%d)",
                    self.safe_url, self.attempts, self.max_attempts,
                )
                try:
                    engine = await self._open()
                except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
                    logger.warning("Database connection attempt %d failed: %s", self.attempts, exc)
                    if self.attempts >= self.max_attempts:
                        break
                    await asyncio.sleep(self.retry_delay)
                    continue

                self.engine = engine
                self._session_factory = async_sessionmaker(
                    engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                )
                self.attempts = 0
                self._set_state(ConnectionState.CONNECTED)
                return engine

            attempts = self.attempts
            self.attempts = 0
            self._set_state(ConnectionState.DISCONNECTED)
            raise DatabaseConnectionError(
                "Failed to connect to the database after multiple attempts. "
                "Please ensure the database is running and accessible.",
                details=f"Gave up after {attempts} attempts",
            )
        finally:
            self._pending = None

    async def _open(self) -> AsyncEngine:
        """Create the engine (or reuse the existing one) and ping the backend."""
        engine = self.engine
        created = engine is None
        if created:
            engine = create_async_engine(self.url, **self._engine_options())
            event.listen(engine.sync_engine, "handle_error", self._on_engine_error)

        try:
            await asyncio.wait_for(self._ping(engine), timeout=self.server_selection_timeout)
        except BaseException:
            if created:
                await engine.dispose()
            raise
        return engine

    @staticmethod
    async def _ping(engine: AsyncEngine) -> None:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    def _engine_options(self) -> dict:
        url = make_url(self.url)
        options = {"echo": self.echo, "pool_pre_ping": True}

        if url.get_backend_name() == "sqlite":
            options["connect_args"] = {"timeout": self.socket_timeout}
            if not url.database or url.database == ":memory:":
                # A single shared connection keeps the in-memory database alive
                options["poolclass"] = StaticPool
            else:
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        else:
            options["pool_size"] = self.pool_size
            options["pool_timeout"] = self.socket_timeout
            if url.get_driver_name() == "asyncpg":
                options["connect_args"] = {"command_timeout": self.socket_timeout}
        return options

    def _on_engine_error(self, context) -> None:
        """Engine error hook: a disconnect moves the manager back to DISCONNECTED."""
        if context.is_disconnect and self.state is ConnectionState.CONNECTED:
            logger.warning("Database reported a disconnect")
            self._set_state(ConnectionState.DISCONNECTED)

    def _set_state(self, state: ConnectionState) -> None:
        # Log each transition once; repeated calls with the same state are silent
        if state is self.state:
            return
        logger.info("Database connection state: %s -> %s", self.state.value, state.value)
        self.state = state


# Shared connection manager built from settings
connection = ConnectionManager(
    settings.DATABASE_URL,
    pool_size=settings.DB_POOL_SIZE,
    server_selection_timeout=settings.DB_SERVER_SELECTION_TIMEOUT,
    socket_timeout=settings.DB_SOCKET_TIMEOUT,
    max_attempts=settings.DB_MAX_CONNECT_ATTEMPTS,
    retry_delay=settings.DB_RETRY_DELAY_SECONDS,
    echo=settings.DB_ECHO,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency that provides a database session."""
    async with connection.session() as session:
        yield session


async def init_db() -> None:
    """Connect and create all database tables."""
    # Import models to ensure they're registered with Base.metadata
    from src.models import Account, Case, Client, Document, Task  # noqa: F401

    await connection.connect()
    await connection.create_all()


async def close_db() -> None:
    """Close database connections."""
    await connection.close()
