import asyncio
import logging
import socket
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from prometheus_client import Counter
from prometheus_client import Gauge
from sqlalchemy import event
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.config import settings
from app.core.custom_logging import log_execution
from app.core.custom_logging import logger
from app.core.errors import DatabaseUnavailableError
from app.models import Base

DB_CONNECTION_GAUGE = Gauge(
    "db_connection_pool",
    "Current connection pool status",
    ["state"],
    multiprocess_mode="liveall",
)

DB_CONNECTION_ERRORS = Counter(
    "db_connection_errors",
    "Database connection errors",
    ["type"],
)


class DatabaseHealth:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.engine = None
            cls._instance.sessionmaker = None
            cls._instance._lock = asyncio.Lock()
        return cls._instance

    def _create_engine(self) -> AsyncEngine:
        if not settings.is_postgres:
            return create_async_engine(settings.database_url, echo=settings.DEBUG)

        return create_async_engine(
            settings.database_url,
            echo=settings.DEBUG,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_pre_ping=True,
            pool_recycle=settings.DB_POOL_RECYCLE,
            connect_args={
                "server_settings": {"application_name": settings.APP_NAME},
                "timeout": settings.DB_CONNECT_TIMEOUT,
            },
        )

    @log_execution(level=logging.DEBUG)
    async def initialize(self):
        """Create the engine and tables, then check connectivity."""
        if settings.is_postgres:
            self._verify_connection_parameters()

        self.engine = self._create_engine()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.sessionmaker = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            autoflush=False,
            class_=AsyncSession,
        )

        self._setup_pool_monitoring(self.engine)
        await self.test_connection()

    @staticmethod
    def _verify_connection_parameters():
        """Resolve the database host before opening a pool."""
        url = make_url(settings.database_url)
        try:
            logger.info(f"Resolving database host: {url.host}")
            ip_addr = socket.gethostbyname(url.host)
        except (OSError, TypeError) as e:
            logger.critical(f"Database connection configuration error: {e}")
            raise
        logger.info(f"Database host resolved to: {ip_addr}:{url.port or 5432}")

    async def test_connection(self):
        """Test the database connection"""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.critical(f"Database connection test failed: {e}")
            raise
        logger.info("Database connection test successful")

    @staticmethod
    def _setup_pool_monitoring(engine: AsyncEngine):
        """Lightweight connection pool monitoring"""
        pool = engine.sync_engine.pool

        @event.listens_for(pool, "checkout")
        def on_checkout(dbapi_conn, connection_record, connection_proxy):
            DB_CONNECTION_GAUGE.labels("active").inc()

        @event.listens_for(pool, "checkin")
        def on_checkin(dbapi_conn, connection_record):
            DB_CONNECTION_GAUGE.labels("active").dec()

        @event.listens_for(pool, "connect")
        def on_connect(dbapi_conn, connection_record):
            DB_CONNECTION_GAUGE.labels("idle").inc()
            if settings.DEBUG:
                logger.debug("New connection created")

    async def ensure_initialized(self):
        """
        Initialize once, even when several requests arrive before startup
        finished. A failed attempt leaves nothing behind, so the next call
        tries again.

        Raises:
            DatabaseUnavailableError: If the engine or tables could not be set up.
        """
        if self.sessionmaker is not None:
            return
        async with self._lock:
            if self.sessionmaker is not None:
                return
            try:
                await self.initialize()
            except Exception as e:
                await self.dispose()
                DB_CONNECTION_ERRORS.labels(type(e).__name__).inc()
                raise DatabaseUnavailableError(str(e)) from e

    async def dispose(self):
        engine, self.engine, self.sessionmaker = self.engine, None, None
        if engine is not None:
            await engine.dispose()

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Safe session provider with built-in error handling"""
        await self.ensure_initialized()

        session = self.sessionmaker()
        try:
            yield session
        except Exception as e:
            await session.rollback()
            DB_CONNECTION_ERRORS.labels(type(e).__name__).inc()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            await session.close()


db_health = DatabaseHealth()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session"""
    async with db_health.get_session() as session:
        yield session
