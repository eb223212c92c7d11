"""
Database Connection Management for the Watchlist Sync store

This module provides:
- Environment/config based connection settings
- Engine creation with retry on transient connection failures (tenacity)
- A session provider with a transactional session scope
  (commit on success, rollback on any exception, always close)
- Helpers for tests (pre-built engine injection)

Uses SQLAlchemy 2.0 style with proper typing support.
"""

import os
import logging
from typing import Generator, Optional, Callable, Dict, Any
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy import create_engine, event, text, Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError, OperationalError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)

from config_manager import DatabaseConfig
from database.models import Base

logger = logging.getLogger(__name__)


# ============================================
# CONFIGURATION
# ============================================

@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    host: str = "localhost"
    port: int = 5432
    database: str = "sdn_database"
    user: str = "sdn_user"
    password: str = "sdn_password"
    url: Optional[str] = None
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    echo: bool = False

    @classmethod
    def from_env(cls) -> 'DatabaseSettings':
        """Create settings from environment variables."""
        return cls(
            host=os.getenv("DB_HOST", "localhost"),
            port=int(os.getenv("DB_PORT", "5432")),
            database=os.getenv("DB_NAME", "sdn_database"),
            user=os.getenv("DB_USER", "sdn_user"),
            password=os.getenv("DB_PASSWORD", "sdn_password"),
            pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
            pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
            pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "1800")),
            echo=os.getenv("DB_ECHO", "false").lower() == "true"
        )

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> 'DatabaseSettings':
        """Create settings from the config.yaml database section.

        DB_* environment variables override the file values.
        """
        return cls(
            host=os.getenv("DB_HOST", config.host),
            port=int(os.getenv("DB_PORT", str(config.port))),
            database=os.getenv("DB_NAME", config.name),
            user=os.getenv("DB_USER", config.user),
            password=os.getenv("DB_PASSWORD", config.password),
            url=config.url,
            pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
            echo=os.getenv("DB_ECHO", "false").lower() == "true"
        )

    def get_url(self) -> str:
        """Build database URL."""
        # A full URL wins over the individual parts
        full_url = os.getenv("DATABASE_URL") or self.url
        if full_url:
            return full_url
        return f"postgresql+psycopg2://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"

    def get_pool_settings(self) -> Dict[str, Any]:
        """Pool arguments for create_engine (thread-sharing connect_args only for SQLite)."""
        if self.get_url().startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_timeout": self.pool_timeout,
            "pool_recycle": self.pool_recycle,
            "pool_pre_ping": True,
        }


# ============================================
# RETRY LOGIC
# ============================================

def create_retry_decorator(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10
) -> Callable:
    """
    Create a retry decorator for database operations.

    Args:
        max_attempts: Maximum number of retry attempts
        min_wait: Minimum wait time between retries (seconds)
        max_wait: Maximum wait time between retries (seconds)

    Returns:
        Retry decorator
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(OperationalError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )


# Create default retry decorator
db_retry = create_retry_decorator()


# ============================================
# DATABASE SESSION PROVIDER
# ============================================

class DatabaseSessionProvider:
    """
    Provides database sessions and transactional scopes.

    Usage:
        provider = DatabaseSessionProvider(settings)
        provider.init()

        with provider.session_scope() as session:
            session.add(entity)
            # Auto-commits on exit, rollbacks on exception
    """

    def __init__(
        self,
        settings: Optional[DatabaseSettings] = None,
        engine: Optional[Engine] = None
    ):
        """
        Initialize the database session provider.

        Args:
            settings: Database settings (uses env if not provided)
            engine: Pre-created engine (for testing)
        """
        self._settings = settings or DatabaseSettings.from_env()
        self._engine = engine
        self._session_factory: Optional[sessionmaker] = None
        self._initialized = False

    def init(self, echo: Optional[bool] = None) -> None:
        """
        Initialize database engine and session factory.

        Args:
            echo: Override echo setting for SQL logging
        """
        if self._initialized:
            return

        if echo is not None:
            self._settings.echo = echo

        if self._engine is None:
            self._engine = self._create_engine_with_retry()

        self._session_factory = sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False
        )

        self._setup_event_listeners()

        self._initialized = True
        logger.info("Database session provider initialized")

    @db_retry
    def _create_engine_with_retry(self) -> Engine:
        """Create database engine with retry logic."""
        url = self._settings.get_url()

        engine = create_engine(
            url,
            echo=self._settings.echo,
            **self._settings.get_pool_settings()
        )

        # Verify connection
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        return engine

    def _setup_event_listeners(self) -> None:
        """Set up SQLAlchemy event listeners for debugging."""

        @event.listens_for(self._engine, "connect")
        def on_connect(dbapi_connection, connection_record):
            logger.debug("New database connection established")

        @event.listens_for(self._engine, "checkin")
        def on_checkin(dbapi_connection, connection_record):
            logger.debug("Connection returned to pool")

    @property
    def engine(self) -> Engine:
        """Get the SQLAlchemy engine."""
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._engine

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Context manager for session with auto-commit/rollback.

        Usage:
            with provider.session_scope() as session:
                session.add(entity)
                # Auto-commits on exit, rollbacks on exception
        """
        if self._session_factory is None:
            self.init()

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_tables(self) -> None:
        """Create all database tables."""
        if self._engine is None:
            self.init()
        Base.metadata.create_all(self._engine)
        logger.info("Database tables created")

    def health_check(self) -> bool:
        """
        Check if database connection is healthy.

        Returns:
            True if connection is healthy, False otherwise
        """
        try:
            with self.session_scope() as session:
                session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return False

    def close(self) -> None:
        """Close database connections and clean up."""
        if self._engine:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._initialized = False


# ============================================
# GLOBAL PROVIDER INSTANCE
# ============================================

_db_provider: Optional[DatabaseSessionProvider] = None


def get_db_provider(settings: Optional[DatabaseSettings] = None) -> DatabaseSessionProvider:
    """
    Get the global database provider instance.

    Args:
        settings: Settings used when the provider is first created

    Returns:
        DatabaseSessionProvider instance
    """
    global _db_provider
    if _db_provider is None:
        _db_provider = DatabaseSessionProvider(settings=settings)
    return _db_provider


def init_db(settings: Optional[DatabaseSettings] = None, echo: bool = False) -> DatabaseSessionProvider:
    """
    Initialize the global database provider.

    Call this during application startup.

    Args:
        settings: Connection settings (environment if omitted)
        echo: If True, log all SQL statements

    Returns:
        DatabaseSessionProvider instance
    """
    provider = get_db_provider(settings)
    provider.init(echo=echo)
    return provider


def close_db() -> None:
    """
    Close the global database provider.

    Call this during application shutdown.
    """
    global _db_provider
    if _db_provider:
        _db_provider.close()
        _db_provider = None


# ============================================
# PYTEST FIXTURES SUPPORT
# ============================================

def create_test_provider(
    engine: Optional[Engine] = None,
    settings: Optional[DatabaseSettings] = None
) -> DatabaseSessionProvider:
    """
    Create a database provider for testing.

    Args:
        engine: Pre-created engine (e.g., SQLite for unit tests)
        settings: Custom settings for testing

    Returns:
        DatabaseSessionProvider configured for testing
    """
    provider = DatabaseSessionProvider(
        settings=settings,
        engine=engine
    )
    return provider
