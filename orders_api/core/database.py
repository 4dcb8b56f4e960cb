"""
Database access (PostgreSQL through psycopg2 by default)

This module centralizes every way of reaching the record store:
- SQLAlchemy engine and session factory (ORM models in orders_api.models)
- FastAPI dependency yielding one session per request
- Connection check with retry logic, used by the health endpoint
"""
import logging
import time

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)


# ============================================================================
# SQLAlchemy Configuration
# ============================================================================

def build_engine(database_url: str, **kwargs) -> Engine:
    """
    Create an SQLAlchemy engine for the given URL

    Pool sizing only applies to server databases; SQLite (used by tests and
    local runs) gets foreign key enforcement and explicit BEGIN handling so
    that SAVEPOINTs behave as they do on PostgreSQL.
    """
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(database_url, **kwargs)
        event.listen(engine, "connect", _configure_sqlite_connection)
        event.listen(engine, "begin", _begin_sqlite_transaction)
        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connection before use
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        **kwargs
    )


def _configure_sqlite_connection(dbapi_connection, connection_record):
    # Let SQLAlchemy emit BEGIN itself (pysqlite defers it otherwise)
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_transaction(conn):
    conn.exec_driver_sql("BEGIN")


engine = build_engine(settings.DATABASE_URL)

# Session Factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base for ORM models
Base = declarative_base()


def get_db():
    """
    FastAPI dependency that yields an SQLAlchemy session

    Usage:
        @router.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """Create all tables that do not exist yet"""
    # Import models so they register on Base.metadata
    from orders_api import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


# ============================================================================
# Connection check with retry logic
# ============================================================================

def check_database_connection(max_retries=3, retry_delay=1.0, bind: Engine = None) -> float:
    """
    Run SELECT 1 against the database, retrying on connection failures

    Args:
        max_retries: Maximum number of connection attempts (default: 3)
        retry_delay: Initial delay between retries in seconds (default: 1.0)
        bind: Engine to check (defaults to the application engine)

    Returns:
        Latency of the successful query in milliseconds

    Raises:
        sqlalchemy.exc.OperationalError: If all retry attempts fail
    """
    target = bind or engine

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            start = time.time()
            with target.connect() as conn:
                conn.execute(text("SELECT 1"))
            latency_ms = round((time.time() - start) * 1000, 2)

            logger.debug(f"Database connection successful on attempt {attempt}")
            return latency_ms

        except OperationalError as e:
            logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {e}")

            # Don't retry on last attempt
            if attempt == max_retries:
                logger.error(f"All {max_retries} connection attempts failed")
                raise

            # Exponential backoff
            delay = retry_delay * (2 ** (attempt - 1))
            logger.info(f"Retrying in {delay:.2f} seconds...")
            time.sleep(delay)
