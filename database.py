"""
SQLAlchemy database connection and session management.

This module provides:
- Engine configuration (MS SQL Server by default, any SQLAlchemy URL via DATABASE_URL)
- Session factory for dependency injection
- Transaction context manager used by the service layer

Usage:
     from database import get_session, get_session_context

     # In FastAPI routes:
     @app.get("/items")
     def get_items(db: Session = Depends(get_session)):
          return db.query(Item).all()

     # In services:
     with get_session_context() as db:
          ...
"""
from contextlib import contextmanager
from typing import Callable, Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

import config
from logging_config import get_logger

logger = get_logger(__name__)


def _configure_sqlite(engine: Engine) -> None:
     """
     SQLite has no row-level locks and ignores SELECT ... FOR UPDATE.

     Every transaction is opened with BEGIN IMMEDIATE so writers are serialized
     at BEGIN, and foreign keys are switched on per connection.
     """

     @event.listens_for(engine, "connect")
     def _on_connect(dbapi_connection, connection_record):
          # Disable pysqlite's own BEGIN handling; we emit it in _on_begin
          dbapi_connection.isolation_level = None
          cursor = dbapi_connection.cursor()
          cursor.execute("PRAGMA foreign_keys=ON")
          cursor.close()

     @event.listens_for(engine, "begin")
     def _on_begin(conn):
          conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, echo: bool = False) -> Engine:
     """Create an engine for the given URL with dialect-specific setup."""
     if url.startswith("sqlite"):
          engine = create_engine(
               url,
               echo=echo,
               connect_args={"timeout": 30},  # seconds to wait on a locked database
          )
          _configure_sqlite(engine)
          return engine

     return create_engine(
          url,
          poolclass=QueuePool,
          pool_size=5,
          max_overflow=10,
          pool_timeout=30,
          pool_recycle=1800,  # Recycle connections after 30 minutes
          pool_pre_ping=True,
          echo=echo,
     )


def build_session_factory(bind: Engine) -> sessionmaker:
     return sessionmaker(
          bind=bind,
          autocommit=False,
          autoflush=False,
          expire_on_commit=False,
     )


engine = build_engine(config.DATABASE_URL, echo=config.SQL_ECHO)

# Session factory
SessionLocal = build_session_factory(engine)


def get_session() -> Generator[Session, None, None]:
     """
     FastAPI dependency that provides a database session.

     Commits when the route returns, rolls back if it raises.

     Yields:
          Session: SQLAlchemy database session
     """
     session = SessionLocal()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


@contextmanager
def get_session_context(
     session_factory: Optional[Callable[[], Session]] = None,
) -> Generator[Session, None, None]:
     """
     Context manager wrapping one unit of work in a single transaction.

     Commits on normal exit; any exception rolls back every write made inside
     the block (and releases row locks) before propagating.

     Usage:
          with get_session_context() as db:
               db.add(obj)

     Args:
          session_factory: Factory to open the session with (defaults to SessionLocal)

     Yields:
          Session: SQLAlchemy database session
     """
     factory = session_factory or SessionLocal
     session = factory()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


def init_db(bind: Optional[Engine] = None) -> None:
     """
     Initialize database tables.

     Creates all tables defined in the models if they don't exist.
     For production, use Alembic migrations instead.
     """
     from models import Base
     Base.metadata.create_all(bind=bind or engine)


def check_connection() -> bool:
     """
     Test database connectivity.

     Returns:
          bool: True if connection successful, False otherwise
     """
     try:
          with engine.connect() as conn:
               conn.execute(text("SELECT 1"))
          return True
     except Exception:
          logger.exception("Database connection failed")
          return False
