from typing import Callable, TypeVar
import logging

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

T = TypeVar("T")

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

def create_db_engine(database_url: str) -> Engine:
    """Create an engine, turning on foreign key enforcement for SQLite."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url:
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(database_url, pool_pre_ping=True)

class Database:
    """Connection handle owned by the process entry point."""

    def __init__(self, database_url: str = None, engine: Engine = None):
        if engine is None and database_url is None:
            raise ValueError("Either database_url or engine is required")
        self.engine = engine or create_db_engine(database_url)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self):
        from models import Base
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self):
        self.engine.dispose()

def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()

def commit_with_retry(db: Session, apply: Callable[[], T]) -> T:
    """Run ``apply`` and commit, running both once more on a transient storage error.

    ``apply`` must only stage changes on ``db``; it is re-run from scratch after
    the rollback, so it should not depend on state from the failed attempt.
    """
    try:
        result = apply()
        db.commit()
        return result
    except OperationalError as e:
        db.rollback()
        logger.warning(f"Transient storage error, retrying once: {e.orig}")

    result = apply()
    db.commit()
    return result
