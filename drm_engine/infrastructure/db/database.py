"""
Database connection management.

Supports:
  - SQLite (local dev and tests, no setup)
  - PostgreSQL (production)

Connection string comes from settings.database_url (DATABASE_URL env var).
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from drm_engine.config.settings import get_settings
from drm_engine.core.errors import PersistenceError
from drm_engine.infrastructure.db.models import Base

logger = logging.getLogger(__name__)


def get_database_url() -> str:
    return get_settings().database_url


def create_db_engine(url: str = None):
    """Create SQLAlchemy engine."""
    db_url = url or get_database_url()

    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}, "echo": False}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        engine = create_engine(db_url, **kwargs)
    else:
        # PostgreSQL
        engine = create_engine(
            db_url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
            echo=False,
        )

    return engine


def describe_url(db_url: str) -> str:
    """URL without credentials, for logs."""
    return db_url.split("@")[-1] if "@" in db_url else db_url


class Database:
    """Engine + session factory. One instance per database."""

    def __init__(self, url: str = None, engine=None):
        self.url = url or get_database_url()
        self.engine = engine or create_db_engine(self.url)
        self._factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @property
    def kind(self) -> str:
        return "PostgreSQL" if self.engine.dialect.name == "postgresql" else self.engine.dialect.name

    def init_db(self):
        """Create all tables. Safe to call multiple times."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.error(f"Database initialization failed: {e}")
            raise PersistenceError("storage unavailable") from e
        logger.info(f"Database initialized: {describe_url(self.url)}")

    @contextmanager
    def session(self) -> Session:
        """
        Transactional scope: commit on success, rollback on error.

        SQLAlchemy errors surface as PersistenceError so callers can tell a
        storage failure from a policy denial.
        """
        db = self._factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database operation failed: {e}")
            raise PersistenceError("storage unavailable") from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


# ── Global database ──
_database = None


def get_database() -> Database:
    """Get or create the global database."""
    global _database
    if _database is None:
        _database = Database()
    return _database


def init_db():
    """Create all tables on the global database."""
    get_database().init_db()
