"""Database connection and session management."""

from contextlib import contextmanager
from typing import Generator, Optional

import structlog
from sqlalchemy import MetaData, create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from repokit.config import get_settings

logger = structlog.get_logger(__name__)

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker[Session]] = None


def get_engine() -> Engine:
    """Get or create the database engine. Single shared instance."""
    global _engine

    if _engine is None:
        settings = get_settings()
        db = settings.database
        opts: dict = {"echo": settings.debug}

        if not db.is_sqlite():
            opts.update(
                pool_size=db.pool_size,
                pool_timeout=db.pool_timeout,
                pool_recycle=db.pool_recycle,
                pool_pre_ping=True,
            )
        else:
            path = db.sqlite_path()
            if path is None:
                # in-memory: every connection must see the same database
                opts.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
            else:
                path.parent.mkdir(parents=True, exist_ok=True)

        _engine = create_engine(db.url, **opts)
        logger.info("engine_created", database=db.db_info_for_logging())

        if db.is_sqlite():
            @event.listens_for(_engine, "connect")
            def _set_sqlite_pragma(dbapi_conn, connection_record):
                cur = dbapi_conn.cursor()
                cur.execute("PRAGMA foreign_keys=ON")
                cur.close()

    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory."""
    global _session_factory

    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Database session with commit/rollback."""
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_database(metadata: MetaData, engine: Optional[Engine] = None) -> list[str]:
    """
    Create every table in metadata that does not exist yet. Idempotent.

    Returns the names of the tables that were created.
    """
    if engine is None:
        engine = get_engine()
    before = set(inspect(engine).get_table_names())
    metadata.create_all(engine)
    after = set(inspect(engine).get_table_names())
    created = sorted(after - before)
    if created:
        logger.info("schema_init", created=created)
    else:
        logger.info("schema_init", created=[], detail="all tables present")
    return created


def reset_engine() -> None:
    """For testing: clear cached engine."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
