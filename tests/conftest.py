"""Shared fixtures — in-memory SQLite DB with all tables."""

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from repokit.config import get_settings
from repokit.database import reset_engine
from repokit.repository import Repository, RepositoryConfig
from tests.models import Base, Widget


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    eng: Engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session(engine: Engine) -> Generator[Session, None, None]:
    factory: sessionmaker[Session] = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    sess: Session = factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture()
def repo(session: Session) -> Repository[Widget]:
    return Repository(session, Widget, RepositoryConfig(page_size=10))


@pytest.fixture()
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear REPOKIT_* / DATABASE_URL env and cached settings/engine around a test."""
    import os

    for key in list(os.environ):
        if key.startswith("REPOKIT_") or key == "DATABASE_URL":
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    reset_engine()
    yield
    get_settings.cache_clear()
    reset_engine()


def create_widgets(repo: Repository[Widget], count: int, group: str) -> list[Widget]:
    """Insert count widgets tagged with group, in id order."""
    widgets: list[Widget] = []
    for n in range(count):
        name: str = f"{group}-{n:03d}"
        widgets.append(
            repo.create(Widget(name=name, email=f"{name}@email.com", group_name=group))
        )
    return widgets
