"""Storage backend capability set and its SQLAlchemy implementation."""

from collections.abc import Mapping, Sequence
from typing import Any, Optional, Protocol, TypeVar, Union

import structlog
from sqlalchemy import delete as sa_delete
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement, TextClause

from repokit.errors import BackendError
from repokit.schema import FieldInfo, mapped_fields

logger = structlog.get_logger(__name__)

E = TypeVar("E")

Criterion = Union[ColumnElement[bool], TextClause, str]
Params = Optional[Mapping[str, Any]]


class StorageBackend(Protocol):
    """
    Primitives a repository needs from its storage.

    Criteria are SQLAlchemy column expressions or raw SQL strings whose
    named parameters are bound from `params`. A negative offset or limit
    means the bound is not applied.
    """

    def create(self, entity: E) -> E: ...

    def save(self, entity: E) -> E: ...

    def find_first(
        self,
        entity_type: type[E],
        *criteria: Criterion,
        order_by: Sequence[Any] = (),
        params: Params = None,
    ) -> Optional[E]: ...

    def find_many(
        self,
        entity_type: type[E],
        *criteria: Criterion,
        offset: int = -1,
        limit: int = -1,
        order_by: Sequence[Any] = (),
        params: Params = None,
    ) -> list[E]: ...

    def count(self, entity_type: type, *criteria: Criterion, params: Params = None) -> int: ...

    def delete(self, entity_type: type, *criteria: Criterion, params: Params = None) -> int: ...

    def fields_of(self, entity_type: type) -> list[FieldInfo]: ...


def to_clauses(criteria: Sequence[Criterion]) -> list[Any]:
    """Wrap raw SQL strings in text(); pass expressions through."""
    return [text(c) if isinstance(c, str) else c for c in criteria]


def _bind(params: Params) -> Optional[dict[str, Any]]:
    return dict(params) if params else None


class SQLAlchemyBackend:
    """
    StorageBackend over a SQLAlchemy Session.

    Writes are flushed but never committed: the transaction belongs to
    whoever owns the session (see repokit.database.get_session).
    """

    def __init__(self, session: Session):
        self.session = session

    def _fail(self, operation: str, exc: SQLAlchemyError) -> BackendError:
        logger.warning("backend_error", operation=operation, error=str(exc))
        return BackendError(str(exc), original=exc)

    def create(self, entity: E) -> E:
        try:
            self.session.add(entity)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise self._fail("create", exc) from exc
        return entity

    def save(self, entity: E) -> E:
        """Insert or update by primary key."""
        try:
            merged = self.session.merge(entity)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise self._fail("save", exc) from exc
        return merged

    def find_first(
        self,
        entity_type: type[E],
        *criteria: Criterion,
        order_by: Sequence[Any] = (),
        params: Params = None,
    ) -> Optional[E]:
        stmt = select(entity_type).where(*to_clauses(criteria)).order_by(*order_by).limit(1)
        try:
            return self.session.scalars(stmt, _bind(params)).first()
        except SQLAlchemyError as exc:
            raise self._fail("find_first", exc) from exc

    def find_many(
        self,
        entity_type: type[E],
        *criteria: Criterion,
        offset: int = -1,
        limit: int = -1,
        order_by: Sequence[Any] = (),
        params: Params = None,
    ) -> list[E]:
        stmt = select(entity_type).where(*to_clauses(criteria)).order_by(*order_by)
        if offset >= 0:
            stmt = stmt.offset(offset)
        if limit >= 0:
            stmt = stmt.limit(limit)
        try:
            return list(self.session.scalars(stmt, _bind(params)).all())
        except SQLAlchemyError as exc:
            raise self._fail("find_many", exc) from exc

    def count(self, entity_type: type, *criteria: Criterion, params: Params = None) -> int:
        stmt = select(func.count()).select_from(entity_type).where(*to_clauses(criteria))
        try:
            return self.session.scalar(stmt, _bind(params)) or 0
        except SQLAlchemyError as exc:
            raise self._fail("count", exc) from exc

    def delete(self, entity_type: type, *criteria: Criterion, params: Params = None) -> int:
        """Delete matching rows; returns rows affected."""
        stmt = sa_delete(entity_type).where(*to_clauses(criteria))
        try:
            result = self.session.execute(stmt, _bind(params))
            self.session.flush()
        except SQLAlchemyError as exc:
            raise self._fail("delete", exc) from exc
        return result.rowcount or 0

    def fields_of(self, entity_type: type) -> list[FieldInfo]:
        return mapped_fields(entity_type)
