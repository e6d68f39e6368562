"""Generic repository with CRUD and paginated search."""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Generic, Optional, TypeVar, Union

import structlog
from pydantic import BaseModel
from sqlalchemy.orm import Session

from repokit.backend import Criterion, Params, SQLAlchemyBackend, StorageBackend
from repokit.config import Settings, get_settings
from repokit.errors import InvalidArgumentError, NotFoundError, SchemaError
from repokit.pagination import PageDescriptor, get_limit, get_offset, paginate
from repokit.schema import FieldInfo, primary_key_of
from repokit.validation import validate_entity

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RepositoryConfig:
    """
    Immutable per-repository settings.

    Use the with_* builders to derive a changed copy; a repository never
    mutates its config.
    """
    page_size: int = 0
    validate: bool = True
    schema: Optional[type[BaseModel]] = None
    debug: bool = False

    def __post_init__(self) -> None:
        if self.page_size < 0:
            raise InvalidArgumentError(f"page_size must be >= 0, got {self.page_size}")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RepositoryConfig":
        settings = settings or get_settings()
        return cls(
            page_size=settings.default_page_size,
            validate=settings.validate_entities,
            debug=settings.debug,
        )

    def with_page_size(self, page_size: int) -> "RepositoryConfig":
        return replace(self, page_size=page_size)

    def with_schema(self, schema: Optional[type[BaseModel]]) -> "RepositoryConfig":
        return replace(self, schema=schema)

    def with_validation(self, validate: bool) -> "RepositoryConfig":
        return replace(self, validate=validate)

    def with_debug(self, debug: bool) -> "RepositoryConfig":
        return replace(self, debug=debug)


@dataclass
class SearchResult(Generic[T]):
    """One page of entities plus its page descriptor."""
    entities: list[T]
    descriptor: PageDescriptor
    criteria: tuple = field(default=(), repr=False)
    params: Params = field(default=None, repr=False)
    repository: Optional["Repository[T]"] = field(default=None, repr=False, compare=False)

    @property
    def total_count(self) -> int:
        return self.descriptor.total_count

    @property
    def page(self) -> int:
        return self.descriptor.page

    @property
    def page_size(self) -> int:
        return self.descriptor.page_size

    @property
    def total_pages(self) -> int:
        return self.descriptor.total_pages

    @property
    def has_next_page(self) -> bool:
        return self.descriptor.has_next_page

    @property
    def has_prev_page(self) -> bool:
        return self.descriptor.has_prev_page

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self):
        return iter(self.entities)

    def as_dict(self) -> dict[str, Any]:
        """JSON-ready shape; entities are converted with to_dict() when available."""
        return {
            "entities": [_entity_to_dict(e) for e in self.entities],
            "totalCount": self.total_count,
            "page": self.page,
            "pageSize": self.page_size,
            "totalPages": self.total_pages,
            "hasNextPage": self.has_next_page,
            "hasPrevPage": self.has_prev_page,
        }

    def next_page(self) -> "SearchResult[T]":
        """Fetch the following page with the same criteria and page size."""
        # page 0 already returned page 1's rows
        current = max(self.page, 1)
        limit = self.descriptor.limit
        if not self.has_next_page or limit < 0 or current * limit >= self.total_count:
            raise NotFoundError(f"no page after page {self.page}")
        return self._fetch(current + 1)

    def prev_page(self) -> "SearchResult[T]":
        """Fetch the preceding page with the same criteria and page size."""
        if not self.has_prev_page:
            raise NotFoundError(f"no page before page {self.page}")
        return self._fetch(self.page - 1)

    def _fetch(self, page: int) -> "SearchResult[T]":
        if self.repository is None:
            raise InvalidArgumentError("result is detached from its repository")
        return self.repository.search(
            page, *self.criteria, page_size=self.page_size, params=self.params
        )


def _entity_to_dict(entity: Any) -> Any:
    if hasattr(entity, "to_dict"):
        return entity.to_dict()
    if hasattr(entity, "__dataclass_fields__"):
        return asdict(entity)
    return entity


class Repository(Generic[T]):
    """
    Repository providing CRUD and paginated search for one entity type.

    Either pass the model explicitly or subclass and set `model`:

        class UserRepository(Repository[User]):
            model = User

        users = UserRepository(session)

    The primary key is resolved once here; SchemaError is raised when it
    cannot be.
    """

    model: type[T]

    def __init__(
        self,
        backend: Union[StorageBackend, Session],
        model: Optional[type[T]] = None,
        config: Optional[RepositoryConfig] = None,
    ):
        if isinstance(backend, Session):
            backend = SQLAlchemyBackend(backend)
        if model is not None:
            self.model = model
        if getattr(self, "model", None) is None:
            raise InvalidArgumentError("the model should not be None")

        self.backend = backend
        self.config = config or RepositoryConfig.from_settings()

        try:
            self._fields: list[FieldInfo] = list(backend.fields_of(self.model))
            pk = primary_key_of(self._fields, self.model)
        except SchemaError as exc:
            raise type(exc)(f"impossible to retrieve primary key: {exc}") from exc

        self.primary_key: str = pk.storage_name
        self._pk_attribute: str = pk.attribute

        logger.info(
            "repository_initialized",
            model=self.model.__name__,
            primary_key=self.primary_key,
            page_size=self.config.page_size,
        )

    # ── helpers ───────────────────────────────────────────────────────────

    def _column(self, attribute: str) -> Any:
        try:
            return getattr(self.model, attribute)
        except AttributeError as exc:
            raise InvalidArgumentError(
                f"{self.model.__name__} has no attribute {attribute!r}"
            ) from exc

    def _id_criterion(self, id: Any) -> Any:
        return self._column(self._pk_attribute) == id

    def _order_by(self) -> tuple:
        return (self._column(self._pk_attribute),)

    def _trace(self, event: str, **kw: Any) -> None:
        if self.config.debug:
            logger.debug(event, model=self.model.__name__, **kw)

    def _validate(self, entity: T) -> None:
        if self.config.validate:
            validate_entity(entity, self.config.schema)

    # ── write ─────────────────────────────────────────────────────────────

    def create(self, entity: Optional[T]) -> T:
        """Insert a new entity."""
        if entity is None:
            raise InvalidArgumentError("the entity should not be None")
        self._validate(entity)
        self._trace("create")
        return self.backend.create(entity)

    def update(self, entity: Optional[T]) -> T:
        """
        Save an entity by primary key (insert if it does not exist yet).

        Returns the persistent instance, which may differ from the argument
        when the argument was detached.
        """
        if entity is None:
            raise InvalidArgumentError("the entity should not be None")
        self._validate(entity)
        self._trace("update", id=getattr(entity, self._pk_attribute, None))
        return self.backend.save(entity)

    def delete_by_id(self, id: Any) -> None:
        """Delete the row with the given primary key."""
        if id is None:
            raise InvalidArgumentError("the id should not be None")
        self._trace("delete_by_id", id=id)
        affected = self.backend.delete(self.model, self._id_criterion(id))
        if affected == 0:
            raise NotFoundError(f"no {self.model.__name__} found with {self.primary_key}={id!r}")

    def delete(self, entity: Optional[T]) -> None:
        """Delete the row backing an entity, identified by its primary key."""
        if entity is None:
            raise InvalidArgumentError("the entity should not be None")
        id = getattr(entity, self._pk_attribute, None)
        if id is None:
            raise InvalidArgumentError(f"the entity has no {self.primary_key} value")
        self.delete_by_id(id)

    # ── read ──────────────────────────────────────────────────────────────

    def get(self, criteria: Union[T, Mapping[str, Any], None]) -> T:
        """
        First entity matching a filter.

        The filter is an example entity (its non-None columns are matched)
        or a mapping of attribute name to value.
        """
        if criteria is None:
            raise InvalidArgumentError("the filter should not be None")
        if isinstance(criteria, Mapping):
            items = list(criteria.items())
        elif isinstance(criteria, self.model):
            items = [
                (f.attribute, getattr(criteria, f.attribute))
                for f in self._fields
                if getattr(criteria, f.attribute, None) is not None
            ]
        else:
            raise InvalidArgumentError(
                f"filter must be a {self.model.__name__} or a mapping, got {type(criteria).__name__}"
            )

        clauses = [self._column(name) == value for name, value in items]
        self._trace("get", filter=dict(items))
        entity = self.backend.find_first(self.model, *clauses, order_by=self._order_by())
        if entity is None:
            raise NotFoundError(f"no {self.model.__name__} matches {dict(items)!r}")
        return entity

    def get_by_id(self, id: Any) -> T:
        """Entity with the given primary key."""
        if id is None:
            raise InvalidArgumentError("the id should not be None")
        self._trace("get_by_id", id=id)
        entity = self.backend.find_first(self.model, self._id_criterion(id))
        if entity is None:
            raise NotFoundError(f"no {self.model.__name__} found with {self.primary_key}={id!r}")
        return entity

    def exists(self, id: Any) -> bool:
        """Check if a record exists by primary key."""
        if id is None:
            raise InvalidArgumentError("the id should not be None")
        return self.backend.count(self.model, self._id_criterion(id)) > 0

    def count(self, *criteria: Criterion, params: Params = None) -> int:
        """Count rows matching criteria (all rows when none are given)."""
        return self.backend.count(self.model, *criteria, params=params)

    def search(
        self,
        page: int,
        *criteria: Criterion,
        page_size: Optional[int] = None,
        params: Params = None,
    ) -> SearchResult[T]:
        """
        One page of entities matching criteria, ordered by primary key.

        page is 1-based; page 0 disables the offset. page_size overrides
        the configured page size for this call only; 0 means no limit.
        The page and the total count are two separate reads.
        """
        size = self.config.page_size if page_size is None else page_size
        if page < 0 or size < 0:
            raise InvalidArgumentError(f"page and page_size must be >= 0, got {page}, {size}")

        offset = get_offset(page, size)
        limit = get_limit(size)
        self._trace("search", page=page, page_size=size, offset=offset, limit=limit)

        entities = self.backend.find_many(
            self.model,
            *criteria,
            offset=offset,
            limit=limit,
            order_by=self._order_by(),
            params=params,
        )
        total = self.backend.count(self.model, *criteria, params=params)

        return SearchResult(
            entities=entities,
            descriptor=paginate(page, size, total),
            criteria=criteria,
            params=params,
            repository=self,
        )

    def search_all(self, *criteria: Criterion, params: Params = None) -> list[T]:
        """Every entity matching criteria, unpaginated."""
        self._trace("search_all")
        return self.backend.find_many(
            self.model, *criteria, order_by=self._order_by(), params=params
        )
