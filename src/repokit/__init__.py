"""Generic SQLAlchemy repository with CRUD and paginated search."""

from repokit.backend import SQLAlchemyBackend, StorageBackend
from repokit.errors import (
    BackendError,
    EntityValidationError,
    InvalidArgumentError,
    NoPrimaryKeyError,
    NotFoundError,
    RepositoryError,
    SchemaError,
    ShapeParseError,
)
from repokit.pagination import PageDescriptor, paginate
from repokit.repository import Repository, RepositoryConfig, SearchResult
from repokit.schema import FieldInfo, resolve_primary_key

__version__ = "0.1.0"

__all__ = [
    "BackendError",
    "EntityValidationError",
    "FieldInfo",
    "InvalidArgumentError",
    "NoPrimaryKeyError",
    "NotFoundError",
    "PageDescriptor",
    "Repository",
    "RepositoryConfig",
    "RepositoryError",
    "SQLAlchemyBackend",
    "SchemaError",
    "SearchResult",
    "ShapeParseError",
    "StorageBackend",
    "paginate",
    "resolve_primary_key",
]
