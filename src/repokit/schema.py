"""Entity shape introspection and primary key resolution."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Mapper

from repokit.errors import NoPrimaryKeyError, ShapeParseError

if TYPE_CHECKING:
    from repokit.backend import StorageBackend


@dataclass(frozen=True)
class FieldInfo:
    """One mapped column of an entity type."""
    attribute: str
    storage_name: str
    is_primary_key: bool = False


def mapped_fields(entity_type: Any) -> list[FieldInfo]:
    """
    List the column attributes of a SQLAlchemy-mapped class.

    Fields come back in declaration order. Raises ShapeParseError when
    entity_type is not a mapped class.
    """
    if not isinstance(entity_type, type):
        raise ShapeParseError(f"expected a mapped class, got {entity_type!r}")
    try:
        mapper = inspect(entity_type)
    except NoInspectionAvailable as exc:
        raise ShapeParseError(
            f"data struct parse error: {entity_type.__name__} is not mapped"
        ) from exc
    if not isinstance(mapper, Mapper):
        raise ShapeParseError(f"data struct parse error: {entity_type.__name__} is not mapped")

    fields = []
    for prop in mapper.column_attrs:
        column = prop.columns[0]
        fields.append(
            FieldInfo(
                attribute=prop.key,
                storage_name=column.name,
                is_primary_key=bool(getattr(column, "primary_key", False)),
            )
        )
    return fields


def primary_key_of(fields: Sequence[FieldInfo], entity_type: Any) -> FieldInfo:
    """First field flagged as primary key; composite keys are not supported."""
    for field in fields:
        if field.is_primary_key:
            return field
    name = getattr(entity_type, "__name__", repr(entity_type))
    raise NoPrimaryKeyError(f"no primary key found for {name}")


def find_primary_key(backend: "StorageBackend", entity_type: Any) -> FieldInfo:
    return primary_key_of(backend.fields_of(entity_type), entity_type)


def resolve_primary_key(backend: "StorageBackend", entity_type: Any) -> str:
    """Storage-level column name of the entity's primary key."""
    return find_primary_key(backend, entity_type).storage_name
