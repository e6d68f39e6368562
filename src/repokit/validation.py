"""Optional pydantic validation of entities before they are written."""

from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from repokit.errors import EntityValidationError


def validate_entity(entity: Any, schema: Optional[type[BaseModel]]) -> None:
    """
    Validate an ORM entity against a pydantic schema.

    Attributes are read straight off the entity (from_attributes), so the
    schema only needs to declare the fields it wants to constrain.
    Does nothing when no schema is given.
    """
    if schema is None:
        return
    try:
        schema.model_validate(entity, from_attributes=True)
    except ValidationError as exc:
        raise EntityValidationError(
            f"{type(entity).__name__} failed validation: {exc.error_count()} error(s)",
            errors=exc.errors(include_url=False),
        ) from exc
