"""
Input validation helpers.
"""

from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from finance4all.core.exceptions import InputValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_input(schema: Type[ModelT], data: Any) -> ModelT:
    """
    Validate raw operation input against a pydantic model.

    Raises:
        InputValidationError: With every failing field in one message
    """
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise InputValidationError.from_pydantic(e) from e


def validate_optional(schema: Type[ModelT], data: Any) -> Optional[ModelT]:
    return None if data is None else validate_input(schema, data)
