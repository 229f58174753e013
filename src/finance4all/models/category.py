"""
Category model for Finance4All data.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from finance4all.models.common import UUIDStr, reject_nulls

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CategoryType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Category(BaseModel):
    """
    Represents an income or expense category.

    Categories can be hierarchical with parent-child relationships.
    """

    model_config = {"strict": True, "populate_by_name": True, "from_attributes": True}

    # Required fields
    id: str
    user_id: str
    name: str
    type: CategoryType
    is_default: bool = False

    # Optional fields
    parent_id: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None

    # Metadata
    created_at: datetime
    updated_at: datetime


class CreateCategoryInput(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    type: CategoryType
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: Optional[str] = Field(default=None, max_length=50)
    parent_id: Optional[UUIDStr] = None


class UpdateCategoryInput(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    type: Optional[CategoryType] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: Optional[str] = Field(default=None, max_length=50)
    parent_id: Optional[UUIDStr] = None

    @model_validator(mode="after")
    def check_required_not_null(self) -> "UpdateCategoryInput":
        reject_nulls(self, "name", "type")
        return self
