"""
User model for Finance4All data.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, HttpUrl


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(BaseModel):
    """
    Represents an application user.

    Identity lives in Firebase Authentication; this record links the
    Firebase UID to the user's financial data.
    """

    model_config = {"strict": True, "populate_by_name": True, "from_attributes": True}

    # Required fields
    id: str
    firebase_uid: str
    email: str
    role: UserRole

    # Profile
    display_name: Optional[str] = None
    photo_url: Optional[str] = None

    # Metadata
    created_at: datetime
    updated_at: datetime


class CreateUserInput(BaseModel):
    firebase_uid: str = Field(min_length=1)
    email: EmailStr
    display_name: Optional[str] = None
    photo_url: Optional[HttpUrl] = None


class UpdateUserInput(BaseModel):
    display_name: Optional[str] = None
    photo_url: Optional[HttpUrl] = None
