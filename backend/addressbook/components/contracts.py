"""
Contract models for the contact components.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import (BaseModel, ConfigDict, EmailStr, Field, StrictBool,
                      StrictStr)

PHONE_PATTERN = r"^[0-9]+$"

# Column sizes of the contacts table
NAME_MAX_LENGTH = 255
PHONE_MAX_LENGTH = 64


class ContactPayload(BaseModel):
    """Schema of a contact as submitted on create and full update"""
    model_config = ConfigDict(extra="ignore")

    name: StrictStr = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    phone: StrictStr = Field(..., max_length=PHONE_MAX_LENGTH, pattern=PHONE_PATTERN)
    favorite: StrictBool = False


class FieldError(BaseModel):
    field: str
    code: str
    message: str


class ContactValidation(BaseModel):
    value: Optional[Dict[str, Any]] = None
    errors: List[FieldError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def first_message(self) -> Optional[str]:
        return self.errors[0].message if self.errors else None


class ContactFilter(BaseModel):
    """Predicate handed to the repository's list operation"""
    owner_id: UUID
    favorite: Optional[bool] = None


class ListQuery(BaseModel):
    filter: ContactFilter
    skip: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
