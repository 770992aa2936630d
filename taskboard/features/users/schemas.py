"""Pydantic schemas for users."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    is_admin: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    is_admin: bool = False


class UserUpdate(BaseModel):
    """Full replacement of the editable fields; ``is_admin`` is optional."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    is_admin: bool | None = None
