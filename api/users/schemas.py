"""
User API schemas.

Fields are deliberately loose here; `service.validate_new_user` reports every
problem at once as a field -> message mapping.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class UserCreateRequest(BaseModel):
    username: str = Field(default="", max_length=320)
    email: str = Field(default="", max_length=320)
    password: str = Field(default="", max_length=128)


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    created_at: datetime | None = None
