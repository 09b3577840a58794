"""
Pydantic schemas for bed endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class BedCreateRequest(BaseModel):
    location: str = Field(..., min_length=1, max_length=64)
    name: str = Field(default="", max_length=200)
    crops: list[str] = Field(default_factory=list, max_length=500)


class BedUpdateRequest(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    crops: list[str] | None = Field(default=None, max_length=500)
