"""
Pydantic schemas for location endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class LocationCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
