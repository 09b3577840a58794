"""
Pydantic schemas for companionship endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CompanionshipCreateRequest(BaseModel):
    crop1: str = Field(..., min_length=1, max_length=64)
    crop2: str = Field(..., min_length=1, max_length=64)
    # -1 marks the pair as strictly incompatible.
    compatibility: float = Field(..., ge=-1)
