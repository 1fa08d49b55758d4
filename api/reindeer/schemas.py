"""
Pydantic schemas for reindeer endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from core.schema import INT4_MAX


class ReindeerRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int | None = Field(default=None, ge=1, le=INT4_MAX)
    name: str = Field(..., min_length=1, max_length=200)
