"""
Pydantic schemas for child endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from core.schema import INT4_MAX


class ChildRequest(BaseModel):
    """
    Full child record. `id` is optional on create and required on replace.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: int | None = Field(default=None, ge=1, le=INT4_MAX)
    name: str = Field(..., min_length=1, max_length=200)
    delivered: int = Field(default=0, ge=0, le=1)


class ChildToyRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    child_name: str = Field(..., min_length=1, max_length=200)
    toy_name: str = Field(..., min_length=1, max_length=200)
