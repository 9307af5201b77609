"""
Poem schemas, including the generation request.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PoemCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    content: str = Field(..., min_length=1, max_length=2000)
    is_funny: bool = False


class PoemUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    content: str | None = Field(default=None, min_length=1, max_length=2000)
    is_funny: bool | None = None


class Poem(BaseModel):
    id: int
    content: str
    is_funny: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


class GeneratePoemRequest(BaseModel):
    """
    Arguments of `generate_poem`. Give either a stored prompt id or inline content.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    prompt_id: UUID | None = None
    content: str | None = Field(default=None, min_length=1, max_length=10000)
    max_tokens: int = Field(default=60, ge=1, le=1024)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    save: bool = False

    @model_validator(mode="after")
    def _one_source(self) -> GeneratePoemRequest:
        if (self.prompt_id is None) == (self.content is None):
            raise ValueError("Provide exactly one of prompt_id or content.")
        return self


class PoemDraftOut(BaseModel):
    text: str
    is_funny: bool


class GeneratedPoem(BaseModel):
    draft: PoemDraftOut
    poem: Poem | None = None
