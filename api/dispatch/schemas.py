"""
Dispatcher request schemas.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

MAX_BATCH_SIZE = 50


class OperationCall(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    arguments: dict[str, Any] = Field(default_factory=dict)
    # Lets a batch call the same operation twice and tell the results apart.
    alias: str | None = Field(default=None, min_length=1, max_length=100)


class BatchRequest(BaseModel):
    operations: list[OperationCall] = Field(..., min_length=1, max_length=MAX_BATCH_SIZE)
