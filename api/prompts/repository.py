"""
Prompt persistence.
"""

from __future__ import annotations

from uuid import UUID

from core.db import Database
from core.store import ResourceKind, ResourceStore

from . import schemas

PROMPTS = ResourceKind(
    name="prompt",
    plural="prompts",
    table="prompts",
    id_type=UUID,
    fields=("title", "content"),
    writable=("title", "content"),
    entity=schemas.Prompt,
)


def build_store(db: Database) -> ResourceStore[schemas.Prompt]:
    return ResourceStore(PROMPTS, db)
