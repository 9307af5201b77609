"""
Poem persistence. Poems are keyed by a database sequence (bigint identity).
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from core.db import Database
from core.store import ResourceKind, ResourceStore

from . import schemas

BIGINT_MAX = 2**63 - 1

# Anything outside the column's range is rejected before it reaches asyncpg.
PoemId = Annotated[int, Field(ge=1, le=BIGINT_MAX)]

POEMS = ResourceKind(
    name="poem",
    plural="poems",
    table="poems",
    id_type=PoemId,
    fields=("content", "is_funny"),
    writable=("content", "is_funny"),
    entity=schemas.Poem,
)


def build_store(db: Database) -> ResourceStore[schemas.Poem]:
    return ResourceStore(POEMS, db)
