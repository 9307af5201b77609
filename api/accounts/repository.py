"""
Account persistence.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from core.db import Database
from core.store import ResourceKind, ResourceStore

from . import schemas, security


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def prepare_values(values: dict[str, Any]) -> dict[str, Any]:
    """
    Map account input onto columns: hash the password, normalize the email.
    """
    prepared = dict(values)
    password = prepared.pop("password", None)
    prepared["password_hash"] = security.hash_password(password) if password is not None else None
    if prepared.get("email") is not None:
        prepared["email"] = normalize_email(prepared["email"])
    return prepared


ACCOUNTS = ResourceKind(
    name="account",
    plural="accounts",
    table="accounts",
    id_type=UUID,
    fields=("first_name", "last_name", "email"),
    writable=("first_name", "last_name", "email", "password_hash"),
    entity=schemas.Account,
    unique=("email",),
    prepare=prepare_values,
)


def build_store(db: Database) -> ResourceStore[schemas.Account]:
    return ResourceStore(ACCOUNTS, db)
