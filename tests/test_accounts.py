"""Tests for account schemas and password handling."""

from __future__ import annotations

import bcrypt
import pytest
from pydantic import ValidationError

from accounts.repository import normalize_email, prepare_values
from accounts.schemas import AccountCreate, AccountUpdate
from accounts.security import PasswordError, hash_password


def matches(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def test_account_create_strips_whitespace():
    account = AccountCreate(first_name="  Ada ", last_name="Lovelace", email=" ada@example.com ", password="analytical")

    assert account.first_name == "Ada"
    assert account.email == "ada@example.com"


@pytest.mark.parametrize(
    "overrides",
    [
        {"email": "no-at-sign"},
        {"email": "@example.com"},
        {"password": "short"},
        {"password": "x" * 73},
        {"first_name": ""},
        {"nickname": "extra"},
    ],
)
def test_account_create_rejects_bad_input(overrides):
    data = {"first_name": "A", "last_name": "B", "email": "a@b.io", "password": "password1", **overrides}
    with pytest.raises(ValidationError):
        AccountCreate(**data)


def test_account_update_fields_are_optional():
    update = AccountUpdate(last_name="New")
    assert update.model_dump() == {"first_name": None, "last_name": "New", "email": None, "password": None}


def test_prepare_values_hashes_password_and_lowercases_email():
    values = prepare_values({"first_name": "A", "email": "Mixed@Case.IO", "password": "password1"})

    assert "password" not in values
    assert values["email"] == "mixed@case.io"
    assert matches("password1", values["password_hash"])


def test_prepare_values_without_password_leaves_hash_unset():
    values = prepare_values({"first_name": "A", "email": None, "password": None})

    assert values["password_hash"] is None
    assert values["email"] is None


def test_normalize_email():
    assert normalize_email("  Foo@Bar.COM ") == "foo@bar.com"


def test_hash_password_is_salted_bcrypt():
    first = hash_password("password1")
    second = hash_password("password1")

    assert first != second
    assert first.startswith("$2b$")
    assert matches("password1", first)
    assert not matches("password2", first)


def test_hash_password_rejects_empty():
    with pytest.raises(PasswordError):
        hash_password("")
