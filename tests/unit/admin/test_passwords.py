"""Tests for admin password hashing helpers."""

import pytest

from recipebox.core.modules.admin.passwords import check_password, dummy_password_hash, hash_password
from recipebox.errors import ValidationError


def test_hash_uses_fixed_work_factor():
    assert hash_password("admin123").startswith("$2b$10$")


def test_hash_is_salted():
    assert hash_password("admin123") != hash_password("admin123")


def test_check_password():
    password_hash = hash_password("admin123")
    assert check_password("admin123", password_hash)
    assert not check_password("admin124", password_hash)


def test_malformed_hash_never_verifies():
    assert not check_password("admin123", "not-a-bcrypt-hash")


def test_dummy_hash_is_stable():
    assert dummy_password_hash() == dummy_password_hash()


def test_password_over_72_bytes_is_rejected():
    with pytest.raises(ValidationError, match="72 bytes"):
        hash_password("x" * 73)


def test_multibyte_password_length_counts_bytes():
    assert hash_password("é" * 36).startswith("$2b$")
    with pytest.raises(ValidationError):
        hash_password("é" * 37)
