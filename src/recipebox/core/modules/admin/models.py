from enum import StrEnum

from recipebox.core.db import MongoModel


class AdminIdentity(MongoModel):
    """The admin account. Username is stored lower-cased."""

    username: str
    password_hash: str  # bcrypt hash


class ReconcileOutcome(StrEnum):
    """What the startup reconciliation did to the stored admin identity."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"  # No credential configured, store left untouched


def normalize_username(username: str) -> str:
    return username.strip().lower()
