from functools import cache

import bcrypt

from recipebox.config import BCRYPT_ROUNDS
from recipebox.errors import ValidationError

MAX_PASSWORD_BYTES = 72  # bcrypt only looks at the first 72 bytes


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh salt.

    Raises:
        ValidationError: if the password is longer than bcrypt can hash.
    """
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    """Verify password against a bcrypt hash. A malformed hash never verifies."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


@cache
def dummy_password_hash() -> str:
    """Hash compared against when a username is unknown, so both login failures cost the same."""
    return hash_password("recipebox-dummy-password")
