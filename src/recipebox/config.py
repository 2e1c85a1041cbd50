from datetime import timedelta

from pydantic_settings import BaseSettings

TOKEN_LIFETIME = timedelta(hours=24)  # Lifetime of a signed login token, no refresh
INACTIVITY_TIMEOUT = timedelta(hours=24)  # Client-side idle window before forced logout
CHECK_INTERVAL = timedelta(minutes=1)  # How often the client re-evaluates the idle window
BCRYPT_ROUNDS = 10  # Work factor for admin password hashes


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 5000
    debug: bool = False
    jwt_secret: str  # Signing key for login tokens, fixed for the process lifetime
    cors_origins: list[str] = []
    admin_username: str = "admin"
    admin_password_hash: str | None = None  # Pre-hashed bcrypt credential (preferred)
    admin_password: str | None = None  # Plaintext credential, hashed at startup when no hash is set

    model_config = {
        "env_file": [".env"],
        "env_prefix": "RECIPEBOX_",
        "extra": "ignore",
        "frozen": True,
    }
