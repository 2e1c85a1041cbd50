from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from recipebox.core.core import Service
from recipebox.core.modules.admin.models import AdminIdentity, ReconcileOutcome, normalize_username
from recipebox.core.modules.admin.passwords import check_password, dummy_password_hash, hash_password
from recipebox.errors import NotFoundError

logger = structlog.get_logger(__name__)


class AdminService(Service):
    """Stores the admin identity and keeps it in sync with configuration."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("admins")

    async def get_admin_by_username(self, username: str) -> AdminIdentity | None:
        """Find admin by username, case-insensitively."""
        doc = await self._collection.find_one({"username": normalize_username(username)})
        if doc is None:
            return None
        return AdminIdentity.model_validate(doc)

    async def create_admin(self, username: str, password_hash: str) -> AdminIdentity:
        admin = AdminIdentity(username=normalize_username(username), password_hash=password_hash)
        await self._collection.insert_one(admin.to_mongo())
        return admin

    async def update_password_hash(self, admin_id: UUID, password_hash: str) -> None:
        res = await self._collection.update_one({"_id": admin_id}, {"$set": {"password_hash": password_hash}})
        if res.matched_count == 0:
            raise NotFoundError(f"Admin '{admin_id}' not found")

    async def verify_credentials(self, username: str, password: str) -> AdminIdentity | None:
        """Return the admin if username and password match, None otherwise.

        An unknown username still pays for one bcrypt check, so callers cannot
        tell the two failure causes apart by timing.
        """
        admin = await self.get_admin_by_username(username)
        if admin is None:
            check_password(password, dummy_password_hash())
            return None
        if not check_password(password, admin.password_hash):
            return None
        return admin

    async def reconcile_admin(self) -> ReconcileOutcome:
        """Make the stored admin credential match the configured one.

        Configuration is authoritative: a stored hash that no longer matches is
        overwritten on every start.
        """
        config = self.core.config
        username = normalize_username(config.admin_username)

        if config.admin_password_hash:
            configured_hash = config.admin_password_hash

            def matches(stored: str) -> bool:
                return stored == configured_hash

            def new_hash() -> str:
                return configured_hash

        elif config.admin_password:
            logger.warning("admin_plaintext_password", hint="Set RECIPEBOX_ADMIN_PASSWORD_HASH instead")
            plaintext = config.admin_password

            def matches(stored: str) -> bool:
                return check_password(plaintext, stored)

            def new_hash() -> str:
                return hash_password(plaintext)

        else:
            logger.error(
                "admin_password_missing",
                username=username,
                hint="Set either RECIPEBOX_ADMIN_PASSWORD_HASH or RECIPEBOX_ADMIN_PASSWORD",
            )
            return ReconcileOutcome.SKIPPED

        existing = await self.get_admin_by_username(username)
        if existing is None:
            await self.create_admin(username, new_hash())
            logger.info("admin_created", username=username)
            return ReconcileOutcome.CREATED

        if matches(existing.password_hash):
            logger.info("admin_password_in_sync", username=username)
            return ReconcileOutcome.UNCHANGED

        await self.update_password_hash(existing.id, new_hash())
        logger.info("admin_password_synced", username=username)
        return ReconcileOutcome.UPDATED

    async def on_start(self) -> None:
        """Create indexes and reconcile the admin identity."""
        try:
            await self._collection.create_index([("username", 1)], unique=True)
            outcome = await self.reconcile_admin()
        except Exception:
            # Only an unreachable database stops startup, and that is checked before services start
            logger.exception("admin_reconcile_failed")
            return
        logger.debug("admin_service_started", outcome=outcome)
