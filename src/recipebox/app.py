from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

import structlog
from pymongo import AsyncMongoClient

from recipebox.config import Config
from recipebox.core.core import Core
from recipebox.core.db import parse_document_id
from recipebox.core.modules.recipe.models import Recipe
from recipebox.core.modules.token.models import AuthToken, LoginResult, TokenClaims
from recipebox.errors import AuthenticationError, ValidationError

logger = structlog.get_logger(__name__)


class App:
    """Facade for all application operations, validates access before delegating to Core."""

    def __init__(self, config: Config, mongo_client: AsyncMongoClient[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, mongo_client)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Authentication ===
    async def login(self, username: str | None, password: str | None) -> LoginResult:
        """Check admin credentials and issue a signed token."""
        if not username or not password:
            raise ValidationError("Username and password are required")

        admin = await self._core.services.admin.verify_credentials(username, password)
        if admin is None:
            # Same outcome for unknown user and wrong password
            logger.info("login_failed")
            raise AuthenticationError("Invalid credentials")

        logger.info("login_succeeded", username=admin.username)
        return self._core.services.token.issue_token(admin)

    def verify_token(self, auth_token: AuthToken | None) -> TokenClaims:
        """Return the claims of a valid token, raise AuthenticationError otherwise."""
        return self._core.services.access.ensure_authenticated(auth_token)

    def authorize_admin(self, auth_token: AuthToken | None) -> TokenClaims:
        """Gate for mutating operations."""
        return self._core.services.access.ensure_admin(auth_token)

    # === Recipes (public reads) ===
    async def get_recipes(self) -> list[Recipe]:
        return await self._core.services.recipe.list_recipes()

    async def get_recipe(self, recipe_id: str) -> Recipe:
        return await self._core.services.recipe.get_recipe(self._parse_recipe_id(recipe_id))

    # === Recipes (admin only, callers pass the identity returned by authorize_admin) ===
    async def create_recipe(
        self, identity: TokenClaims, title: str, description: str, ingredients: str, instructions: str
    ) -> Recipe:
        """Create recipe. `identity` comes from `authorize_admin`."""
        recipe = await self._core.services.recipe.create_recipe(title, description, ingredients, instructions)
        logger.info("admin_action", action="create_recipe", recipe_id=str(recipe.id), username=identity.username)
        return recipe

    async def update_recipe(
        self,
        identity: TokenClaims,
        recipe_id: str,
        title: str,
        description: str,
        ingredients: str,
        instructions: str,
    ) -> Recipe:
        """Replace all recipe fields."""
        recipe = await self._core.services.recipe.update_recipe(
            self._parse_recipe_id(recipe_id), title, description, ingredients, instructions
        )
        logger.info("admin_action", action="update_recipe", recipe_id=str(recipe.id), username=identity.username)
        return recipe

    async def delete_recipe(self, identity: TokenClaims, recipe_id: str) -> Recipe:
        recipe = await self._core.services.recipe.delete_recipe(self._parse_recipe_id(recipe_id))
        logger.info("admin_action", action="delete_recipe", recipe_id=str(recipe.id), username=identity.username)
        return recipe

    # === Private resolver methods ===
    @staticmethod
    def _parse_recipe_id(recipe_id: str) -> UUID:
        return parse_document_id(recipe_id, "Invalid recipe ID")
