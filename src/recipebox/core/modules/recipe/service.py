from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from recipebox.core.core import Service
from recipebox.core.modules.recipe.models import Recipe
from recipebox.errors import NotFoundError, ValidationError
from recipebox.utils import now

logger = structlog.get_logger(__name__)


def clean_recipe_fields(title: str, description: str, ingredients: str, instructions: str) -> dict[str, str]:
    """Trim recipe fields, raise ValidationError if any is blank."""
    fields = {
        "title": title.strip(),
        "description": description.strip(),
        "ingredients": ingredients.strip(),
        "instructions": instructions.strip(),
    }
    if not all(fields.values()):
        raise ValidationError("All fields are required")
    return fields


class RecipeService(Service):
    """CRUD over the recipes collection."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("recipes")

    async def list_recipes(self) -> list[Recipe]:
        """Get all recipes, newest first."""
        return await Recipe.list_cursor(self._collection.find().sort("created_at", -1))

    async def get_recipe(self, recipe_id: UUID) -> Recipe:
        doc = await self._collection.find_one({"_id": recipe_id})
        if doc is None:
            raise NotFoundError("Recipe not found")
        return Recipe.model_validate(doc)

    async def create_recipe(self, title: str, description: str, ingredients: str, instructions: str) -> Recipe:
        recipe = Recipe(**clean_recipe_fields(title, description, ingredients, instructions))
        await self._collection.insert_one(recipe.to_mongo())
        logger.info("recipe_created", recipe_id=str(recipe.id))
        return recipe

    async def update_recipe(
        self, recipe_id: UUID, title: str, description: str, ingredients: str, instructions: str
    ) -> Recipe:
        fields = clean_recipe_fields(title, description, ingredients, instructions)
        doc = await self._collection.find_one_and_update(
            {"_id": recipe_id},
            {"$set": {**fields, "updated_at": now()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("Recipe not found")
        logger.info("recipe_updated", recipe_id=str(recipe_id))
        return Recipe.model_validate(doc)

    async def delete_recipe(self, recipe_id: UUID) -> Recipe:
        """Delete a recipe and return what was removed."""
        doc = await self._collection.find_one_and_delete({"_id": recipe_id})
        if doc is None:
            raise NotFoundError("Recipe not found")
        logger.info("recipe_deleted", recipe_id=str(recipe_id))
        return Recipe.model_validate(doc)

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("created_at", -1)])
