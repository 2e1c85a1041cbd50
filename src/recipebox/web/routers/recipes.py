from fastapi import APIRouter
from pydantic import BaseModel, Field

from recipebox.core.modules.recipe.models import Recipe
from recipebox.web.deps import AdminIdentityDep, AppDep
from recipebox.web.openapi import ErrorResponse

router = APIRouter(tags=["recipes"])


class RecipeRequest(BaseModel):
    """Recipe fields for create and update. All are required and trimmed."""

    title: str = Field("", description="Recipe title")
    description: str = Field("", description="Short description")
    ingredients: str = Field("", description="Ingredients, free text")
    instructions: str = Field("", description="Preparation steps, free text")


class DeleteRecipeResponse(BaseModel):
    """Result of deleting a recipe."""

    message: str = Field(..., description="Human readable status")
    deleted_recipe: Recipe = Field(..., description="The recipe that was removed")


@router.get(
    "/recipes",
    summary="List recipes",
    description="Get all recipes, newest first. Public.",
    operation_id="listRecipes",
)
async def list_recipes(app: AppDep) -> list[Recipe]:
    return await app.get_recipes()


@router.get(
    "/recipes/{recipe_id}",
    summary="Get recipe",
    description="Get a single recipe by ID. Public.",
    operation_id="getRecipe",
    responses={404: {"model": ErrorResponse, "description": "Recipe not found"}},
)
async def get_recipe(recipe_id: str, app: AppDep) -> Recipe:
    return await app.get_recipe(recipe_id)


@router.post(
    "/recipes",
    summary="Create recipe",
    description="Create a new recipe. Admin only.",
    operation_id="createRecipe",
    status_code=201,
    responses={
        201: {"description": "Recipe created"},
        400: {"model": ErrorResponse, "description": "A required field is missing"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def create_recipe(data: RecipeRequest, app: AppDep, identity: AdminIdentityDep) -> Recipe:
    return await app.create_recipe(identity, data.title, data.description, data.ingredients, data.instructions)


@router.put(
    "/recipes/{recipe_id}",
    summary="Update recipe",
    description="Replace all fields of a recipe. Admin only.",
    operation_id="updateRecipe",
    responses={
        400: {"model": ErrorResponse, "description": "A required field is missing"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Recipe not found"},
    },
)
async def update_recipe(
    recipe_id: str, data: RecipeRequest, app: AppDep, identity: AdminIdentityDep
) -> Recipe:
    return await app.update_recipe(
        identity, recipe_id, data.title, data.description, data.ingredients, data.instructions
    )


@router.delete(
    "/recipes/{recipe_id}",
    summary="Delete recipe",
    description="Delete a recipe. Admin only.",
    operation_id="deleteRecipe",
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Recipe not found"},
    },
)
async def delete_recipe(recipe_id: str, app: AppDep, identity: AdminIdentityDep) -> DeleteRecipeResponse:
    deleted = await app.delete_recipe(identity, recipe_id)
    return DeleteRecipeResponse(message="Recipe deleted successfully", deleted_recipe=deleted)
