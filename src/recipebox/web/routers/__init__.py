from recipebox.web.routers.auth import router as auth_router
from recipebox.web.routers.recipes import router as recipes_router

__all__ = [
    "auth_router",
    "recipes_router",
]
