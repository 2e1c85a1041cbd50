from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from recipebox.app import App
from recipebox.config import Config
from recipebox.errors import UserError
from recipebox.utils import now
from recipebox.web.error_handlers import general_exception_handler, request_validation_handler, user_error_handler
from recipebox.web.openapi import API_VERSION, set_custom_openapi
from recipebox.web.routers import auth_router, recipes_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="RecipeBox API",
        lifespan=lifespan,
        openapi_tags=[],
    )

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/")
    async def root() -> dict[str, str]:
        return {"message": "Recipe API is running", "status": "healthy", "timestamp": now().isoformat()}

    @app.get("/api")
    async def api_index() -> dict[str, object]:
        return {
            "message": "Recipe API",
            "version": API_VERSION,
            "endpoints": {"auth": "/api/auth", "recipes": "/api/recipes"},
        }

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(auth_router, prefix="/api")
    app.include_router(recipes_router, prefix="/api")

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
