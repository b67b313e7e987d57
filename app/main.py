# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Recipe Catalog API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.auth import routes as auth_routes
from app.auth.gate import AccessGate, AccessGateMiddleware, build_access_gate
from app.auth.tokens import TokenService
from app.exceptions import (
    RecipeCatalogException,
    recipe_catalog_exception_handler,
)
from app.routers import health, recipes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: Log configuration, warm the approved email list
    - Shutdown: Log
    """
    gate: AccessGate = app.state.access_gate

    logger.info(f"Starting Recipe Catalog API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    if gate.allow_unauthenticated:
        logger.warning("Authentication is disabled for this process")
    else:
        # A failure here is logged by the cache; requests retry the load
        await gate.cache.ensure_fresh()

    yield

    logger.info("Shutting down Recipe Catalog API")


def create_app(
    access_gate: AccessGate | None = None,
    token_service: TokenService | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        access_gate: Gate to install (default: built from settings)
        token_service: Token service for the auth routes (default: built from settings)
    """
    token_service = token_service or TokenService.from_settings(settings)
    access_gate = access_gate or build_access_gate(settings, token_service=token_service)

    app = FastAPI(
        title="Recipe Catalog API",
        description="""
## Recipe Catalog API

Keep a family recipe collection, spin the wheel for tonight's dinner, and
import recipes from photos.

### Access

Every endpoint except `/health*` and `POST /api/auth/token` requires an
approved email, taken from either:

- `Authorization: Bearer <token>` (issued by `POST /api/auth/token`), or
- the `X-MS-CLIENT-PRINCIPAL` header set by the hosting platform.

### Quick Start

```bash
# 1. List recipes
curl -H "Authorization: Bearer $TOKEN" http://localhost:8000/api/recipes

# 2. Spin the wheel
curl -H "Authorization: Bearer $TOKEN" http://localhost:8000/api/recipes/random

# 3. Import a recipe from a photo
curl -X POST http://localhost:8000/api/recipes/import \\
  -H "Authorization: Bearer $TOKEN" \\
  -F "file=@recipe.jpg"
```
""",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "Auth",
                "description": "Trade the platform principal for an API token",
            },
            {
                "name": "Recipes",
                "description": "Recipe catalog, random pick and photo import",
            },
            {
                "name": "Health",
                "description": "API health and readiness checks",
            },
        ],
    )

    app.state.access_gate = access_gate
    app.state.token_service = token_service

    # =========================================================================
    # Middleware
    # =========================================================================

    # Access gate - added first so CORS wraps it and rejections carry CORS headers
    app.add_middleware(AccessGateMiddleware, gate=access_gate)

    # CORS middleware - allows cross-origin requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    @app.exception_handler(RecipeCatalogException)
    async def handle_recipe_catalog_exception(request: Request, exc: RecipeCatalogException):
        """Handle custom Recipe Catalog exceptions."""
        return await recipe_catalog_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def handle_general_exception(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception(f"Unexpected error: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            }
        )

    # =========================================================================
    # Routers
    # =========================================================================

    # Health check endpoints (public)
    app.include_router(
        health.router,
        tags=["Health"]
    )

    # Authentication endpoints
    app.include_router(
        auth_routes.router,
        prefix="/api/auth",
        tags=["Auth"]
    )

    # Recipe endpoints
    app.include_router(
        recipes.router,
        prefix="/api/recipes",
        tags=["Recipes"]
    )

    # =========================================================================
    # Root Endpoint
    # =========================================================================

    @app.get("/", tags=["Root"])
    async def root():
        """
        Root endpoint - returns API info.
        """
        return {
            "name": "Recipe Catalog API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.is_development)
