# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - recipes.py: Recipe catalog and image extraction endpoints
#
# Authentication routes live in app/auth/routes.py.
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import recipes

__all__ = [
    "health",
    "recipes",
]
