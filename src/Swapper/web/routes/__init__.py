"""FastAPI route modules for Swapper.

Re-exports all routers so the application factory can import them:
    from Swapper.web.routes import swap_router
"""

from Swapper.web.routes.swap import router as swap_router

__all__ = ["swap_router"]
