"""FastAPI web layer for Swapper.

Re-exports the application factory so consumers can import directly:
    from Swapper.web import create_app
"""

from Swapper.web.app import create_app

__all__ = ["create_app"]
