"""HTTP surface for the visual-programming host."""

from .app import create_fastapi_app, get_app

__all__ = ["create_fastapi_app", "get_app"]
