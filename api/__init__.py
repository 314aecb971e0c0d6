# Path: api/__init__.py
# Purpose: Package initializer for the badge collection HTTP API.
# Layer: api.
# Details: Exposes the FastAPI application factory; FastAPI itself is imported when the app is built.

from .app import create_app

__all__ = ["create_app"]
