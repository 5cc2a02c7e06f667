"""HTTP API for quote workflows."""

from .app import create_app

__all__ = ["create_app"]
