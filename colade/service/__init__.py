"""Local preview server."""

from .app import create_app, serve_directory

__all__ = ["create_app", "serve_directory"]
