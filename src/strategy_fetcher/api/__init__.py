"""HTTP read API for the published snapshot."""

from .app import create_app

__all__ = ["create_app"]
