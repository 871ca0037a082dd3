"""HTTP completion endpoint for finbot clients."""

from .app import create_app, get_provider, run_server

__all__ = ["create_app", "get_provider", "run_server"]
