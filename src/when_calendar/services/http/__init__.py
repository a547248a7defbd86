"""HTTP and websocket surface for When."""

from .server import build_app, create_app, run_server

__all__ = ["build_app", "create_app", "run_server"]
