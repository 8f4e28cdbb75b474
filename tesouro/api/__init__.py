"""HTTP API for the Tesouro engine."""

from .server import TesouroAPI, create_app

__all__ = ["TesouroAPI", "create_app"]
