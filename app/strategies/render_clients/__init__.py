"""Rendering service client implementations."""

from app.strategies.render_clients.creatomate import CreatomateClient

__all__ = ["CreatomateClient"]
