"""Gestor Pro order management."""

from order_manager.version import __version__

__all__ = ["__version__"]
