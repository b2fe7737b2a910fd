"""Catalogue domain API package."""

from catalogue.api.routes import item_router

__all__ = ["item_router"]
