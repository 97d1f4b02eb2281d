"""Catalog clients."""

from .beatsaver import BeatSaverClient, CatalogClient, format_cursor

__all__ = ['BeatSaverClient', 'CatalogClient', 'format_cursor']
