"""Catalog of playable games."""

from .model import CatalogEntry, CatalogModel, sort_entries

__all__ = ["CatalogEntry", "CatalogModel", "sort_entries"]
