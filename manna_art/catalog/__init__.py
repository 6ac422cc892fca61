"""
Catalog of registered artworks.
"""

from .schemas import Artwork, ArtworkCreate, IPType
from .store import CatalogStore, JsonCatalogStore, create_catalog_store

__all__ = [
    "Artwork",
    "ArtworkCreate",
    "CatalogStore",
    "IPType",
    "JsonCatalogStore",
    "create_catalog_store",
]
