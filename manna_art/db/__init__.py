"""
Database package for Manna Art.
"""

from .base import Base, create_db_engine, get_session_local, init_database
from .models import ArtworkModel

__all__ = [
    "Base",
    "create_db_engine",
    "get_session_local",
    "init_database",
    "ArtworkModel",
]
