"""
Catalog storage abstraction.

The catalog is the only state this service owns. Two interchangeable
backends implement the same contract:

    JsonCatalogStore  one JSON document holding the record array
    SqlCatalogStore   an ``artworks`` table (see ``sql_store``)

The backend is chosen once at startup by ``create_catalog_store``.
"""
from __future__ import annotations

import json
import os
import random
import string
import tempfile
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import structlog

from ..config import Settings
from ..errors import PersistenceError
from .schemas import Artwork, ArtworkCreate

logger = structlog.get_logger(__name__)

DEFAULT_LIST_LIMIT = 12

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_artwork_id() -> str:
    """Time-based id with a random base36 suffix, e.g. ``artwork_1717171717171_k3j9x0a2b``."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"artwork_{int(time.time() * 1000)}_{suffix}"


def popular_sort_key(artwork: Artwork):
    """Score descending, then newest first, then id for a stable order."""
    return (-artwork.popularity, -artwork.created_at.timestamp(), artwork.id)


class CatalogStore(ABC):
    """Abstract base class for catalog storage."""

    @abstractmethod
    def insert(self, artwork: ArtworkCreate) -> Artwork:
        """Persist a new record; id, created_at and counters are always assigned here."""
        pass

    @abstractmethod
    def get(self, artwork_id: str) -> Optional[Artwork]:
        pass

    @abstractmethod
    def get_by_ip_id(self, ip_id: str) -> Optional[Artwork]:
        pass

    @abstractmethod
    def list_by_creator(self, wallet: str) -> List[Artwork]:
        """Records whose creator wallet matches, ignoring case."""
        pass

    @abstractmethod
    def list_all(self) -> List[Artwork]:
        pass

    @abstractmethod
    def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Artwork]:
        """At most ``limit`` records, newest created_at first."""
        pass

    @abstractmethod
    def list_popular(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Artwork]:
        """At most ``limit`` records ordered by ``views + likes * 10`` descending."""
        pass

    @abstractmethod
    def increment_views(self, artwork_id: str) -> Optional[int]:
        """Add one view and return the new count, or None for unknown ids."""
        pass

    @abstractmethod
    def increment_like(self, artwork_id: str) -> Optional[int]:
        """Add one like and return the new count, or None for unknown ids."""
        pass

    def close(self) -> None:
        """Release backend resources."""
        pass

    @staticmethod
    def _new_record(artwork: ArtworkCreate) -> Artwork:
        return Artwork(
            **artwork.model_dump(),
            id=generate_artwork_id(),
            created_at=datetime.now(timezone.utc),
            likes=0,
            views=0,
        )


class JsonCatalogStore(CatalogStore):
    """Catalog kept as a single JSON array on disk.

    Every mutation is a read-modify-write of the whole document, serialized by
    a process lock and written through a temporary file plus ``os.replace`` so
    readers never observe a half-written file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.RLock()

    def _read(self) -> List[Artwork]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except (OSError, ValueError) as e:
            logger.error("Catalog read failed", path=str(self.path), exc_info=True)
            raise PersistenceError("No se pudo leer el catálogo") from e
        return [Artwork.model_validate(item) for item in raw]

    def _write(self, artworks: List[Artwork]) -> None:
        payload = json.dumps([a.to_dict() for a in artworks], indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=".artworks-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("Catalog write failed", path=str(self.path), exc_info=True)
            raise PersistenceError("No se pudo guardar el catálogo") from e

    def insert(self, artwork: ArtworkCreate) -> Artwork:
        record = self._new_record(artwork)
        with self._lock:
            artworks = self._read()
            artworks.append(record)
            self._write(artworks)
        return record

    def get(self, artwork_id: str) -> Optional[Artwork]:
        return next((a for a in self.list_all() if a.id == artwork_id), None)

    def get_by_ip_id(self, ip_id: str) -> Optional[Artwork]:
        return next((a for a in self.list_all() if a.ip_id == ip_id), None)

    def list_by_creator(self, wallet: str) -> List[Artwork]:
        wallet = wallet.lower()
        return [a for a in self.list_all() if a.creator_wallet.lower() == wallet]

    def list_all(self) -> List[Artwork]:
        with self._lock:
            return self._read()

    def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Artwork]:
        artworks = sorted(self.list_all(), key=lambda a: a.created_at, reverse=True)
        return artworks[:limit]

    def list_popular(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Artwork]:
        return sorted(self.list_all(), key=popular_sort_key)[:limit]

    def _bump(self, artwork_id: str, field: str) -> Optional[int]:
        with self._lock:
            artworks = self._read()
            for artwork in artworks:
                if artwork.id == artwork_id:
                    value = getattr(artwork, field) + 1
                    setattr(artwork, field, value)
                    self._write(artworks)
                    return value
        return None

    def increment_views(self, artwork_id: str) -> Optional[int]:
        return self._bump(artwork_id, "views")

    def increment_like(self, artwork_id: str) -> Optional[int]:
        return self._bump(artwork_id, "likes")


def create_catalog_store(settings: Settings) -> CatalogStore:
    """Factory selecting the catalog backend from settings.

    Raises:
        ValueError: If the backend name is not supported
    """
    backend = settings.catalog_backend.lower()

    if backend == "json":
        logger.info("Using JSON catalog store", path=settings.catalog_path)
        return JsonCatalogStore(Path(settings.catalog_path))

    elif backend == "sql":
        from .sql_store import SqlCatalogStore

        return SqlCatalogStore.from_url(settings.database_url)

    else:
        raise ValueError(
            f"Unsupported catalog backend: {settings.catalog_backend}. "
            f"Supported: json, sql"
        )
