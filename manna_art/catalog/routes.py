"""
Catalog API routes.

Browse registered artworks and record engagement.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, Query

from ..dependencies import get_catalog
from ..errors import NotFoundError, ValidationError
from .store import DEFAULT_LIST_LIMIT, CatalogStore

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/artworks", tags=["artworks"])

LIST_FILTERS = ("recent", "popular", "all")


@router.get("")
async def list_artworks(
    filter: str = "recent",
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=1000),
    creator: Optional[str] = None,
    catalog: CatalogStore = Depends(get_catalog),
) -> Dict[str, Any]:
    """List artworks: recent (default), popular, all, or one creator's works."""
    if creator:
        artworks = catalog.list_by_creator(creator)
    elif filter == "popular":
        artworks = catalog.list_popular(limit)
    elif filter == "all":
        artworks = catalog.list_all()
    elif filter == "recent":
        artworks = catalog.list_recent(limit)
    else:
        raise ValidationError(
            f"Filtro inválido: {filter}. Usa uno de: {', '.join(LIST_FILTERS)}"
        )

    return {"artworks": [a.to_dict() for a in artworks]}


@router.get("/{artwork_id}")
async def get_artwork(
    artwork_id: str,
    catalog: CatalogStore = Depends(get_catalog),
) -> Dict[str, Any]:
    """Get a single artwork by id."""
    artwork = catalog.get(artwork_id)
    if not artwork:
        raise NotFoundError("Obra no encontrada")
    return {"artwork": artwork.to_dict()}


@router.post("/{artwork_id}/view")
async def record_view(
    artwork_id: str,
    catalog: CatalogStore = Depends(get_catalog),
) -> Dict[str, Any]:
    """Add one view to an artwork and return the new count."""
    views = catalog.increment_views(artwork_id)
    if views is None:
        raise NotFoundError("Obra no encontrada")
    return {"views": views}


@router.post("/{artwork_id}/like")
async def record_like(
    artwork_id: str,
    catalog: CatalogStore = Depends(get_catalog),
) -> Dict[str, Any]:
    """Add one like to an artwork and return the new count."""
    likes = catalog.increment_like(artwork_id)
    if likes is None:
        raise NotFoundError("Obra no encontrada")
    logger.info("Artwork liked", artwork_id=artwork_id, likes=likes)
    return {"likes": likes}
