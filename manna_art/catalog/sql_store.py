"""
Relational catalog backend.

Counter increments are single ``UPDATE ... SET col = col + 1`` statements so
concurrent requests never lose an update.
"""

from typing import List, Optional

import structlog
from sqlalchemy import Engine, desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..db.base import create_db_engine, get_session_local, init_database
from ..db.models import ArtworkModel
from ..errors import PersistenceError
from .schemas import Artwork, ArtworkCreate
from .store import DEFAULT_LIST_LIMIT, CatalogStore

logger = structlog.get_logger(__name__)


class SqlCatalogStore(CatalogStore):
    """Catalog stored in the ``artworks`` table."""

    def __init__(self, session_factory: sessionmaker, engine: Optional[Engine] = None):
        self.session_factory = session_factory
        self.engine = engine

    @classmethod
    def from_url(cls, database_url: str) -> "SqlCatalogStore":
        """Build a store for a database URL, creating missing tables."""
        engine = create_db_engine(database_url)
        init_database(engine)
        logger.info("Using SQL catalog store", dialect=engine.dialect.name)
        return cls(get_session_local(engine), engine)

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()

    @staticmethod
    def _to_artwork(model: ArtworkModel) -> Artwork:
        return Artwork.model_validate(model.to_dict())

    def insert(self, artwork: ArtworkCreate) -> Artwork:
        record = self._new_record(artwork)
        with self.session_factory() as db:
            try:
                db.add(ArtworkModel(**record.model_dump()))
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("Artwork insert failed", artwork_id=record.id, exc_info=True)
                raise PersistenceError("No se pudo guardar la obra") from e
        return record

    def get(self, artwork_id: str) -> Optional[Artwork]:
        with self.session_factory() as db:
            model = db.query(ArtworkModel).filter(ArtworkModel.id == artwork_id).first()
            return self._to_artwork(model) if model else None

    def get_by_ip_id(self, ip_id: str) -> Optional[Artwork]:
        with self.session_factory() as db:
            model = db.query(ArtworkModel).filter(ArtworkModel.ip_id == ip_id).first()
            return self._to_artwork(model) if model else None

    def list_by_creator(self, wallet: str) -> List[Artwork]:
        with self.session_factory() as db:
            models = (
                db.query(ArtworkModel)
                .filter(func.lower(ArtworkModel.creator_wallet) == wallet.lower())
                .order_by(desc(ArtworkModel.created_at))
                .all()
            )
            return [self._to_artwork(m) for m in models]

    def list_all(self) -> List[Artwork]:
        with self.session_factory() as db:
            models = db.query(ArtworkModel).order_by(ArtworkModel.created_at).all()
            return [self._to_artwork(m) for m in models]

    def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Artwork]:
        with self.session_factory() as db:
            models = (
                db.query(ArtworkModel)
                .order_by(desc(ArtworkModel.created_at), ArtworkModel.id)
                .limit(limit)
                .all()
            )
            return [self._to_artwork(m) for m in models]

    def list_popular(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Artwork]:
        score = ArtworkModel.views + ArtworkModel.likes * 10
        with self.session_factory() as db:
            models = (
                db.query(ArtworkModel)
                .order_by(desc(score), desc(ArtworkModel.created_at), ArtworkModel.id)
                .limit(limit)
                .all()
            )
            return [self._to_artwork(m) for m in models]

    def _bump(self, artwork_id: str, column) -> Optional[int]:
        with self.session_factory() as db:
            try:
                updated = (
                    db.query(ArtworkModel)
                    .filter(ArtworkModel.id == artwork_id)
                    .update({column: column + 1}, synchronize_session=False)
                )
                if not updated:
                    db.rollback()
                    return None
                value = (
                    db.query(column).filter(ArtworkModel.id == artwork_id).scalar()
                )
                db.commit()
                return value
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("Artwork counter update failed", artwork_id=artwork_id, exc_info=True)
                raise PersistenceError("No se pudo actualizar la obra") from e

    def increment_views(self, artwork_id: str) -> Optional[int]:
        return self._bump(artwork_id, ArtworkModel.views)

    def increment_like(self, artwork_id: str) -> Optional[int]:
        return self._bump(artwork_id, ArtworkModel.likes)
