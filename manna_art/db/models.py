"""
SQLAlchemy models for Manna Art.
"""

from datetime import timezone
from typing import Any, Dict

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import func

from .base import Base


class ArtworkModel(Base):
    """SQLAlchemy model for catalog records."""

    __tablename__ = "artworks"

    # Primary fields
    id = Column(String(64), primary_key=True)
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=False)
    ip_type = Column(String(20), nullable=False, index=True)

    # Artifact store references
    file_url = Column(String(2000), nullable=False)
    file_id = Column(String(256), nullable=False)
    metadata_url = Column(String(2000), nullable=False)
    metadata_id = Column(String(256), nullable=False)

    # Creator identity
    creator_wallet = Column(String(128), nullable=False, index=True)
    creator_email = Column(String(320), nullable=True)

    # IP registry references
    ip_id = Column(String(128), nullable=True, unique=True, index=True)
    nft_token_id = Column(String(128), nullable=True)
    license_terms_ids = Column(JSON, nullable=True)

    # Derivative linkage
    parent_ip_id = Column(String(128), nullable=True, index=True)
    is_remix = Column(Boolean, nullable=False, default=False)

    # Engagement
    likes = Column(Integer, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now())

    __table_args__ = (Index("ix_artworks_created_at", "created_at"),)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to the catalog record fields (snake_case)."""
        created_at = self.created_at
        # SQLite drops tzinfo; stored values are always UTC
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "ip_type": self.ip_type,
            "file_url": self.file_url,
            "file_id": self.file_id,
            "metadata_url": self.metadata_url,
            "metadata_id": self.metadata_id,
            "creator_wallet": self.creator_wallet,
            "creator_email": self.creator_email,
            "ip_id": self.ip_id,
            "nft_token_id": self.nft_token_id,
            "license_terms_ids": self.license_terms_ids,
            "parent_ip_id": self.parent_ip_id,
            "is_remix": self.is_remix,
            "likes": self.likes,
            "views": self.views,
            "created_at": created_at,
        }
