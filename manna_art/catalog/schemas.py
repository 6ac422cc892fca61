"""
Catalog record schemas.

An Artwork is the unit of registered intellectual property. Field names are
snake_case in Python and camelCase on the wire and in the JSON catalog file.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class IPType(str, Enum):
    """Kinds of work that can be registered."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    MODEL_3D = "3d"


class ArtworkFields(BaseModel):
    """Creator-supplied and external-reference fields of an artwork."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, use_enum_values=True
    )

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    ip_type: IPType

    # Artifact store references
    file_url: str = Field(..., min_length=1)
    file_id: str = Field(..., min_length=1)
    metadata_url: str = Field(..., min_length=1)
    metadata_id: str = Field(..., min_length=1)

    # Creator identity
    creator_wallet: str = Field(..., min_length=1)
    creator_email: Optional[str] = None

    # IP registry references, absent when on-chain registration failed
    ip_id: Optional[str] = None
    nft_token_id: Optional[str] = None
    license_terms_ids: Optional[List[str]] = None

    # Derivative linkage
    parent_ip_id: Optional[str] = None
    is_remix: bool = False


class ArtworkCreate(ArtworkFields):
    """Fields supplied when inserting an artwork into the catalog.

    Invariants:
    - is_remix is true exactly when parent_ip_id is present and non-empty.
    - ip_id is either absent or accompanied by nft_token_id and a non-empty
      license_terms_ids list.
    """

    @model_validator(mode="after")
    def check_linkage(self) -> "ArtworkCreate":
        if self.is_remix != bool(self.parent_ip_id):
            raise ValueError("is_remix must be set exactly when parent_ip_id is present")
        if self.ip_id and not (self.nft_token_id and self.license_terms_ids):
            raise ValueError(
                "ip_id requires nft_token_id and non-empty license_terms_ids"
            )
        if not self.ip_id and (self.nft_token_id or self.license_terms_ids):
            raise ValueError("on-chain identifiers present without ip_id")
        return self


class Artwork(ArtworkFields):
    """A catalog record as stored.

    Records are loaded as they were written, so catalogs written before the
    insert invariants existed still load.
    """

    id: str
    created_at: datetime
    likes: int = Field(default=0, ge=0)
    views: int = Field(default=0, ge=0)

    @property
    def popularity(self) -> int:
        """Ranking score used by the popular listing."""
        return self.views + self.likes * 10

    def to_dict(self) -> dict:
        """Convert to the camelCase JSON representation."""
        return self.model_dump(mode="json", by_alias=True)
