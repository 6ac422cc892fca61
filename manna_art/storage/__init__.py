"""
Permanent artifact storage.
"""

from .artifacts import (
    ArtifactStore,
    GatewayArtifactStore,
    LocalArtifactStore,
    UploadResult,
    create_artifact_store,
)

__all__ = [
    "ArtifactStore",
    "GatewayArtifactStore",
    "LocalArtifactStore",
    "UploadResult",
    "create_artifact_store",
]
