"""
Artifact storage abstraction.

The artifact store is the permanent, content-addressed storage network that
holds uploaded files and their metadata documents. It is append-only: there
is no delete, so an upload that succeeds is permanent even when the request
that made it later fails.

file://   LocalArtifactStore   (development)
https://  GatewayArtifactStore (upload gateway that signs and posts transactions)

Design principle: treat storage as a URI, not a boolean.
"""
from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx
import structlog

from ..config import Settings
from ..errors import StorageUploadFailed

logger = structlog.get_logger(__name__)

METADATA_TAGS = {"App-Name": "Manna Art", "App-Version": "1.0"}


@dataclass(frozen=True)
class UploadResult:
    """Content identifier and retrieval URL of an uploaded payload."""

    id: str
    url: str


class ArtifactStore(ABC):
    """Abstract base class for artifact storage."""

    @abstractmethod
    async def upload(
        self, data: bytes, content_type: str, tags: Optional[Dict[str, str]] = None
    ) -> UploadResult:
        """Store a binary payload with key/value tags.

        Raises:
            StorageUploadFailed: If the payload could not be stored
        """
        pass

    async def upload_json(
        self, document: Dict[str, Any], tags: Optional[Dict[str, str]] = None
    ) -> UploadResult:
        """Store a JSON document (metadata) with the application tags."""
        body = json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
        return await self.upload(
            body, "application/json", {**METADATA_TAGS, **(tags or {})}
        )

    async def close(self) -> None:
        """Release transport resources."""
        pass


class LocalArtifactStore(ArtifactStore):
    """Filesystem artifact store (file:// URIs).

    Structure:
        <root>/
        ├── <sha256>              # payload
        └── <sha256>.tags.json    # content type and tags
    """

    def __init__(self, root: Path, public_url: str):
        self.root = root
        self.public_url = public_url.rstrip("/")

    async def upload(
        self, data: bytes, content_type: str, tags: Optional[Dict[str, str]] = None
    ) -> UploadResult:
        artifact_id = hashlib.sha256(data).hexdigest()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / artifact_id).write_bytes(data)
            (self.root / f"{artifact_id}.tags.json").write_text(
                json.dumps({"Content-Type": content_type, **(tags or {})}, indent=2),
                encoding="utf-8",
            )
        except OSError as e:
            raise StorageUploadFailed(f"Error al subir al almacenamiento: {e}") from e

        result = UploadResult(id=artifact_id, url=f"{self.public_url}/{artifact_id}")
        logger.debug("Artifact stored locally", artifact_id=artifact_id, size=len(data))
        return result


class GatewayArtifactStore(ArtifactStore):
    """Upload gateway client.

    The gateway owns the storage-network wallet: it prices, signs and posts the
    transaction and answers ``{"id": "<transaction id>"}``.
    """

    def __init__(
        self,
        base_url: str,
        public_url: str,
        token: Optional[str] = None,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.public_url = public_url.rstrip("/")
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Authorization": f"Bearer {token}"} if token else {},
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def upload(
        self, data: bytes, content_type: str, tags: Optional[Dict[str, str]] = None
    ) -> UploadResult:
        headers = {
            "Content-Type": content_type,
            "X-Tags": json.dumps(tags or {}, ensure_ascii=True),
        }
        try:
            response = await self.client.post(
                f"{self.base_url}/upload", content=data, headers=headers
            )
            response.raise_for_status()
            artifact_id = response.json()["id"]
        except httpx.HTTPStatusError as e:
            logger.error(
                "Artifact gateway rejected upload",
                status_code=e.response.status_code,
                body=e.response.text[:500],
            )
            raise StorageUploadFailed(
                f"Error al subir a Arweave: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("Artifact gateway unreachable", error=str(e))
            raise StorageUploadFailed(f"Error al subir a Arweave: {e}") from e
        except (ValueError, KeyError) as e:
            raise StorageUploadFailed(
                "Respuesta inválida del gateway de almacenamiento"
            ) from e

        return UploadResult(id=artifact_id, url=f"{self.public_url}/{artifact_id}")


def create_artifact_store(settings: Settings) -> ArtifactStore:
    """Factory function to create the appropriate ArtifactStore from the URI.

    Raises:
        ValueError: If URI scheme is not supported
    """
    uri = settings.artifact_store_url
    parsed = urlparse(uri)

    if parsed.scheme == "file":
        # file://./data/artifacts keeps the relative path in netloc + path
        root = Path(f"{parsed.netloc}{parsed.path}")
        return LocalArtifactStore(root, settings.artifact_public_url)

    elif parsed.scheme in ("http", "https"):
        return GatewayArtifactStore(
            uri,
            settings.artifact_public_url,
            token=settings.artifact_gateway_token,
            timeout=settings.artifact_timeout_seconds,
        )

    else:
        raise ValueError(
            f"Unsupported storage scheme: {parsed.scheme}. "
            f"Supported: file://, https://"
        )
