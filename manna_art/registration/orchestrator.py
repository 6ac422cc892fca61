"""
Registration orchestrator.

Coordinates billing, the artifact store, the IP registry and the catalog to
register a new artwork or a derivative (remix) of a catalog artwork.

New registration:
    1. entitlement check (billing)        fatal, before any side effect
    2. primary upload (artifact store)    fatal
    3. metadata upload (artifact store)   fatal; the primary upload stays
    4. mint and register (IP registry)    policy, best effort by default
    5. catalog insert                     fatal; durability point
    6. usage increment (billing)          logged on failure

Remix:
    1. parent lookup (catalog)            fatal, before any side effect
    2. primary and metadata uploads       fatal
    3. derivative registration            policy, required by default
    4. catalog insert                     fatal

Nothing is retried here and uploads that already succeeded are never undone:
the artifact store has no delete.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Dict, List, Optional, Tuple, Type

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..billing.client import Billing
from ..billing.plans import DEV_MODE_PLAN, PlanTier, registrations_limit
from ..catalog.schemas import Artwork, ArtworkCreate
from ..catalog.store import CatalogStore
from ..errors import (
    DerivativeRegistrationFailed,
    MannaError,
    NoActiveSubscription,
    OnChainRegistrationFailed,
    ParentNotFound,
    ParentNotRemixable,
    RegistrationLimitExceeded,
    StorageUploadFailed,
)
from ..registry.client import IPRegistration, IPRegistry
from ..storage.artifacts import ArtifactStore, UploadResult
from .requests import RegistrationRequest, RemixRequest

logger = structlog.get_logger(__name__)

PLATFORM_NAME = "Manna Art"

MESSAGE_REGISTERED = "Obra registrada exitosamente en Arweave y Story Protocol."
MESSAGE_STORED_ONLY = (
    "Obra registrada en Arweave. Story Protocol no disponible en este momento."
)
MESSAGE_REMIXED = "Remix creado exitosamente como derivative IP en Story Protocol"


class OnChainPolicy(str, Enum):
    """What a failed on-chain step does to the whole operation."""

    BEST_EFFORT = "best_effort"
    REQUIRED = "required"


@dataclass(frozen=True)
class Entitlement:
    """Quota snapshot taken before a new registration."""

    subscription_id: Optional[str]
    plan: PlanTier
    used: int
    limit: int


class _ResultModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class RegistrationResult(_ResultModel):
    artwork_id: str
    file_url: str
    file_id: str
    metadata_url: str
    metadata_id: str
    story_ip_id: Optional[str] = None
    story_token_id: Optional[str] = None
    story_tx_hash: Optional[str] = None
    registrations_used: int
    registrations_limit: int
    message: str


class RemixResult(_ResultModel):
    artwork_id: str
    file_url: str
    file_id: str
    metadata_url: str
    metadata_id: str
    ip_id: str
    token_id: str
    tx_hash: str
    parent_ip_id: str
    message: str


def build_metadata(
    request: RegistrationRequest,
    file_url: str,
    created_at: datetime,
    parent_ip_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Metadata document uploaded next to the file and used as IP/NFT metadata."""
    attributes: List[Dict[str, str]] = [
        {"trait_type": "IP Type", "value": request.ip_type.value},
        {"trait_type": "Creator", "value": request.wallet_address},
        {"trait_type": "Platform", "value": PLATFORM_NAME},
    ]
    if parent_ip_id:
        attributes.append({"trait_type": "Type", "value": "Remix/Derivative"})
        attributes.append({"trait_type": "Parent IP ID", "value": parent_ip_id})

    return {
        "title": request.title,
        "description": request.description,
        "ipType": request.ip_type.value,
        "creators": [request.wallet_address],
        "createdAt": created_at.isoformat(),
        "externalUrl": file_url,
        "image": file_url,
        "attributes": attributes,
    }


def _is_complete(registration: Optional[IPRegistration], require_terms: bool) -> bool:
    if registration is None:
        return False
    if not registration.ip_id or not registration.token_id:
        return False
    return bool(registration.license_terms_ids) or not require_terms


class RegistrationOrchestrator:
    """Runs the new-registration and remix workflows against injected collaborators."""

    def __init__(
        self,
        catalog: CatalogStore,
        artifacts: ArtifactStore,
        registry: IPRegistry,
        billing: Billing,
        skip_entitlement: bool = False,
    ):
        self.catalog = catalog
        self.artifacts = artifacts
        self.registry = registry
        self.billing = billing
        self.skip_entitlement = skip_entitlement

    async def check_entitlement(self, email: Optional[str]) -> Entitlement:
        """Ensure the subscriber has registrations left in the current period.

        Raises:
            NoActiveSubscription: No active subscription for the email
            RegistrationLimitExceeded: registrations_used >= registrations_limit
        """
        if self.skip_entitlement:
            logger.warning("Subscription check skipped", plan=DEV_MODE_PLAN.value)
            return Entitlement(
                subscription_id=None,
                plan=DEV_MODE_PLAN,
                used=0,
                limit=registrations_limit(DEV_MODE_PLAN),
            )

        subscription = await self.billing.get_active_subscription(email) if email else None
        if subscription is None:
            raise NoActiveSubscription()

        plan = subscription.plan or PlanTier.CREADOR
        if not subscription.has_quota:
            logger.info(
                "Registration limit reached",
                email=email,
                plan=plan.value,
                used=subscription.registrations_used,
                limit=subscription.registrations_limit,
            )
            raise RegistrationLimitExceeded(plan.value, subscription.registrations_limit)

        return Entitlement(
            subscription_id=subscription.id,
            plan=plan,
            used=subscription.registrations_used,
            limit=subscription.registrations_limit,
        )

    async def _upload(
        self,
        request: RegistrationRequest,
        tags: Dict[str, str],
        parent_ip_id: Optional[str] = None,
    ) -> Tuple[UploadResult, UploadResult]:
        try:
            file_result = await self.artifacts.upload(request.file, request.content_type, tags)
            logger.info("File uploaded", file_id=file_result.id, url=file_result.url)

            metadata = build_metadata(
                request, file_result.url, datetime.now(timezone.utc), parent_ip_id
            )
            metadata_result = await self.artifacts.upload_json(metadata)
            logger.info(
                "Metadata uploaded", metadata_id=metadata_result.id, url=metadata_result.url
            )
        except StorageUploadFailed:
            raise
        except Exception as e:
            raise StorageUploadFailed(f"Error al subir a Arweave: {e}") from e

        return file_result, metadata_result

    async def _on_chain(
        self,
        call: Awaitable[IPRegistration],
        policy: OnChainPolicy,
        require_terms: bool,
        failure: Type[OnChainRegistrationFailed],
    ) -> Optional[IPRegistration]:
        try:
            registration = await call
            if not _is_complete(registration, require_terms):
                raise OnChainRegistrationFailed(
                    "El registro on-chain no devolvió ipId, tokenId y license terms"
                )
        except Exception as e:
            if policy is OnChainPolicy.REQUIRED:
                message = e.message if isinstance(e, MannaError) else str(e)
                raise failure(message) from e
            logger.error("On-chain registration failed, continuing", error=str(e), exc_info=True)
            return None

        logger.info(
            "IP registered on-chain",
            ip_id=registration.ip_id,
            token_id=registration.token_id,
            tx_hash=registration.tx_hash,
            license_terms_ids=registration.license_terms_ids,
        )
        return registration

    async def register_artwork(
        self,
        request: RegistrationRequest,
        on_chain: OnChainPolicy = OnChainPolicy.BEST_EFFORT,
    ) -> RegistrationResult:
        """Register a new artwork; see the module docstring for the steps."""
        entitlement = await self.check_entitlement(request.email)

        file_result, metadata_result = await self._upload(
            request,
            {
                "Title": request.title,
                "Type": request.ip_type.value,
                "Creator": request.wallet_address,
            },
        )

        registration = await self._on_chain(
            self.registry.mint_and_register(
                metadata_uri=metadata_result.url,
                recipient=request.wallet_address,
                license_fee=request.license_fee,
                commercial_rev_share=request.commercial_rev_share,
            ),
            on_chain,
            require_terms=True,
            failure=OnChainRegistrationFailed,
        )

        artwork = self.catalog.insert(
            ArtworkCreate(
                title=request.title,
                description=request.description,
                ip_type=request.ip_type,
                file_url=file_result.url,
                file_id=file_result.id,
                metadata_url=metadata_result.url,
                metadata_id=metadata_result.id,
                creator_wallet=request.wallet_address,
                creator_email=request.email,
                ip_id=registration.ip_id if registration else None,
                nft_token_id=registration.token_id if registration else None,
                license_terms_ids=registration.license_terms_ids if registration else None,
            )
        )
        logger.info("Artwork saved", artwork_id=artwork.id, ip_id=artwork.ip_id)

        registrations_used = await self._record_usage(entitlement, artwork)

        return RegistrationResult(
            artwork_id=artwork.id,
            file_url=artwork.file_url,
            file_id=artwork.file_id,
            metadata_url=artwork.metadata_url,
            metadata_id=artwork.metadata_id,
            story_ip_id=artwork.ip_id,
            story_token_id=artwork.nft_token_id,
            story_tx_hash=registration.tx_hash if registration else None,
            registrations_used=registrations_used,
            registrations_limit=entitlement.limit,
            message=MESSAGE_REGISTERED if registration else MESSAGE_STORED_ONLY,
        )

    async def _record_usage(self, entitlement: Entitlement, artwork: Artwork) -> int:
        used = entitlement.used + 1
        if entitlement.subscription_id is None:
            return used
        try:
            used = await self.billing.increment_usage(entitlement.subscription_id)
        except Exception as e:
            logger.warning(
                "Usage counter not updated",
                subscription_id=entitlement.subscription_id,
                artwork_id=artwork.id,
                error=str(e),
                exc_info=True,
            )
        return used

    def find_remixable_parent(self, parent_ip_id: str) -> Artwork:
        """Return the parent artwork if it exists and carries license terms.

        Raises:
            ParentNotFound: No catalog record has this ipId
            ParentNotRemixable: The parent has no license terms
        """
        parent = self.catalog.get_by_ip_id(parent_ip_id)
        if parent is None:
            raise ParentNotFound(parent_ip_id)
        if not parent.license_terms_ids:
            raise ParentNotRemixable(parent_ip_id)
        return parent

    async def register_remix(
        self,
        request: RemixRequest,
        on_chain: OnChainPolicy = OnChainPolicy.REQUIRED,
    ) -> RemixResult:
        """Register a derivative of a catalog artwork under the parent's license terms."""
        parent = self.find_remixable_parent(request.parent_ip_id)
        logger.info(
            "Remixing artwork",
            parent_ip_id=parent.ip_id,
            parent_artwork_id=parent.id,
            license_terms_ids=parent.license_terms_ids,
        )

        file_result, metadata_result = await self._upload(
            request,
            {
                "Title": request.title,
                "Type": request.ip_type.value,
                "Creator": request.wallet_address,
                "Parent-IP": request.parent_ip_id,
                "Is-Remix": "true",
            },
            parent_ip_id=request.parent_ip_id,
        )

        registration = await self._on_chain(
            self.registry.register_derivative(
                parent_ip_id=request.parent_ip_id,
                parent_license_terms_ids=list(parent.license_terms_ids),
                recipient=request.wallet_address,
                metadata_uri=metadata_result.url,
                license_fee=request.license_fee,
                commercial_rev_share=request.commercial_rev_share,
            ),
            on_chain,
            require_terms=False,
            failure=DerivativeRegistrationFailed,
        )

        artwork = self.catalog.insert(
            ArtworkCreate(
                title=request.title,
                description=request.description,
                ip_type=request.ip_type,
                file_url=file_result.url,
                file_id=file_result.id,
                metadata_url=metadata_result.url,
                metadata_id=metadata_result.id,
                creator_wallet=request.wallet_address,
                creator_email=request.email,
                ip_id=registration.ip_id if registration else None,
                nft_token_id=registration.token_id if registration else None,
                license_terms_ids=list(parent.license_terms_ids) if registration else None,
                parent_ip_id=request.parent_ip_id,
                is_remix=True,
            )
        )
        logger.info(
            "Remix saved",
            artwork_id=artwork.id,
            ip_id=artwork.ip_id,
            parent_ip_id=artwork.parent_ip_id,
        )

        return RemixResult(
            artwork_id=artwork.id,
            file_url=artwork.file_url,
            file_id=artwork.file_id,
            metadata_url=artwork.metadata_url,
            metadata_id=artwork.metadata_id,
            ip_id=artwork.ip_id or "",
            token_id=artwork.nft_token_id or "",
            tx_hash=registration.tx_hash if registration else "",
            parent_ip_id=request.parent_ip_id,
            message=MESSAGE_REMIXED,
        )
