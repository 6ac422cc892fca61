"""
Collaborator wiring.

All external clients are constructed once here and handed to the
orchestrator and the routers; nothing is held in module-level state.
"""

from dataclasses import dataclass

import structlog

from .billing.client import Billing, StripeBilling
from .catalog.store import CatalogStore, create_catalog_store
from .config import Settings
from .registration.orchestrator import RegistrationOrchestrator
from .registry.client import IPRegistry, StoryIPRegistry
from .storage.artifacts import ArtifactStore, create_artifact_store

logger = structlog.get_logger(__name__)


@dataclass
class Services:
    """Collaborators shared by the request handlers."""

    catalog: CatalogStore
    artifacts: ArtifactStore
    registry: IPRegistry
    billing: Billing
    orchestrator: RegistrationOrchestrator

    @classmethod
    def create(
        cls,
        catalog: CatalogStore,
        artifacts: ArtifactStore,
        registry: IPRegistry,
        billing: Billing,
        skip_entitlement: bool = False,
    ) -> "Services":
        orchestrator = RegistrationOrchestrator(
            catalog=catalog,
            artifacts=artifacts,
            registry=registry,
            billing=billing,
            skip_entitlement=skip_entitlement,
        )
        return cls(catalog, artifacts, registry, billing, orchestrator)

    async def aclose(self) -> None:
        await self.artifacts.close()
        self.catalog.close()


def build_services(settings: Settings) -> Services:
    """Build the production collaborators from settings."""
    catalog = create_catalog_store(settings)
    artifacts = create_artifact_store(settings)
    registry = StoryIPRegistry(settings)
    billing = StripeBilling(settings)

    logger.info(
        "Services configured",
        catalog_backend=settings.catalog_backend,
        artifact_store=type(artifacts).__name__,
        skip_subscription=settings.dev_mode_skip_subscription,
    )
    return Services.create(
        catalog,
        artifacts,
        registry,
        billing,
        skip_entitlement=settings.dev_mode_skip_subscription,
    )
