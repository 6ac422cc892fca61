"""FastAPI dependencies resolving the collaborators built at startup."""

from fastapi import HTTPException, Request

from .billing.client import Billing
from .catalog.store import CatalogStore
from .config import Settings
from .registration.orchestrator import RegistrationOrchestrator
from .registry.client import IPRegistry
from .services import Services


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Services not initialized")
    return services


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog(request: Request) -> CatalogStore:
    return get_services(request).catalog


def get_billing(request: Request) -> Billing:
    return get_services(request).billing


def get_registry(request: Request) -> IPRegistry:
    return get_services(request).registry


def get_orchestrator(request: Request) -> RegistrationOrchestrator:
    return get_services(request).orchestrator
