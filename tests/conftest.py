"""Test configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from fakes import FakeArtifactStore, FakeBilling, FakeRegistry
from manna_art.api import create_app
from manna_art.catalog.store import JsonCatalogStore
from manna_art.config import Settings
from manna_art.services import Services


@pytest.fixture
def catalog(tmp_path) -> JsonCatalogStore:
    return JsonCatalogStore(tmp_path / "artworks.json")


@pytest.fixture
def artifacts() -> FakeArtifactStore:
    return FakeArtifactStore()


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def billing() -> FakeBilling:
    return FakeBilling()


@pytest.fixture
def services(catalog, artifacts, registry, billing) -> Services:
    return Services.create(catalog, artifacts, registry, billing)


@pytest.fixture
def orchestrator(services):
    return services.orchestrator


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        log_format="console",
        catalog_path=str(tmp_path / "artworks.json"),
        artifact_store_url=f"file://{tmp_path / 'artifacts'}",
        storyscan_url="https://storyscan.test",
    )


@pytest.fixture
def client(settings, services):
    app = create_app(settings=settings, services=services)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
