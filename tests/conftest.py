import pytest
from fastapi.testclient import TestClient

from normconv.core.metrics import metrics_registry
from normconv.data.registry import build_store, get_norm_store
from normconv.engine.norms.store import NormativeTableStore
from normconv.main import app
from tests.norm_builders import FIXTURE_FILES, band


@pytest.fixture()
def scenario_store():
    # Two adjacent school-age bands, no all-ages band.
    return NormativeTableStore.load(
        [
            band("8-9", 96, 119, ICV={"20": 97}),
            band("6-7", 72, 95, ICV={"20": 95}),
        ]
    )


@pytest.fixture()
def fixture_store():
    return build_store(FIXTURE_FILES)


@pytest.fixture()
def client(fixture_store):
    app.dependency_overrides[get_norm_store] = lambda: fixture_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def clean_metrics():
    metrics_registry.reset()
    yield
    metrics_registry.reset()
