import pytest
from fastapi.testclient import TestClient

from tests.failing_routes import build_app


@pytest.fixture
def production_client() -> TestClient:
    return TestClient(build_app("production"), raise_server_exceptions=False)


@pytest.fixture
def development_client() -> TestClient:
    return TestClient(build_app("development"), raise_server_exceptions=False)
