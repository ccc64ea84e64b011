"""
Basic application tests.

Validates that the FastAPI app starts correctly and the
health endpoint responds as expected.
"""

from fastapi.testclient import TestClient

import errorlayer
from errorlayer.main import app

client = TestClient(app)


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_returns_200(self) -> None:
        """Health endpoint must return HTTP 200 with status ok."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200

    def test_health_response_body(self) -> None:
        """Health endpoint must return status and version fields."""
        response = client.get("/api/v1/health")
        body = response.json()
        assert body["status"] == "ok"
        assert "version" in body


class TestApplicationWiring:
    """The default app carries the error pipeline."""

    def test_pipeline_is_registered(self) -> None:
        assert app.state.error_pipeline is not None

    def test_docs_hidden_outside_development(self) -> None:
        assert client.get("/docs").status_code == 404

    def test_package_docstring_describes_layers(self) -> None:
        assert "Layers:" in errorlayer.__doc__
