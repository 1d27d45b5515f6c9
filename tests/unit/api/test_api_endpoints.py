"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from heritage_ai.api.dependencies import get_orchestrator
from heritage_ai.config import settings as config
from heritage_ai.domain.exceptions import ConfigurationException
from heritage_ai.main import create_app


@pytest.fixture
def app():
    """Create an application with testing settings."""
    return create_app(config.TestingSettings())


@pytest.fixture
def make_client(app, build_orchestrator):
    """Factory for a test client whose orchestrator uses fakes."""

    def _make(**limits) -> TestClient:
        orchestrator = build_orchestrator(**limits)
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


class TestPlaceDetailsEndpoint:
    """Test POST /api/v1/places/details."""

    def test_ok(self, make_client):
        """Test a live composite response."""
        client = make_client()

        response = client.post(
            "/api/v1/places/details",
            json={"placeName": "Taj Mahal", "language": "English"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["payload"]["metadata"]["placeName"] == "Taj Mahal"
        assert data["payload"]["served_from"] == "live"

    def test_rate_limited_returns_429(self, make_client):
        """Test that rejections map to 429 with Retry-After."""
        client = make_client(composite_limit=1)
        body = {"placeName": "Taj Mahal", "language": "English"}
        client.post("/api/v1/places/details", json=body)

        response = client.post("/api/v1/places/details", json=body)

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        data = response.json()
        assert data["status"] == "rejected"
        assert data["reason"] == "rate_limited"
        assert data["payload"]["served_from"] == "fallback"

    def test_client_identity_from_header(self, make_client):
        """Test that the client-ip header keys the rate limit."""
        client = make_client(composite_limit=1)
        body = {"placeName": "Taj Mahal", "language": "English"}

        first = client.post(
            "/api/v1/places/details", json=body, headers={"client-ip": "10.0.0.1"}
        )
        second = client.post(
            "/api/v1/places/details",
            json=body,
            headers={"x-forwarded-for": "10.0.0.2, 10.0.0.1"},
        )

        assert first.status_code == 200
        assert second.status_code == 200

    def test_missing_field_is_422(self, make_client):
        """Test request body validation."""
        client = make_client()

        response = client.post("/api/v1/places/details", json={"language": "English"})

        assert response.status_code == 422
        data = response.json()
        assert data["code"] == "validation_error"
        assert data["validation_errors"][0]["field"] == "body.placeName"

    def test_blank_subject_is_422(self, make_client):
        """Test that whitespace-only subjects are rejected."""
        client = make_client()

        response = client.post(
            "/api/v1/places/details", json={"placeName": "   ", "language": "English"}
        )

        assert response.status_code == 422
        assert response.json()["details"]["field"] == "placeName"

    def test_configuration_error_is_503(self, app):
        """Test that application errors map onto HTTP statuses."""

        class BrokenOrchestrator:
            async def fetch_composite(self, *args, **kwargs):
                raise ConfigurationException("no image providers configured")

        app.dependency_overrides[get_orchestrator] = lambda: BrokenOrchestrator()

        response = TestClient(app).post(
            "/api/v1/places/details",
            json={"placeName": "Hampi", "language": "English"},
        )

        assert response.status_code == 503
        assert response.json()["code"] == "configuration_error"

    def test_correlation_id_echoed(self, make_client):
        """Test that the correlation ID is returned."""
        client = make_client()

        response = client.post(
            "/api/v1/places/details",
            json={"placeName": "Hampi", "language": "English"},
            headers={"X-Correlation-ID": "abc-123"},
        )

        assert response.headers["X-Correlation-ID"] == "abc-123"
        assert "X-Process-Time" in response.headers


class TestImageEndpoints:
    """Test the image endpoints."""

    def test_generate_placeholder(self, make_client):
        """Test that an image is always returned."""
        client = make_client()

        response = client.post(
            "/api/v1/images/generate", json={"placeName": "Hampi"}
        )

        assert response.status_code == 200
        payload = response.json()["payload"]
        assert payload["provider"] == "placeholder"
        assert payload["image_ref"].endswith("?text=Hampi")

    def test_analyze(self, make_client):
        """Test photo analysis."""
        client = make_client()

        response = client.post(
            "/api/v1/images/analyze", json={"images": ["aGVsbG8="]}
        )

        assert response.status_code == 200
        assert response.json()["payload"]["sections"][0]["title"] == (
            "Image Description"
        )

    def test_analyze_requires_images(self, make_client):
        """Test that an empty image list is a validation error."""
        client = make_client()

        response = client.post("/api/v1/images/analyze", json={"images": []})

        assert response.status_code == 422


class TestHealthEndpoints:
    """Test health endpoints."""

    def test_health(self, app):
        """Test basic health check."""
        response = TestClient(app).get("/api/v1/health/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_live(self, app):
        """Test liveness check."""
        response = TestClient(app).get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_ready_without_container(self, app):
        """Test readiness before the lifespan has run."""
        response = TestClient(app).get("/api/v1/health/ready")

        assert response.status_code == 503

    def test_ready(self, app):
        """Test readiness with a wired container."""
        with TestClient(app) as client:
            response = client.get("/api/v1/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["text_provider"] == "not_configured"
        assert data["checks"]["image_chain"][-1] == "placeholder"
        assert data["rate_limits"]["total_limiters"] == 3

    def test_root(self, app):
        """Test the root endpoint."""
        response = TestClient(app).get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "running"
