from unittest.mock import patch

from modules.core import views


class TestHealthCheck:
    def test_health_check_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert set(data["services"]) == {"database", "cache"}

    def test_health_check_reports_response_times(self, client):
        data = client.get("/health").json()
        for service in ("database", "cache"):
            assert data["services"][service]["status"] == "up"
            assert "response_time_ms" in data["services"][service]

    def test_failing_cache_returns_503(self, client):
        def broken():
            raise ConnectionError("redis down")

        with patch.dict(views.CHECKS, {"cache": broken}):
            response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["services"]["cache"] == {"status": "down"}
        assert data["services"]["database"]["status"] == "up"
