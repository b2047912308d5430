"""
Tests for infrastructure endpoints.
"""

from rest_framework import status


class TestHealthCheck:
    """Tests for GET /health/."""

    def test_reports_database_and_cache(self, client, db):
        response = client.get("/health/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "status": "healthy",
            "database": "connected",
            "cache": "connected",
        }


class TestSchema:
    """Tests for the OpenAPI schema endpoint."""

    def test_schema_is_served_without_authentication(self, client, db):
        response = client.get("/api/schema/")

        assert response.status_code == status.HTTP_200_OK
        assert b"/api/messages/" in response.content
