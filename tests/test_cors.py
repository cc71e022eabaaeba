#!/usr/bin/env python3
"""
Pytest tests for CORS configuration
Tests that the FastAPI application handles CORS requests from the quiz frontend
"""

import pytest
from fastapi.testclient import TestClient

from app.main import app


class TestCORSConfiguration:
    """Test CORS middleware configuration"""

    def setup_method(self):
        """Set up test fixtures"""
        self.client = TestClient(app)
        self.frontend_origin = "http://localhost:3000"

    def test_cors_preflight_request(self):
        """Test CORS preflight OPTIONS request"""
        response = self.client.options(
            "/",
            headers={
                "Origin": self.frontend_origin,
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == self.frontend_origin
        assert "access-control-allow-methods" in response.headers
        assert "access-control-allow-headers" in response.headers

    def test_cors_simple_get_request(self):
        response = self.client.get("/", headers={"Origin": self.frontend_origin})

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == self.frontend_origin
        assert response.json() == {"message": "Quiz responder backend is running"}

    def test_cors_allows_credentials(self):
        response = self.client.get("/", headers={"Origin": self.frontend_origin})

        assert response.headers["access-control-allow-credentials"] == "true"

    def test_cors_preflight_for_submission(self):
        """Respondents POST their answers with an Authorization header"""
        response = self.client.options(
            "/quizzes/1/submit",
            headers={
                "Origin": self.frontend_origin,
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Authorization,Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == self.frontend_origin
        assert "POST" in response.headers.get("access-control-allow-methods", "").upper()
        assert response.headers.get("access-control-allow-headers")

    def test_cors_preflight_for_admin_routes(self):
        for method in ["GET", "POST", "PUT", "DELETE"]:
            response = self.client.options(
                "/admin/questions/1",
                headers={
                    "Origin": self.frontend_origin,
                    "Access-Control-Request-Method": method,
                },
            )

            assert response.status_code == 200
            assert method in response.headers.get("access-control-allow-methods", "").upper()

    def test_cors_without_origin_header(self):
        response = self.client.get("/")

        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers


class TestCORSSecurityScenarios:
    """Test CORS security scenarios"""

    def setup_method(self):
        self.client = TestClient(app)

    @pytest.mark.parametrize(
        "origin",
        ["http://localhost:4000", "http://127.0.0.1:3000", "http://evil-site.com"],
    )
    def test_unlisted_origin_is_not_echoed(self, origin):
        response = self.client.get("/", headers={"Origin": origin})

        # Request succeeds; enforcement happens in the browser
        assert response.status_code == 200
        if "access-control-allow-origin" in response.headers:
            assert response.headers["access-control-allow-origin"] != origin

    def test_unlisted_origin_preflight_is_rejected(self):
        response = self.client.options(
            "/responder/login",
            headers={
                "Origin": "http://evil-site.com",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 400


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
