import json
import logging
import unittest
from unittest import mock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from inventory_api.core.logging import JsonFormatter
from inventory_api.main import create_app
from tests.support import ApiTestMixin, make_settings


class HealthApiTest(ApiTestMixin, unittest.TestCase):
    def test_health(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["environment"], "test")
        self.assertEqual(body["database"]["status"], "healthy")

    def test_detailed_health(self):
        response = self.client.get("/api/health/detailed")
        self.assertEqual(response.status_code, 200)
        checks = response.json()["checks"]
        self.assertEqual(checks["database"]["status"], "healthy")
        self.assertEqual(checks["api"]["status"], "healthy")

    def test_unhealthy_database_returns_503(self):
        failure = OperationalError("SELECT 1", {}, Exception("database is gone"))
        with mock.patch.object(self.app.state.database, "ping", side_effect=failure):
            response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["status"], "unhealthy")
        self.assertEqual(response.json()["database"]["status"], "unhealthy")


class SecurityHeadersTest(ApiTestMixin, unittest.TestCase):
    def test_headers_present(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.headers["X-Content-Type-Options"], "nosniff")
        self.assertEqual(response.headers["X-Frame-Options"], "DENY")
        self.assertIn("Content-Security-Policy", response.headers)
        self.assertNotIn("Strict-Transport-Security", response.headers)

    def test_cors_allows_configured_origin(self):
        response = self.client.get("/api/health", headers={"Origin": "http://localhost:3000"})
        self.assertEqual(response.headers["access-control-allow-origin"], "http://localhost:3000")


class ErrorEnvelopeTest(ApiTestMixin, unittest.TestCase):
    def test_unknown_route(self):
        response = self.client.get("/api/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"status": "error", "message": "Not Found"})

    def test_malformed_json_body(self):
        response = self.client.post(
            "/api/auth/login",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["status"], "error")


class UnhandledErrorTest(unittest.TestCase):
    def _client(self, **overrides):
        app = create_app(make_settings(**overrides))

        @app.get("/api/boom")
        def boom():
            raise RuntimeError("database exploded")

        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        self.addCleanup(client.__exit__, None, None, None)
        return client

    def test_details_exposed_outside_production(self):
        with self.assertLogs("inventory_api.core.errors", level=logging.ERROR):
            response = self._client().get("/api/boom")
        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertEqual(body["message"], "database exploded")
        self.assertTrue(body["stack"])

    def test_details_hidden_in_production(self):
        client = self._client(ENVIRONMENT="production")
        with self.assertLogs("inventory_api.core.errors", level=logging.ERROR):
            response = client.get("/api/boom")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"status": "error", "message": "Something went wrong"})

    def test_production_sends_hsts(self):
        response = self._client(ENVIRONMENT="production").get("/api/health")
        self.assertIn("Strict-Transport-Security", response.headers)


class JsonFormatterTest(unittest.TestCase):
    def test_formats_record_as_json(self):
        record = logging.LogRecord("inventory_api", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        payload = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload["message"], "hello world")
        self.assertEqual(payload["level"], "INFO")
        self.assertEqual(payload["logger"], "inventory_api")
        self.assertNotIn("app", payload)
        self.assertNotIn("path", payload)

    def test_includes_app_and_request_context(self):
        record = logging.LogRecord("inventory_api.requests", logging.INFO, __file__, 1, "done", (), None)
        record.method = "GET"
        record.path = "/api/health"
        record.status_code = 200
        record.duration_ms = 1.5
        formatter = JsonFormatter(app_name="Product Inventory API", environment="test")
        payload = json.loads(formatter.format(record))
        self.assertEqual(payload["app"], "Product Inventory API")
        self.assertEqual(payload["environment"], "test")
        self.assertEqual(payload["method"], "GET")
        self.assertEqual(payload["path"], "/api/health")
        self.assertEqual(payload["status_code"], 200)
        self.assertEqual(payload["duration_ms"], 1.5)


class RequestLoggingTest(ApiTestMixin, unittest.TestCase):
    def test_request_context_is_attached(self):
        with self.assertLogs("inventory_api.requests", level=logging.INFO) as logs:
            self.client.get("/api/health")
        record = logs.records[-1]
        self.assertEqual(record.method, "GET")
        self.assertEqual(record.path, "/api/health")
        self.assertEqual(record.status_code, 200)
        self.assertIsNotNone(record.client)


if __name__ == "__main__":
    unittest.main()
