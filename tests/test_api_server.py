"""
Tests for the HTTP API.

Covers: calculate route, request validation codes, auth, rate limiting,
health, 404 envelope and the JSONL calculation log.
"""

import json

import pytest

import api_server
from config import config
from rate_limit import FixedWindowRateLimiter

CALCULATE = "/api/v1/calculate"


class TestCalculateRoute:
    def test_success(self, client):
        resp = client.post(CALCULATE, json={"expression": "2 + 3 * 4"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["result"] == pytest.approx(14)
        assert body["expression"] == "2 + 3 * 4"
        assert body["timestamp"].endswith("Z")

    def test_expression_is_trimmed(self, client):
        resp = client.post(CALCULATE, json={"expression": "  (2 + 3) * 4  "})
        assert resp.json()["expression"] == "(2 + 3) * 4"
        assert resp.json()["result"] == pytest.approx(20)

    @pytest.mark.parametrize(
        "expression, code",
        [
            ("5 / 0", "DIVISION_BY_ZERO"),
            ("2 & 3", "INVALID_CHARACTER"),
            ("2 ** 3", "INVALID_CHARACTER"),
            ("(2 + 3", "MISMATCHED_PARENTHESES"),
            ("2 +", "INVALID_EXPRESSION_FORMAT"),
            ("1 2", "INVALID_EXPRESSION_FORMAT"),
            ("2..5 + 3", "CALCULATION_ERROR"),
        ],
    )
    def test_calculation_errors(self, client, expression, code):
        resp = client.post(CALCULATE, json={"expression": expression})

        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["code"] == code
        assert body["expression"] == expression

    def test_error_message_is_verbatim(self, client):
        resp = client.post(CALCULATE, json={"expression": " 5 / 0 "})
        body = resp.json()
        assert body["error"] == "Division by zero is not allowed"
        assert body["expression"] == " 5 / 0 "


class TestRequestValidation:
    @pytest.mark.parametrize(
        "payload, code",
        [
            ({}, "MISSING_EXPRESSION"),
            ({"expression": ""}, "MISSING_EXPRESSION"),
            ({"expression": None}, "MISSING_EXPRESSION"),
            ({"expression": 5}, "INVALID_EXPRESSION_TYPE"),
            ({"expression": ["1 + 1"]}, "INVALID_EXPRESSION_TYPE"),
            ({"expression": "   "}, "EMPTY_EXPRESSION"),
            ({"expression": "1+" * 600 + "1"}, "EXPRESSION_TOO_LONG"),
        ],
    )
    def test_rejected_payloads(self, client, payload, code):
        resp = client.post(CALCULATE, json=payload)

        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert resp.json()["code"] == code

    def test_missing_body(self, client):
        resp = client.post(CALCULATE)
        assert resp.status_code == 400
        assert resp.json()["code"] == "MISSING_EXPRESSION"

    def test_malformed_json(self, client):
        resp = client.post(
            CALCULATE,
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_REQUEST_BODY"


class TestAuth:
    @pytest.fixture(autouse=True)
    def api_key(self, monkeypatch):
        monkeypatch.setattr(config.server, "api_key", "secret-key")

    def test_missing_key(self, client):
        resp = client.post(CALCULATE, json={"expression": "1 + 1"})
        assert resp.status_code == 401
        assert resp.json()["code"] == "MISSING_API_KEY"

    def test_wrong_key(self, client):
        resp = client.post(
            CALCULATE, json={"expression": "1 + 1"}, headers={"X-API-Key": "nope"}
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == "INVALID_API_KEY"

    def test_x_api_key_header(self, client):
        resp = client.post(
            CALCULATE, json={"expression": "1 + 1"}, headers={"X-API-Key": "secret-key"}
        )
        assert resp.status_code == 200

    @pytest.mark.parametrize(
        "value",
        ["Bearer secret-key", "bearer secret-key", "Bearer  secret-key", "Bearer\tsecret-key", "secret-key"],
    )
    def test_authorization_header(self, client, value):
        resp = client.post(
            CALCULATE, json={"expression": "1 + 1"}, headers={"Authorization": value}
        )
        assert resp.status_code == 200

    def test_auth_checked_before_validation(self, client):
        resp = client.post(CALCULATE, json={})
        assert resp.status_code == 401

    def test_health_is_public(self, client):
        assert client.get("/api/v1/health").status_code == 200


class TestRateLimiting:
    @pytest.fixture(autouse=True)
    def tight_limits(self, monkeypatch):
        monkeypatch.setattr(config.rate_limit, "enabled", True)
        monkeypatch.setattr(api_server, "calculation_limiter", FixedWindowRateLimiter(2, 60))
        monkeypatch.setattr(api_server, "api_limiter", FixedWindowRateLimiter(100, 900))

    def test_calculation_limit(self, client):
        for _ in range(2):
            assert client.post(CALCULATE, json={"expression": "1 + 1"}).status_code == 200

        resp = client.post(CALCULATE, json={"expression": "1 + 1"})
        assert resp.status_code == 429
        body = resp.json()
        assert body["code"] == "CALCULATION_RATE_LIMIT_EXCEEDED"
        assert body["retryAfter"] == "1 minute"
        assert int(resp.headers["Retry-After"]) > 0

    def test_api_limit(self, client, monkeypatch):
        monkeypatch.setattr(api_server, "api_limiter", FixedWindowRateLimiter(1, 900))

        assert client.get("/api/v1/health").status_code == 200
        resp = client.get("/api/v1/health")
        assert resp.status_code == 429
        assert resp.json()["code"] == "RATE_LIMIT_EXCEEDED"
        assert resp.json()["retryAfter"] == "15 minutes"

    def test_disabled(self, client, monkeypatch):
        monkeypatch.setattr(config.rate_limit, "enabled", False)
        for _ in range(5):
            assert client.post(CALCULATE, json={"expression": "1 + 1"}).status_code == 200

    def test_rate_limit_headers_on_allowed_request(self, client):
        resp = client.post(CALCULATE, json={"expression": "1 + 1"})

        assert resp.status_code == 200
        # the calculation limiter runs last, so its numbers are reported
        assert resp.headers["RateLimit-Limit"] == "2"
        assert resp.headers["RateLimit-Remaining"] == "1"
        assert 0 < int(resp.headers["RateLimit-Reset"]) <= 60

    def test_rate_limit_headers_on_health(self, client):
        resp = client.get("/api/v1/health")
        assert resp.headers["RateLimit-Limit"] == "100"
        assert resp.headers["RateLimit-Remaining"] == "99"

    def test_rate_limit_headers_on_rejection(self, client):
        for _ in range(2):
            client.post(CALCULATE, json={"expression": "1 + 1"})

        resp = client.post(CALCULATE, json={"expression": "1 + 1"})
        assert resp.status_code == 429
        assert resp.headers["RateLimit-Limit"] == "2"
        assert resp.headers["RateLimit-Remaining"] == "0"
        assert resp.headers["RateLimit-Reset"] == resp.headers["Retry-After"]

    def test_no_headers_when_disabled(self, client, monkeypatch):
        monkeypatch.setattr(config.rate_limit, "enabled", False)
        resp = client.post(CALCULATE, json={"expression": "1 + 1"})
        assert "RateLimit-Limit" not in resp.headers


class TestMiscRoutes:
    def test_health(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_unknown_route(self, client):
        resp = client.get("/api/v2/whatever")
        assert resp.status_code == 404
        body = resp.json()
        assert body["code"] == "NOT_FOUND"
        assert body["error"] == "Endpoint not found"
        assert "POST /api/v1/calculate" in body["availableEndpoints"]

    def test_cors_preflight(self, client):
        resp = client.options(
            CALCULATE,
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "X-API-Key",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"


class TestCalculationLog:
    def test_success_and_failure_logged(self, client, log_file):
        client.post(CALCULATE, json={"expression": "6 / 3"})
        client.post(CALCULATE, json={"expression": "6 / 0"})

        with open(log_file, encoding="utf-8") as f:
            records = [json.loads(line) for line in f]

        assert [r["success"] for r in records] == [True, False]
        assert records[0]["result"] == pytest.approx(2)
        assert records[1]["code"] == "DIVISION_BY_ZERO"
        assert all(r["source"] == "api" for r in records)
