"""Tests for the HTTP surface."""

import logging
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from ttl_shortener.main import create_app
from ttl_shortener.services.code_generator import RESERVED_CODES, URL_SAFE_ALPHABET

TOLERANCE = timedelta(seconds=5)


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def code_from(short_url: str) -> str:
    return short_url.rsplit("/", 1)[1]


class TestShortenEndpoint:
    """Test POST /shorten."""

    def test_scenario_create_one_hour(self, client):
        before = datetime.now(timezone.utc)
        response = client.post("/shorten", json={"originalUrl": "https://example.com", "expireInHours": 1})

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"shortUrl", "expiresAt"}

        assert data["shortUrl"].startswith("http://testserver/")
        code = code_from(data["shortUrl"])
        assert len(code) == 8
        assert set(code) <= set(URL_SAFE_ALPHABET)

        expires_at = parse_timestamp(data["expiresAt"])
        assert abs(expires_at - (before + timedelta(hours=1))) < TOLERANCE

    def test_fractional_hours(self, client):
        before = datetime.now(timezone.utc)
        response = client.post("/shorten", json={"originalUrl": "https://example.com", "expireInHours": 0.25})

        assert response.status_code == 200
        expires_at = parse_timestamp(response.json()["expiresAt"])
        assert abs(expires_at - (before + timedelta(minutes=15))) < TOLERANCE

    def test_codes_are_distinct(self, client, sample_urls):
        codes = {
            code_from(client.post("/shorten", json={"originalUrl": url, "expireInHours": 1}).json()["shortUrl"])
            for url in sample_urls
        }
        assert len(codes) == len(sample_urls)

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"originalUrl": "https://example.com"},
            {"expireInHours": 1},
            {"originalUrl": "", "expireInHours": 1},
            {"originalUrl": "   ", "expireInHours": 1},
            {"originalUrl": 123, "expireInHours": 1},
            {"originalUrl": "https://example.com", "expireInHours": "24"},
            {"originalUrl": "https://example.com", "expireInHours": None},
            {"originalUrl": "https://example.com", "expireInHours": True},
            {"originalUrl": "https://example.com", "expireInHours": [1]},
        ],
    )
    def test_malformed_body_is_400(self, client, body):
        response = client.post("/shorten", json=body)

        assert response.status_code == 400
        assert "detail" in response.json()

    def test_non_json_body_is_400(self, client):
        response = client.post("/shorten", content=b"originalUrl=x", headers={"Content-Type": "text/plain"})
        assert response.status_code == 400

    def test_hours_out_of_range_is_400(self, client):
        response = client.post(
            "/shorten", json={"originalUrl": "https://example.com", "expireInHours": 10_000_000}
        )

        assert response.status_code == 400
        assert "expireInHours" in response.json()["detail"]

    def test_url_too_long_is_400(self, client):
        response = client.post(
            "/shorten", json={"originalUrl": "https://example.com/" + "a" * 3000, "expireInHours": 1}
        )
        assert response.status_code == 400


class TestRedirectEndpoint:
    """Test GET /{short_code}."""

    def test_scenario_never_created(self, client):
        response = client.get("/neverset", follow_redirects=False)

        assert response.status_code == 404
        assert response.text == "URL not found"

    def test_malformed_code_is_not_found(self, client):
        response = client.get("/bad.code!", follow_redirects=False)

        assert response.status_code == 404
        assert response.text == "URL not found"

    def test_scenario_already_expired(self, client):
        created = client.post("/shorten", json={"originalUrl": "https://example.com", "expireInHours": -1})
        assert created.status_code == 200
        code = code_from(created.json()["shortUrl"])

        response = client.get(f"/{code}", follow_redirects=False)

        assert response.status_code == 410
        assert response.text == "This URL has expired"

    def test_zero_hours_expires_immediately(self, client):
        created = client.post("/shorten", json={"originalUrl": "https://example.com", "expireInHours": 0})
        code = code_from(created.json()["shortUrl"])

        response = client.get(f"/{code}", follow_redirects=False)

        assert response.status_code == 410

    def test_scenario_active_redirect(self, client):
        created = client.post(
            "/shorten", json={"originalUrl": "https://example.com/landing?x=1", "expireInHours": 24}
        )
        code = code_from(created.json()["shortUrl"])

        response = client.get(f"/{code}", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com/landing?x=1"

    def test_resolve_is_repeatable(self, client):
        created = client.post("/shorten", json={"originalUrl": "https://example.com", "expireInHours": 24})
        code = code_from(created.json()["shortUrl"])

        for _ in range(3):
            assert client.get(f"/{code}", follow_redirects=False).status_code == 302

    def test_code_with_surrounding_whitespace_is_not_found(self, client):
        created = client.post("/shorten", json={"originalUrl": "https://example.com", "expireInHours": 24})
        code = code_from(created.json()["shortUrl"])

        response = client.get(f"/%20{code}%20", follow_redirects=False)

        assert response.status_code == 404
        assert response.text == "URL not found"
        assert client.get(f"/{code}", follow_redirects=False).status_code == 302


class TestServiceEndpoints:
    """Test health, root and middleware behaviour."""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["message"] == "URL Shortener Service"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": True}

    def test_process_time_header(self, client):
        response = client.get("/health")
        assert "x-process-time" in response.headers

    def test_request_id_is_generated(self, client):
        first = client.get("/health").headers["x-request-id"]
        second = client.get("/health").headers["x-request-id"]

        assert len(first) == 32
        assert first != second

    def test_incoming_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-42"})
        assert response.headers["x-request-id"] == "req-42"

    def test_access_log_level_follows_resolve_outcome(self, client, caplog):
        active = code_from(client.post(
            "/shorten", json={"originalUrl": "https://example.com", "expireInHours": 24}
        ).json()["shortUrl"])
        expired = code_from(client.post(
            "/shorten", json={"originalUrl": "https://example.com", "expireInHours": -1}
        ).json()["shortUrl"])

        caplog.clear()
        with caplog.at_level(logging.DEBUG, logger="ttl_shortener.access"):
            client.get(f"/{active}", follow_redirects=False)
            client.get(f"/{expired}", follow_redirects=False)
            client.get("/neverset", follow_redirects=False)

        access = [r for r in caplog.records if r.name == "ttl_shortener.access"]
        assert [(r.levelno, r.getMessage().rsplit(" ", 1)[1]) for r in access] == [
            (logging.INFO, "outcome=active"),
            (logging.WARNING, "outcome=expired"),
            (logging.WARNING, "outcome=not_found"),
        ]

    def test_fixed_get_routes_are_reserved_codes(self, test_settings):
        app = create_app(test_settings)

        for route in app.routes:
            path = getattr(route, "path", "")
            name = path.lstrip("/")
            if "GET" not in (getattr(route, "methods", None) or set()) or "{" in path or not name:
                continue
            if set(name) <= set(URL_SAFE_ALPHABET):
                assert name in RESERVED_CODES


class TestStoreUnavailable:
    """Store failures become 5xx responses instead of crashing the service."""

    @pytest.fixture
    def schemaless_client(self, test_settings):
        config = test_settings.model_copy(update={"AUTO_CREATE_TABLES": False})
        with TestClient(create_app(config)) as test_client:
            yield test_client

    def test_create_without_schema(self, schemaless_client):
        response = schemaless_client.post(
            "/shorten", json={"originalUrl": "https://example.com", "expireInHours": 1}
        )
        assert response.status_code == 503

    def test_resolve_without_schema(self, schemaless_client):
        response = schemaless_client.get("/abcdefgh", follow_redirects=False)
        assert response.status_code == 503

    def test_service_keeps_serving_after_failure(self, schemaless_client):
        assert schemaless_client.get("/abcdefgh", follow_redirects=False).status_code == 503
        assert schemaless_client.get("/health").status_code == 200


class TestRateLimit:
    """Limits come from the settings of the app being built."""

    @pytest.fixture
    def limited_settings(self, test_settings):
        return test_settings.model_copy(update={
            "RATE_LIMIT_ENABLED": True,
            "RATE_LIMIT_SHORTEN": "2/minute",
            "RATE_LIMIT_REDIRECT": "2/minute",
        })

    @pytest.fixture
    def limited_client(self, limited_settings):
        with TestClient(create_app(limited_settings)) as test_client:
            yield test_client

    def test_third_shorten_is_429(self, limited_client):
        statuses = [
            limited_client.post("/shorten", json={"originalUrl": "https://example.com", "expireInHours": 1}).status_code
            for _ in range(3)
        ]
        assert statuses == [200, 200, 429]

    def test_third_redirect_is_429(self, limited_client):
        created = limited_client.post("/shorten", json={"originalUrl": "https://example.com", "expireInHours": 1})
        code = code_from(created.json()["shortUrl"])

        statuses = [limited_client.get(f"/{code}", follow_redirects=False).status_code for _ in range(3)]

        assert statuses == [302, 302, 429]

    def test_apps_do_not_share_limiter(self, limited_settings, test_settings):
        limited_app = create_app(limited_settings)
        unlimited_app = create_app(test_settings)

        assert limited_app.state.limiter is not unlimited_app.state.limiter
        assert limited_app.state.limiter.enabled is True
        assert unlimited_app.state.limiter.enabled is False

        body = {"originalUrl": "https://example.com", "expireInHours": 1}
        with TestClient(limited_app) as test_client:
            assert [test_client.post("/shorten", json=body).status_code for _ in range(3)] == [200, 200, 429]
        with TestClient(unlimited_app) as test_client:
            assert all(test_client.post("/shorten", json=body).status_code == 200 for _ in range(5))
