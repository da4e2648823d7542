"""Integration tests for postcards.api.main — FastAPI REST API endpoints.

All tests use the FastAPI TestClient with the upstream image API replaced by
an ``httpx.MockTransport``, so no real generation request leaves the process.
Tests cover every endpoint:

- ``GET /`` — form page serving.
- ``GET /health`` — liveness payload.
- ``POST /api/generate`` — prompt building, upstream call and response shape.
- Unknown routes and wrong methods — JSON error bodies.
"""

from __future__ import annotations

from datetime import datetime
from urllib.parse import unquote

import httpx
import pytest

from postcards.core.config import PostcardConfig
from postcards.core.image_client import MAX_SEED
from tests.samples import GIF_BYTES, HTML_BYTES, JPEG_BYTES, PNG_BYTES, WEBP_BYTES

# ---------------------------------------------------------------------------
# Index page and health tests.
# ---------------------------------------------------------------------------


class TestIndexPage:
    """Test GET / — the form page."""

    def test_index_returns_html(self, test_client):
        resp = test_client.get("/")
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert 'id="form"' in resp.text

    def test_static_script_served(self, test_client):
        resp = test_client.get("/static/js/app.js")
        assert resp.status_code == 200
        assert "/api/generate" in resp.text


class TestHealth:
    """Test GET /health."""

    def test_health_payload(self, test_client):
        resp = test_client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["service"] == "Christmas Postcard API"
        assert data["timestamp"].endswith("Z")
        datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))

    def test_health_without_credential(self, make_client, test_config):
        """The service starts and reports healthy even without an API key."""
        client = make_client(test_config.model_copy(update={"pollinations_api_key": None}))
        assert client.get("/health").status_code == 200


# ---------------------------------------------------------------------------
# Generation endpoint tests.
# ---------------------------------------------------------------------------


class TestGenerate:
    """Test POST /api/generate — postcard generation."""

    def _make_payload(self, **overrides) -> dict:
        payload = {"name": "Ana", "wish": "a red bicycle", "seed": 42}
        payload.update(overrides)
        return payload

    def test_generate_success(self, test_client, upstream):
        resp = test_client.post("/api/generate", json=self._make_payload())
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/png"
        assert resp.headers["cache-control"] == "no-cache"
        assert resp.headers["x-seed"] == "42"
        assert resp.content == PNG_BYTES
        assert len(upstream.requests) == 1

    def test_prompt_reaches_upstream(self, test_client, upstream):
        test_client.post(
            "/api/generate",
            json=self._make_payload(name='Ana "Bunny"', message="Love, Grandma"),
        )
        path = upstream.requests[0].url.raw_path.decode().split("?")[0]
        prompt = unquote(path.rsplit("/", 1)[1])
        assert '"Merry christmas, Ana \\"Bunny\\""' in prompt
        assert "a red bicycle" in prompt
        assert '"Love, Grandma"' in prompt

    def test_default_message_used(self, test_client, upstream):
        test_client.post("/api/generate", json=self._make_payload())
        prompt = unquote(upstream.requests[0].url.raw_path.decode())
        assert '"With love."' in prompt

    def test_default_options_sent_upstream(self, test_client, upstream):
        test_client.post("/api/generate", json=self._make_payload())
        request = upstream.requests[0]
        assert request.url.host == "upstream.test"
        assert request.headers["authorization"] == "Bearer test-key"
        params = request.url.params
        assert params["model"] == "nanobanana-pro"
        assert params["width"] == "1536"
        assert params["height"] == "1024"
        assert params["seed"] == "42"
        assert params["nologo"] == "true"
        assert "enhance" not in params

    def test_custom_options_sent_upstream(self, test_client, upstream):
        test_client.post(
            "/api/generate",
            json=self._make_payload(model="flux", width=800, height=600, enhance=True),
        )
        params = upstream.requests[0].url.params
        assert params["model"] == "flux"
        assert params["width"] == "800"
        assert params["height"] == "600"
        assert params["enhance"] == "true"

    def test_seed_drawn_by_server_when_absent(self, test_client, upstream):
        """X-Seed reports the seed actually sent upstream."""
        resp = test_client.post("/api/generate", json={"name": "Ana", "wish": "a bike"})
        assert resp.status_code == 200
        seed = resp.headers["x-seed"]
        assert seed.isdigit()
        assert 0 <= int(seed) < MAX_SEED
        assert upstream.requests[0].url.params["seed"] == seed

    def test_seed_zero_is_kept(self, test_client, upstream):
        resp = test_client.post("/api/generate", json=self._make_payload(seed=0))
        assert resp.headers["x-seed"] == "0"
        assert upstream.requests[0].url.params["seed"] == "0"

    @pytest.mark.parametrize(
        "body, content_type",
        [
            (PNG_BYTES, "image/png"),
            (GIF_BYTES, "image/gif"),
            (WEBP_BYTES, "image/webp"),
            (JPEG_BYTES, "image/jpeg"),
            (b"\x00\x01unknown", "image/jpeg"),
        ],
    )
    def test_content_type_detected(self, test_client, upstream, body, content_type):
        upstream.respond_with(200, body)
        resp = test_client.post("/api/generate", json=self._make_payload())
        assert resp.status_code == 200
        assert resp.headers["content-type"] == content_type
        assert resp.content == body

    def test_missing_credential(self, make_client, test_config, upstream):
        """No API key: 500 JSON error and the upstream is never called."""
        client = make_client(test_config.model_copy(update={"pollinations_api_key": None}))
        resp = client.post("/api/generate", json=self._make_payload())
        assert resp.status_code == 500
        assert resp.json() == {"error": "Server configuration incomplete"}
        assert upstream.requests == []

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "", "wish": "a bike"},
            {"name": "Ana", "wish": "   "},
            {"wish": "a bike"},
            {"name": "Ana"},
            {},
        ],
    )
    def test_empty_required_field(self, test_client, upstream, payload):
        resp = test_client.post("/api/generate", json=payload)
        assert resp.status_code == 500
        assert "cannot be empty" in resp.json()["error"]
        assert upstream.requests == []

    def test_upstream_html_is_not_returned_as_image(self, test_client, upstream):
        upstream.respond_with(200, HTML_BYTES)
        resp = test_client.post("/api/generate", json=self._make_payload())
        assert resp.status_code == 500
        assert resp.headers["content-type"].startswith("application/json")
        assert "API key" in resp.json()["error"]

    def test_upstream_error_status(self, test_client, upstream):
        upstream.respond_with(502, b"bad gateway")
        resp = test_client.post("/api/generate", json=self._make_payload())
        assert resp.status_code == 500
        assert "502" in resp.json()["error"]

    def test_upstream_unreachable(self, make_client, test_config, upstream):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        upstream.response = refuse
        client = make_client(test_config)
        resp = client.post("/api/generate", json=self._make_payload())
        assert resp.status_code == 500
        assert "error" in resp.json()

    def test_upstream_timeout(self, make_client, test_config, upstream):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        upstream.response = slow
        client = make_client(test_config)
        resp = client.post("/api/generate", json=self._make_payload())
        assert resp.status_code == 500
        assert resp.json()["error"].startswith("Timeout")

    def test_unexpected_error_is_generic(self, make_client, test_config, upstream):
        def broken(request):
            raise RuntimeError("kaboom")

        upstream.response = broken
        client = make_client(test_config)
        resp = client.post("/api/generate", json=self._make_payload())
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to generate the postcard"}

    def test_malformed_body(self, test_client, upstream):
        resp = test_client.post("/api/generate", json=self._make_payload(seed="lucky"))
        assert resp.status_code == 500
        assert "seed" in resp.json()["error"]
        assert upstream.requests == []

    def test_non_string_name(self, test_client, upstream):
        resp = test_client.post("/api/generate", json=self._make_payload(name=123))
        assert resp.status_code == 500
        assert "name" in resp.json()["error"]
        assert upstream.requests == []

    def test_invalid_json(self, test_client, upstream):
        resp = test_client.post(
            "/api/generate",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 500
        assert set(resp.json()) == {"error"}
        assert upstream.requests == []

    def test_negative_seed_forwarded(self, test_client, upstream):
        resp = test_client.post("/api/generate", json=self._make_payload(seed=-5))
        assert resp.status_code == 200
        assert resp.headers["x-seed"] == "-5"
        assert upstream.requests[0].url.params["seed"] == "-5"

    def test_zero_dimensions_use_defaults(self, test_client, upstream):
        resp = test_client.post("/api/generate", json=self._make_payload(width=0, height=0))
        assert resp.status_code == 200
        params = upstream.requests[0].url.params
        assert params["width"] == "1536"
        assert params["height"] == "1024"


# ---------------------------------------------------------------------------
# Fallback routes.
# ---------------------------------------------------------------------------


class TestFallbackRoutes:
    """Test unknown paths and methods."""

    @pytest.mark.parametrize("path", ["/nope", "/api/unknown", "/static/missing.js"])
    def test_unknown_route(self, test_client, path):
        resp = test_client.get(path)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Endpoint no encontrado"}

    def test_wrong_method(self, test_client):
        resp = test_client.get("/api/generate")
        assert resp.status_code == 405
        assert "error" in resp.json()
        assert "POST" in resp.headers["allow"]


class TestConfigInjection:
    """The app uses the configuration it was built with."""

    def test_config_on_app_state(self, test_client, test_config: PostcardConfig):
        assert test_client.app.state.config is test_config
