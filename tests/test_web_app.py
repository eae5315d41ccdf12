"""Tests for the web page and JSON API."""

import asyncio
import threading

import httpx
import pytest
from starlette.testclient import TestClient

from config import EXTRACTION_ERROR_TEXT, INVALID_DROP_MESSAGE, NO_TEXT_FOUND, PLACEHOLDER_TEXT
from web.app import create_app


@pytest.fixture
def make_client(fake_engine):
    """Build a TestClient around an app using a FakeEngine."""
    def _make(**engine_kwargs):
        engine = fake_engine(**engine_kwargs)
        app = create_app(engine=engine)
        return TestClient(app), engine
    return _make


class TestIndex:
    """Tests for the HTML page."""

    def test_index_renders_placeholder(self, make_client):
        client, _ = make_client()
        resp = client.get("/")
        assert resp.status_code == 200
        assert PLACEHOLDER_TEXT in resp.text
        assert "app.js" in resp.text

    def test_static_script_served(self, make_client):
        client, _ = make_client()
        resp = client.get("/static/app.js")
        assert resp.status_code == 200
        assert "latestRun" in resp.text


class TestHealthAndEngines:

    def test_health_reports_engine(self, make_client):
        client, _ = make_client()
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "engine": "fake"}

    def test_engines_listed(self, make_client):
        client, _ = make_client()
        data = client.get("/api/engines").json()
        assert data["engines"] == ["easyocr", "tesseract"]
        assert data["active"] == "fake"


class TestExtractEndpoint:
    """Tests for POST /api/extract."""

    def test_extracts_single_line(self, make_client, png_bytes):
        client, engine = make_client(text="Xin chào\nthế giới")
        resp = client.post(
            "/api/extract",
            files={"file": ("shot.png", png_bytes(), "image/png")},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["state"] == "done"
        assert data["text"] == "Xin chào thế giới"
        assert data["engine"] == "fake"
        assert data["states"][0] == "idle"
        assert len(engine.calls) == 1

    def test_blank_result(self, make_client, png_bytes):
        client, _ = make_client(text="")
        data = client.post(
            "/api/extract",
            files={"file": ("shot.png", png_bytes(), "image/png")},
        ).json()
        assert data["text"] == NO_TEXT_FOUND

    def test_non_image_rejected_without_run(self, make_client):
        client, engine = make_client(text="x")
        resp = client.post(
            "/api/extract",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": INVALID_DROP_MESSAGE}
        assert engine.calls == []

    def test_engine_failure_is_failed_run_not_http_error(self, make_client, png_bytes):
        client, _ = make_client(error=RuntimeError("boom"))
        resp = client.post(
            "/api/extract",
            files={"file": ("shot.png", png_bytes(), "image/png")},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["state"] == "failed"
        assert data["failed_stage"] == "recognizing"
        assert data["text"] == EXTRACTION_ERROR_TEXT

    def test_corrupt_image_fails_in_decoding(self, make_client):
        client, engine = make_client(text="x")
        data = client.post(
            "/api/extract",
            files={"file": ("broken.png", b"garbage", "image/png")},
        ).json()
        assert data["state"] == "failed"
        assert data["failed_stage"] == "decoding"
        assert engine.calls == []

    def test_missing_file_returns_400(self, make_client):
        client, _ = make_client()
        resp = client.post("/api/extract")
        assert resp.status_code == 400
        assert "error" in resp.json()


class TestClientSessions:
    """Tests for uploads that share a client id."""

    def test_new_upload_cancels_same_clients_run(self, fake_engine, png_bytes):
        gate = threading.Event()
        engine = fake_engine(text="mới", gate=gate)
        app = create_app(engine=engine)
        upload = {"file": ("shot.png", png_bytes(), "image/png")}

        async def wait_for_calls(count):
            for _ in range(500):
                if len(engine.calls) >= count:
                    return
                await asyncio.sleep(0.01)
            raise AssertionError(f"engine called {len(engine.calls)} times, expected {count}")

        async def scenario():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                first = asyncio.create_task(
                    client.post("/api/extract", files=upload, data={"client_id": "page-1"})
                )
                await wait_for_calls(1)
                second = asyncio.create_task(
                    client.post("/api/extract", files=upload, data={"client_id": "page-1"})
                )
                await wait_for_calls(2)
                gate.set()
                return (await first).json(), (await second).json()

        try:
            first, second = asyncio.run(scenario())
        finally:
            gate.set()

        assert first["state"] == "cancelled"
        assert first["text"] is None
        assert second["state"] == "done"
        assert second["text"] == "mới"

    def test_other_clients_are_not_cancelled(self, make_client, png_bytes):
        client, _ = make_client(text="a")
        for client_id in ("page-1", "page-2"):
            data = client.post(
                "/api/extract",
                files={"file": ("shot.png", png_bytes(), "image/png")},
                data={"client_id": client_id},
            ).json()
            assert data["state"] == "done"
        assert list(client.app.state.sessions) == ["page-1", "page-2"]

    def test_least_recently_used_session_dropped(self, make_client, png_bytes, monkeypatch):
        monkeypatch.setattr("web.api.MAX_CLIENT_SESSIONS", 2)
        client, _ = make_client(text="a")
        for client_id in ("page-1", "page-2", "page-1", "page-3"):
            client.post(
                "/api/extract",
                files={"file": ("shot.png", png_bytes(), "image/png")},
                data={"client_id": client_id},
            )
        assert list(client.app.state.sessions) == ["page-1", "page-3"]

    def test_page_script_sends_client_id(self, make_client):
        client, _ = make_client()
        assert "client_id" in client.get("/static/app.js").text
