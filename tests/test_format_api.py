# Blacken
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
#
# This file is part of Blacken.
#
# Blacken is dual-licensed:
#
# 1. Open Source: GNU Affero General Public License v3.0 (AGPL-3.0)
# 2. Commercial: Available from Phoenix Link (Pty) Ltd
#
# Contributions require a signed CLA. See COPYRIGHT.md and CLA.md.
"""E2E tests for the format API endpoints.

Tests the full request → orchestrator → response cycle via FastAPI TestClient.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from blacken.api._shared import get_settings
from blacken.core.config import FormatterSettings


@pytest.fixture()
def client(make_formatter):
    """Test client whose requests use the spacer fake formatter."""
    from blacken.api.server import app

    settings = FormatterSettings(executable=make_formatter("spacer"))
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


# ═══════════════════════════════════════════════════════════════════════
# GET /api/health
# ═══════════════════════════════════════════════════════════════════════


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["executable"].endswith("fake-spacer")


# ═══════════════════════════════════════════════════════════════════════
# POST /api/format
# ═══════════════════════════════════════════════════════════════════════


class TestFormat:
    def test_replaced(self, client):
        resp = client.post("/api/format", json={"text": "x=1\n", "point": 3})
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "replaced"
        assert data["text"] == "x = 1\n"
        assert data["point"] == 3
        assert data["exit_status"] == 0
        assert data["diagnostic"] is None

    def test_unchanged(self, client):
        resp = client.post("/api/format", json={"text": "x = 1\n"})
        data = resp.json()
        assert data["status"] == "unchanged"
        assert data["text"] == "x = 1\n"

    def test_failed_silent_hides_diagnostic(self, client):
        resp = client.post("/api/format", json={"text": "x = (\n"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "failed"
        assert data["text"] == "x = (\n"
        assert data["diagnostic"] is None
        assert data["exit_status"] == 1

    def test_failed_display_returns_diagnostic(self, client):
        resp = client.post("/api/format", json={"text": "x = (\n", "display_errors": True})
        data = resp.json()
        assert data["status"] == "failed"
        assert data["diagnostic"].startswith("SyntaxError")

    def test_cursor_clamped(self, client):
        resp = client.post("/api/format", json={"text": "x=1\n", "point": 999, "window_start": 999})
        data = resp.json()
        assert data["point"] == len(data["text"])
        assert data["window_start"] == len(data["text"])

    def test_region(self, client):
        resp = client.post(
            "/api/format",
            json={"text": "a=1\nb=2\nc=3\n", "region": {"start": 4, "end": 8}},
        )
        data = resp.json()
        assert data["status"] == "replaced"
        assert data["text"] == "a=1\nb = 2\nc=3\n"

    def test_invalid_region(self, client):
        resp = client.post(
            "/api/format",
            json={"text": "abc", "region": {"start": 2, "end": 10}},
        )
        assert resp.status_code == 400

    def test_negative_region_rejected_by_model(self, client):
        resp = client.post(
            "/api/format",
            json={"text": "abc", "region": {"start": -1, "end": 2}},
        )
        assert resp.status_code == 422

    def test_line_length_override(self, client, make_formatter):
        from blacken.api.server import app

        settings = FormatterSettings(executable=make_formatter("argv"))
        app.dependency_overrides[get_settings] = lambda: settings
        resp = client.post("/api/format", json={"text": "", "line_length": 100})
        assert resp.json()["text"] == "--line-length\n100\n-\n"
        assert settings.line_length is None

    def test_missing_executable(self, client, tmp_path):
        from blacken.api.server import app

        app.dependency_overrides[get_settings] = lambda: FormatterSettings(executable=str(tmp_path / "nope"))
        resp = client.post("/api/format", json={"text": "x=1\n", "display_errors": True})
        data = resp.json()
        assert data["status"] == "failed"
        assert "not found" in data["diagnostic"]
        assert data["exit_status"] is None

    def test_unencodable_text_fails_cleanly(self, client):
        resp = client.post(
            "/api/format",
            content=b'{"text": "x=1\\ud800\\n", "display_errors": true}',
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "failed"
        assert data["text"] == "x=1\ud800\n"
        assert "not valid UTF-8" in data["diagnostic"]
        assert data["exit_status"] is None

    def test_non_ascii_text_escaped_in_body(self, client):
        resp = client.post("/api/format", json={"text": "s='é'\n"})
        assert b"\\u00e9" in resp.content
        assert resp.json()["text"] == "s = 'é'\n"
