"""Unit tests for the health check endpoint."""

from unittest.mock import patch

import pytest

from condition_studio.core.config import settings


@pytest.mark.anyio
async def test_health_ok(client) -> None:
    """Health endpoint reports the app name and compile mode."""
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "app": "condition-studio", "strict": False}


@pytest.mark.anyio
async def test_health_reports_strict_mode(client) -> None:
    with patch.object(settings, "compiler_strict_mode", True):
        resp = client.get("/api/v1/health")

    assert resp.json()["strict"] is True


@pytest.mark.anyio
async def test_health_carries_request_id(client) -> None:
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "health-1"})

    assert resp.headers["X-Request-ID"] == "health-1"
