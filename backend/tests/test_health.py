"""
ReportDesk Backend — Health Check Tests
"""

import pytest

from reportdesk import __version__, database
from reportdesk.database import build_engine


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"] == __version__
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_unreachable_database_is_503(self, test_client, monkeypatch, tmp_path):
        broken = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'x.db'}")
        monkeypatch.setattr(database, "engine", broken)

        response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"
        await broken.dispose()
