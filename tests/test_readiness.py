"""Readiness 체크 유틸 테스트."""

from __future__ import annotations

import asyncio

from app.core.config import get_settings
from app.core.readiness import collect_readiness_status
from app.database import reset_db_caches


def _set_required_env(monkeypatch, **overrides: str) -> None:
    monkeypatch.setenv("SERVICE_SECRET", "test-service-secret")
    for key, value in overrides.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    reset_db_caches()


def test_collect_readiness_status_not_ready_when_database_url_missing(monkeypatch) -> None:
    _set_required_env(monkeypatch, DATABASE_URL="")

    result = asyncio.run(collect_readiness_status())

    assert result["status"] == "not_ready"
    assert result["checks"]["db"]["status"] == "fail"


def test_collect_readiness_status_ready_with_sqlite_memory(monkeypatch) -> None:
    _set_required_env(monkeypatch, DATABASE_URL="sqlite:///:memory:")

    result = asyncio.run(collect_readiness_status())

    assert result["status"] == "ready"
    assert result["checks"]["db"]["status"] == "ok"


def test_collect_readiness_status_checks_remote_database_host(monkeypatch) -> None:
    _set_required_env(monkeypatch, DATABASE_URL="postgresql+psycopg://user:pw@db.internal/planner")
    calls: list[tuple[str, int]] = []

    async def _fake_tcp(host: str, port: int, timeout_seconds: int, label: str):
        calls.append((host, port))
        return {"status": "fail", "ok": False, "required": True, "detail": "mock-fail"}

    monkeypatch.setattr("app.core.readiness._check_tcp_connectivity", _fake_tcp)

    result = asyncio.run(collect_readiness_status())

    assert calls == [("db.internal", 5432)]
    assert result["status"] == "not_ready"
