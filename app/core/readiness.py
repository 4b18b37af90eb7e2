"""애플리케이션 준비성(readiness) 체크 유틸."""

from __future__ import annotations

import asyncio
import socket
from urllib.parse import urlparse

from sqlalchemy import text

from app.core.config import Settings, get_settings
from app.database import get_engine

ReadinessCheck = dict[str, str | bool]

_DB_CONNECT_TIMEOUT_SECONDS = 3


def _ok(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "ok", "ok": True, "required": required, "detail": detail}


def _fail(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "fail", "ok": False, "required": required, "detail": detail}


def _is_sqlite_url(database_url: str) -> bool:
    return urlparse(database_url).scheme.split("+")[0].lower() in {"sqlite", "sqlite3"}


def _resolve_db_host_port(database_url: str) -> tuple[str, int] | None:
    parsed = urlparse(database_url)
    host = parsed.hostname
    if not host:
        return None

    base_scheme = parsed.scheme.split("+")[0].lower()
    default_ports = {
        "postgres": 5432,
        "postgresql": 5432,
        "mysql": 3306,
        "mariadb": 3306,
    }
    port = parsed.port or default_ports.get(base_scheme, 5432)
    return host, int(port)


async def _check_tcp_connectivity(host: str, port: int, timeout_seconds: int, label: str) -> ReadinessCheck:
    def _connect() -> None:
        with socket.create_connection((host, port), timeout=timeout_seconds):
            return None

    try:
        await asyncio.to_thread(_connect)
        return _ok(f"{label} 연결 가능 ({host}:{port})")
    except OSError as exc:
        return _fail(f"{label} 연결 실패 ({host}:{port}): {exc}")


async def _check_database_readiness(settings: Settings) -> ReadinessCheck:
    database_url = (settings.DATABASE_URL or "").strip()
    if not database_url:
        return _fail("DATABASE_URL이 설정되지 않았습니다.")

    if _is_sqlite_url(database_url):

        def _check_sqlite() -> None:
            with get_engine().connect() as connection:
                connection.execute(text("SELECT 1"))

        try:
            await asyncio.to_thread(_check_sqlite)
            return _ok("SQLite 연결 확인 완료")
        except Exception as exc:
            return _fail(f"SQLite 연결 실패: {exc}")

    host_port = _resolve_db_host_port(database_url)
    if host_port is None:
        return _fail("DATABASE_URL에서 DB 호스트를 파싱할 수 없습니다.")

    host, port = host_port
    return await _check_tcp_connectivity(
        host=host,
        port=port,
        timeout_seconds=_DB_CONNECT_TIMEOUT_SECONDS,
        label="DB",
    )


async def collect_readiness_status() -> dict[str, object]:
    """이벤트 저장소 DB 준비 상태를 점검합니다."""
    settings = get_settings()
    checks: dict[str, ReadinessCheck] = {
        "db": await _check_database_readiness(settings),
    }
    required_checks_ok = all(bool(check["ok"]) for check in checks.values() if bool(check.get("required", True)))

    return {
        "status": "ready" if required_checks_ok else "not_ready",
        "checks": checks,
    }
