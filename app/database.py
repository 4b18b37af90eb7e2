from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.models.base import Base


def _is_sqlite(database_url: str) -> bool:
    return database_url.split(":", 1)[0].split("+")[0].lower() in {"sqlite", "sqlite3"}


@lru_cache
def get_engine() -> Engine:
    """`SQLAlchemy` 엔진을 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다.

    이벤트 저장소는 `asyncio.to_thread`로 세션을 사용하므로 SQLite에서는 스레드 검사를 끄고,
    인메모리 DB는 모든 세션이 같은 연결을 공유하도록 `StaticPool`을 사용한다.
    """
    database_url = get_settings().DATABASE_URL
    if not _is_sqlite(database_url):
        return create_engine(database_url)

    if database_url.endswith(":memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, connect_args={"check_same_thread": False})


@lru_cache
def get_session_local() -> sessionmaker[Session]:
    """`SessionLocal` 팩토리를 반환한다."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=get_engine())


def init_db() -> None:
    """플래너 테이블을 생성한다. 이미 존재하는 테이블은 그대로 둔다."""
    import app.models.planner  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def reset_db_caches() -> None:
    """엔진/세션 팩토리 캐시를 비운다. 설정이 바뀐 테스트에서 사용한다."""
    get_session_local.cache_clear()
    get_engine.cache_clear()
