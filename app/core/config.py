"""애플리케이션 전역 설정을 관리하는 모듈."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수 기반 설정 모델."""

    SERVICE_SECRET: str
    DATABASE_URL: str = "sqlite:///./trip_planner.db"
    PLANNER_DEFAULT_INCREMENT_MINUTES: int = 30
    PLANNER_DEFAULT_VISIBLE_START_HOUR: int = 6
    PLANNER_DEFAULT_VISIBLE_END_HOUR: int = 22
    PLANNER_DEFAULT_TIMEZONE: str = "America/New_York"
    TIMELINE_HOUR_HEIGHT_PX: float = 40.0
    TIMELINE_MIN_SLOT_HEIGHT_PX: float = 12.0
    APP_ENV: str = "development"
    DOCS_MODE: str = "disabled"
    EXPOSE_INTERNAL_ERRORS: bool = False
    CORS_ALLOW_ORIGINS: str = ""
    CORS_ALLOW_METHODS: str = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
    CORS_ALLOW_HEADERS: str = "Authorization,Content-Type,x-service-secret"
    CORS_ALLOW_CREDENTIALS: bool = False
    SECURITY_HEADERS_ENABLED: bool = True
    ENABLE_HSTS: bool = False
    HSTS_MAX_AGE_SECONDS: int = 31536000
    PROXY_HEADERS_ENABLED: bool = True
    PROXY_TRUSTED_HOSTS: str = "127.0.0.1"
    TRUSTED_HOSTS: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("PLANNER_DEFAULT_INCREMENT_MINUTES", mode="before")
    @classmethod
    def _clamp_default_increment(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 30
        except (TypeError, ValueError):
            numeric = 30
        return min(240, max(1, numeric))

    @field_validator("PLANNER_DEFAULT_VISIBLE_START_HOUR", mode="before")
    @classmethod
    def _clamp_default_visible_start(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 6
        except (TypeError, ValueError):
            numeric = 6
        return min(23, max(0, numeric))

    @field_validator("PLANNER_DEFAULT_VISIBLE_END_HOUR", mode="before")
    @classmethod
    def _clamp_default_visible_end(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 22
        except (TypeError, ValueError):
            numeric = 22
        return min(24, max(1, numeric))

    @field_validator("TIMELINE_HOUR_HEIGHT_PX", "TIMELINE_MIN_SLOT_HEIGHT_PX", mode="before")
    @classmethod
    def _ensure_positive_pixels(cls, value: object) -> float:
        try:
            numeric = float(value) if value is not None else 1.0
        except (TypeError, ValueError):
            numeric = 1.0
        return max(1.0, numeric)


@lru_cache
def get_settings() -> Settings:
    """Settings 인스턴스를 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다."""
    return Settings()
