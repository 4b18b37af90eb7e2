"""플래너 도메인 스키마.

이벤트와 반복 정책은 `type` / `mode` 필드를 판별자로 하는 닫힌 태그 유니온으로
정의합니다. 모든 시각은 플래너 시간대 기준의 벽시계(naive) 값으로 다룹니다.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal
from uuid import uuid4

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from app.schemas.enums import TravelMode

DateType = date

DEFAULT_INCREMENT_MINUTES = 30
DEFAULT_VISIBLE_START_HOUR = 6
DEFAULT_VISIBLE_END_HOUR = 22
DEFAULT_TIMEZONE = "America/New_York"


def new_identifier() -> str:
    """새 불투명 식별자를 생성합니다."""
    return str(uuid4())


class VisibleHours(BaseModel):
    """타임라인에 표시되는 시간 범위 [start, end)."""

    start: int = Field(DEFAULT_VISIBLE_START_HOUR, ge=0, le=23, description="표시 시작 시각 (정시)")
    end: int = Field(DEFAULT_VISIBLE_END_HOUR, ge=1, le=24, description="표시 종료 시각 (정시)")

    @model_validator(mode="after")
    def validate_window(self):
        if self.start >= self.end:
            raise ValueError("표시 시작 시각은 종료 시각보다 빨라야 합니다.")
        return self


class PlannerSettings(BaseModel):
    """스케줄링 설정.

    Fields:
        `increment_minutes`: 스냅 단위 (분)
        `visible_hours`: 표시 시간 범위
        `timezone`: 표시용 시간대 라벨
    """

    increment_minutes: int = Field(DEFAULT_INCREMENT_MINUTES, ge=1, description="스냅 단위 (분)")
    visible_hours: VisibleHours = Field(default_factory=VisibleHours, description="표시 시간 범위")
    timezone: str = Field(DEFAULT_TIMEZONE, min_length=1, description="표시용 시간대 라벨")


class PlannerDay(BaseModel):
    """여행 일자 모델."""

    id: str = Field(default_factory=new_identifier, description="일자 식별자")
    date: DateType | None = Field(default=None, description="일자 날짜 (YYYY-MM-DD)")
    headline: str | None = Field(default=None, description="일자 제목")
    notes: str | None = Field(default=None, description="일자 메모")


class Idea(BaseModel):
    """일자와 무관한 재사용 가능한 활동 템플릿."""

    id: str = Field(default_factory=new_identifier, description="아이디어 식별자")
    title: str = Field(..., min_length=1, description="아이디어 제목")
    description: str | None = Field(default=None, description="설명")
    tags: list[str] = Field(default_factory=list, description="태그 목록")
    address: str | None = Field(default=None, description="주소")
    suggested_duration_minutes: int | None = Field(default=None, gt=0, description="권장 소요 시간 (분)")
    images: list[str] = Field(default_factory=list, description="이미지 참조 목록")


class EventBase(BaseModel):
    """모든 타임라인 이벤트의 공통 필드."""

    id: str = Field(default_factory=new_identifier, description="이벤트 식별자")
    day_id: str = Field(..., min_length=1, description="소속 일자 식별자")
    title: str = Field(..., min_length=1, description="이벤트 제목")
    start: datetime = Field(..., description="시작 시각 (벽시계)")
    end: datetime = Field(..., description="종료 시각 (벽시계)")
    timezone: str = Field(DEFAULT_TIMEZONE, description="표시용 시간대 라벨")
    notes: str | None = Field(default=None, description="메모")
    images: list[str] = Field(default_factory=list, description="이미지 참조 목록")
    group_id: str | None = Field(default=None, description="반복 생성 묶음 식별자")

    @field_validator("start", "end")
    @classmethod
    def drop_offset(cls, value: datetime) -> datetime:
        # 오프셋은 변환하지 않고 버린다.
        return value.replace(tzinfo=None)

    @model_validator(mode="after")
    def validate_time_range(self):
        if self.end <= self.start:
            raise ValueError("이벤트 종료 시각은 시작 시각 이후여야 합니다.")
        return self


class BlockEvent(EventBase):
    """시간 블록 이벤트."""

    type: Literal["block"] = "block"


class TravelEvent(EventBase):
    """이동 이벤트."""

    type: Literal["travel"] = "travel"
    travel_mode: TravelMode = Field(..., description="이동 수단")
    company_name: str | None = Field(default=None, description="운송사")
    confirmation_code: str | None = Field(default=None, description="예약 번호")
    company_phone: str | None = Field(default=None, description="운송사 연락처")


class ActivityEvent(EventBase):
    """활동 이벤트."""

    type: Literal["activity"] = "activity"
    address: str | None = Field(default=None, description="주소")
    tags: list[str] = Field(default_factory=list, description="태그 목록")
    company_name: str | None = Field(default=None, description="업체명")
    contact: str | None = Field(default=None, description="연락처")


PlannerEvent = Annotated[BlockEvent | TravelEvent | ActivityEvent, Field(discriminator="type")]
planner_event_adapter: TypeAdapter[BlockEvent | TravelEvent | ActivityEvent] = TypeAdapter(PlannerEvent)


class NoRecurrence(BaseModel):
    """반복 없음."""

    mode: Literal["none"] = "none"


class DailyCountRecurrence(BaseModel):
    """초안 일자를 포함해 `count`일 동안 매일 반복."""

    mode: Literal["daily-count"] = "daily-count"
    count: int = Field(..., ge=1, description="초안 일자를 포함한 총 일수")


class DailyUntilEndRecurrence(BaseModel):
    """여행 마지막 날까지 매일 반복."""

    mode: Literal["daily-until-end"] = "daily-until-end"


RecurrencePolicy = Annotated[
    NoRecurrence | DailyCountRecurrence | DailyUntilEndRecurrence,
    Field(discriminator="mode"),
]


class Planner(BaseModel):
    """여행 플래너 모델."""

    id: str = Field(..., description="플래너 식별자")
    name: str = Field(..., description="플래너 이름")
    start_date: date = Field(..., description="여행 시작일")
    end_date: date = Field(..., description="여행 종료일")
    timezone: str = Field(DEFAULT_TIMEZONE, description="플래너 시간대 라벨")
    settings: PlannerSettings = Field(default_factory=PlannerSettings, description="스케줄링 설정")
    day_order: list[str] = Field(default_factory=list, description="일자 식별자 순서")
    days: dict[str, PlannerDay] = Field(default_factory=dict, description="일자 식별자별 메타데이터")

    def day_dates(self) -> dict[str, date | None]:
        """일자 식별자별 날짜 조회 테이블을 반환합니다."""
        return {day_id: day.date for day_id, day in self.days.items()}
