"""플래너 스케줄링 API 요청/응답 스키마."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.enums import DragMode, EventType, NudgeDirection
from app.schemas.planner import (
    Idea,
    NoRecurrence,
    Planner,
    PlannerDay,
    PlannerEvent,
    PlannerSettings,
    RecurrencePolicy,
)


class PlannerCreateRequest(BaseModel):
    """플래너 생성 요청 모델."""

    name: str = Field(..., min_length=1, max_length=200, description="플래너 이름")
    start_date: date = Field(..., description="여행 시작일 (YYYY-MM-DD)")
    end_date: date = Field(..., description="여행 종료일 (YYYY-MM-DD)")
    timezone: str | None = Field(default=None, description="플래너 시간대 라벨 (미지정 시 기본값)")
    settings: PlannerSettings | None = Field(default=None, description="스케줄링 설정 (미지정 시 기본값)")

    @model_validator(mode="after")
    def validate_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError("여행 종료일은 시작일보다 빠를 수 없습니다.")
        return self


class PlannerResponse(BaseModel):
    """플래너 조회 응답 모델."""

    planner: Planner = Field(..., description="플래너 정보")


class ScheduledEventsResponse(BaseModel):
    """저장된 이벤트 목록 응답 모델."""

    events: list[PlannerEvent] = Field(default_factory=list, description="이벤트 목록")


class SlotPreviewRequest(BaseModel):
    """슬롯 미리보기 요청 모델."""

    duration_minutes: int = Field(..., gt=0, description="배치할 소요 시간 (분)")


class SlotPreviewResponse(BaseModel):
    """슬롯 미리보기 응답 모델."""

    day_id: str = Field(..., description="대상 일자 식별자")
    start: datetime = Field(..., description="배치 시작 시각")
    end: datetime = Field(..., description="배치 종료 시각")


class ScheduleIdeaRequest(BaseModel):
    """아이디어 배치 요청 모델.

    `duration_minutes`가 없으면 아이디어의 권장 소요 시간을, 그마저 없으면
    스냅 단위의 두 배를 사용합니다.
    """

    idea: Idea = Field(..., description="배치할 아이디어")
    duration_minutes: int | None = Field(default=None, gt=0, description="소요 시간 재정의 (분)")
    recurrence: RecurrencePolicy = Field(default_factory=NoRecurrence, description="반복 정책")


class EventCreateRequest(BaseModel):
    """초안 이벤트 생성 요청 모델."""

    event: PlannerEvent = Field(..., description="초안 이벤트")
    recurrence: RecurrencePolicy = Field(default_factory=NoRecurrence, description="반복 정책")


class EventTimeUpdateRequest(BaseModel):
    """이벤트 시각 커밋 요청 모델."""

    start: datetime = Field(..., description="새 시작 시각")
    end: datetime = Field(..., description="새 종료 시각")

    @field_validator("start", "end")
    @classmethod
    def drop_offset(cls, value: datetime) -> datetime:
        return value.replace(tzinfo=None)

    @model_validator(mode="after")
    def validate_time_range(self):
        if self.end <= self.start:
            raise ValueError("이벤트 종료 시각은 시작 시각 이후여야 합니다.")
        return self


class NudgeRequest(BaseModel):
    """키보드 화살표 이동 요청 모델."""

    direction: NudgeDirection = Field(..., description="이동 방향 (up/down)")


class EventResponse(BaseModel):
    """단일 이벤트 응답 모델."""

    event: PlannerEvent = Field(..., description="이벤트")


class DeleteEventResponse(BaseModel):
    """이벤트 삭제 응답 모델."""

    deleted_ids: list[str] = Field(default_factory=list, description="삭제된 이벤트 식별자 목록")


class HourMarkResponse(BaseModel):
    """시간 눈금 응답 모델."""

    hour: int
    label: str
    top: float
    height: float


class TimelineBlockResponse(BaseModel):
    """타임라인에 배치된 이벤트 블록."""

    event_id: str = Field(..., description="이벤트 식별자")
    type: EventType = Field(..., description="이벤트 유형")
    title: str = Field(..., description="이벤트 제목")
    start: datetime
    end: datetime
    top: float = Field(..., description="표시 상단 위치 (px)")
    height: float = Field(..., description="표시 높이 (px)")
    clipped_top: bool = Field(False, description="표시 범위 위로 잘림 여부")
    clipped_bottom: bool = Field(False, description="표시 범위 아래로 잘림 여부")
    draggable_modes: list[DragMode] = Field(
        default_factory=lambda: [DragMode.MOVE, DragMode.RESIZE_END],
        description="허용되는 드래그 모드",
    )


class TimelineDayResponse(BaseModel):
    """타임라인 일자 열."""

    day: PlannerDay
    blocks: list[TimelineBlockResponse] = Field(default_factory=list)


class TimelineResponse(BaseModel):
    """타임라인 전체 응답 모델."""

    planner_id: str
    settings: PlannerSettings
    timeline_height: float = Field(..., description="타임라인 전체 높이 (px)")
    pixels_per_minute: float
    pixels_per_increment: float
    hour_marks: list[HourMarkResponse] = Field(default_factory=list)
    days: list[TimelineDayResponse] = Field(default_factory=list)
