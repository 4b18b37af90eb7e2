"""타임라인 픽셀 배치 계산."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Protocol

from app.scheduling.time_grid import diff_minutes, minutes_since_visible_start
from app.schemas.planner import PlannerDay, PlannerSettings

BASE_HOUR_HEIGHT_PX = 40.0
MIN_SLOT_HEIGHT_PX = 12.0
_MIN_BLOCK_RATIO = 1.5
_CLIPPED_BLOCK_RATIO = 1.25


def _clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


@dataclass(frozen=True, slots=True)
class HourMark:
    """시간 눈금 한 줄."""

    hour: int
    top: float
    height: float

    @property
    def label(self) -> str:
        return f"{self.hour:02d}:00"


@dataclass(frozen=True, slots=True)
class TimelineMetrics:
    """설정으로부터 계산한 타임라인 치수."""

    visible_start_hour: int
    visible_end_hour: int
    increment_minutes: int
    pixels_per_minute: float
    pixels_per_increment: float
    min_slot_height: float

    @classmethod
    def from_settings(
        cls,
        settings: PlannerSettings,
        hour_height_px: float = BASE_HOUR_HEIGHT_PX,
        min_slot_height_px: float = MIN_SLOT_HEIGHT_PX,
    ) -> TimelineMetrics:
        pixels_per_minute = hour_height_px / 60
        return cls(
            visible_start_hour=settings.visible_hours.start,
            visible_end_hour=settings.visible_hours.end,
            increment_minutes=settings.increment_minutes,
            pixels_per_minute=pixels_per_minute,
            pixels_per_increment=max(min_slot_height_px, pixels_per_minute * settings.increment_minutes),
            min_slot_height=min_slot_height_px,
        )

    @property
    def timeline_height(self) -> float:
        total_hours = max(0, self.visible_end_hour - self.visible_start_hour)
        return total_hours * 60 * self.pixels_per_minute

    def hour_marks(self) -> list[HourMark]:
        """표시 범위의 정시 눈금 목록 (종료 시각 포함)."""
        hour_height = 60 * self.pixels_per_minute
        return [
            HourMark(hour=hour, top=(hour - self.visible_start_hour) * hour_height, height=hour_height)
            for hour in range(self.visible_start_hour, self.visible_end_hour + 1)
        ]


@dataclass(frozen=True, slots=True)
class EventBlockLayout:
    """이벤트 블록의 화면 배치 결과."""

    top: float
    height: float
    raw_top: float
    raw_height: float
    intersects: bool
    clipped_top: bool
    clipped_bottom: bool

    @property
    def clipped(self) -> bool:
        return self.clipped_top or self.clipped_bottom


def layout_event_block(start: datetime, end: datetime, metrics: TimelineMetrics) -> EventBlockLayout:
    """이벤트 시각을 세로 픽셀 위치로 변환합니다.

    표시 범위를 벗어난 부분은 잘라내고, 완전히 벗어난 블록은 가까운 가장자리에
    최소 높이로 붙여 표시합니다.
    """
    ppm = metrics.pixels_per_minute
    offset_minutes = minutes_since_visible_start(start, metrics.visible_start_hour)
    duration_minutes = max(diff_minutes(start, end), metrics.increment_minutes)

    raw_top = offset_minutes * ppm
    raw_height = max(duration_minutes * ppm, metrics.min_slot_height * _MIN_BLOCK_RATIO)
    raw_bottom = raw_top + raw_height

    visible_top = 0.0
    visible_bottom = metrics.timeline_height
    edge_height = metrics.min_slot_height * _CLIPPED_BLOCK_RATIO

    intersects = raw_bottom > visible_top and raw_top < visible_bottom
    if intersects:
        display_top = _clamp(raw_top, visible_top, visible_bottom)
        display_bottom = _clamp(raw_bottom, visible_top, visible_bottom)
    elif raw_top >= visible_bottom:
        display_top = visible_bottom - edge_height
        display_bottom = visible_bottom
    else:
        display_top = visible_top
        display_bottom = visible_top + edge_height

    display_height = max(display_bottom - display_top, edge_height)
    if display_top + display_height > visible_bottom:
        display_top = visible_bottom - display_height

    return EventBlockLayout(
        top=display_top,
        height=display_height,
        raw_top=raw_top,
        raw_height=raw_height,
        intersects=intersects,
        clipped_top=raw_top < visible_top,
        clipped_bottom=raw_bottom > visible_bottom,
    )


class _DayEvent(Protocol):
    day_id: str
    start: datetime


def build_day_descriptors(
    day_order: Sequence[str],
    days: Mapping[str, PlannerDay],
    events: Iterable[_DayEvent],
    start_date: date,
    end_date: date,
) -> list[PlannerDay]:
    """타임라인에 표시할 일자 열 목록을 만듭니다.

    `day_order` 순서를 우선하고, 일정만 참조하는 일자는 그 일정의 시작 날짜로
    보충합니다. 아무 일자도 없으면 여행 기간의 날짜마다 하나씩 만듭니다.
    """
    events = list(events)
    descriptors: list[PlannerDay] = []
    seen: set[str] = set()

    def _push(day_id: str) -> None:
        if day_id in seen:
            return
        stored = days.get(day_id)
        if stored is not None:
            descriptors.append(stored)
            seen.add(day_id)
            return
        event_for_day = next((event for event in events if event.day_id == day_id), None)
        if event_for_day is not None:
            descriptors.append(PlannerDay(id=day_id, date=event_for_day.start.date()))
            seen.add(day_id)

    for day_id in day_order:
        _push(day_id)
    for event in events:
        _push(event.day_id)

    if not descriptors:
        cursor = start_date
        while cursor <= end_date:
            descriptors.append(PlannerDay(id=cursor.isoformat(), date=cursor))
            cursor += timedelta(days=1)

    return descriptors
