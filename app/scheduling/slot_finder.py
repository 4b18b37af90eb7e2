"""아이디어 배치 슬롯 탐색.

부분적으로 예약된 날에는 앞쪽의 충분한 빈 구간을 우선하고(gap-first),
표시 범위가 모두 찬 날에는 기존 일정과 겹치지 않도록 마지막 일정 뒤로 밀어냅니다.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Protocol

from app.core.logger import get_logger
from app.scheduling.time_grid import at_day_time, diff_minutes, snap_to_increment

logger = get_logger(__name__)


class TimeRange(Protocol):
    """`start`/`end` 시각을 가진 기존 일정."""

    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class TimeSlot:
    """배치 결과 구간 [start, end)."""

    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> float:
        return diff_minutes(self.start, self.end)


def compute_slot(
    day_date: date,
    visible_start_hour: int,
    visible_end_hour: int,
    increment_minutes: int,
    duration_minutes: int,
    existing_events: Sequence[TimeRange],
) -> TimeSlot:
    """새 항목을 배치할 시작/종료 시각을 계산합니다.

    Args:
        day_date: 대상 일자 날짜.
        visible_start_hour: 표시 시작 시각 (정시).
        visible_end_hour: 표시 종료 시각 (정시).
        increment_minutes: 스냅 단위 (분).
        duration_minutes: 요청 소요 시간 (분). 양수 검증은 호출자 책임.
        existing_events: 해당 일자의 기존 일정.

    Returns:
        배치 구간. 같은 입력에는 항상 같은 결과를 반환합니다.
    """
    duration = timedelta(minutes=duration_minutes)
    visible_start = at_day_time(day_date, visible_start_hour)
    limit = at_day_time(day_date, visible_end_hour)
    cursor = snap_to_increment(visible_start, increment_minutes)

    # sorted()는 안정 정렬이므로 시작 시각이 같으면 입력 순서를 유지한다.
    sorted_events = sorted(existing_events, key=lambda event: event.start)
    latest_end = cursor

    for existing in sorted_events:
        if existing.end > latest_end:
            latest_end = snap_to_increment(existing.end, increment_minutes, round_up=True)

        if existing.end <= cursor:
            continue

        if existing.start > cursor and diff_minutes(cursor, existing.start) >= duration_minutes:
            break

        cursor = snap_to_increment(existing.end, increment_minutes, round_up=True)
        if cursor >= limit:
            break

    start = cursor
    end = start + duration

    if cursor >= limit and sorted_events:
        start = latest_end
        end = start + duration
        logger.debug("표시 범위가 가득 차 마지막 일정 뒤로 배치합니다: %s", start)
    elif end > limit:
        end = snap_to_increment(limit, increment_minutes)
        start = end - duration
        if start < visible_start:
            # 요청 소요 시간은 유지하지 않고 표시 범위 [시작, 종료]로 잘라낸다.
            start = snap_to_increment(visible_start, increment_minutes, round_up=True)
            logger.debug("요청 시간이 표시 범위보다 길어 %s~%s로 축소합니다.", start, end)

    return TimeSlot(start=start, end=end)
