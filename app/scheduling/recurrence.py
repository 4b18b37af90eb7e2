"""초안 이벤트의 반복 정책 전개."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime

from app.core.logger import get_logger
from app.schemas.planner import (
    DailyCountRecurrence,
    DailyUntilEndRecurrence,
    NoRecurrence,
    PlannerEvent,
    new_identifier,
)

logger = get_logger(__name__)


def _shift_to_day(value: datetime, from_date: date, to_date: date) -> datetime:
    """`from_date` 기준 시각을 같은 상대 위치의 `to_date` 시각으로 옮깁니다."""
    return value + (to_date - from_date)


def _total_days(
    policy: NoRecurrence | DailyCountRecurrence | DailyUntilEndRecurrence,
    day_order: Sequence[str],
    start_index: int,
) -> int:
    if isinstance(policy, DailyCountRecurrence):
        return policy.count
    if isinstance(policy, DailyUntilEndRecurrence):
        return len(day_order) - start_index
    return 1


def expand(
    draft_event: PlannerEvent,
    recurrence_policy: NoRecurrence | DailyCountRecurrence | DailyUntilEndRecurrence,
    day_order: Sequence[str],
    day_dates: Mapping[str, date | None],
) -> list[PlannerEvent]:
    """반복 정책에 따라 저장할 이벤트 목록을 생성합니다.

    0번 요소는 항상 초안 이벤트입니다. 이후 일자에는 초안과 같은 시작 시:분을
    해당 일자 날짜에 옮기고 소요 시간을 유지한 이벤트를 하나씩 추가합니다.
    자정을 넘기는 초안의 사본도 다음 날에 끝납니다. 날짜 정보가 없는 일자는
    건너뛰고, `day_order`가 끝나면 중단합니다. 초안 일자가 `day_order`에 없으면
    초안만 반환합니다.

    Args:
        draft_event: 초안 이벤트.
        recurrence_policy: 반복 정책.
        day_order: 여행 일자 식별자 순서.
        day_dates: 일자 식별자별 날짜.

    Returns:
        저장할 이벤트 목록.
    """
    if isinstance(recurrence_policy, NoRecurrence):
        return [draft_event]

    group_id = new_identifier()
    base_event = draft_event.model_copy(update={"group_id": group_id}, deep=True)
    events: list[PlannerEvent] = [base_event]

    try:
        start_index = list(day_order).index(draft_event.day_id)
    except ValueError:
        logger.warning("일자 순서에 초안 일자가 없어 반복을 적용하지 않습니다: day_id=%s", draft_event.day_id)
        return [draft_event]

    draft_date = day_dates.get(draft_event.day_id) or draft_event.start.date()
    duration = draft_event.end - draft_event.start
    total_days = _total_days(recurrence_policy, day_order, start_index)
    for offset in range(1, total_days):
        position = start_index + offset
        if position >= len(day_order):
            break
        day_id = day_order[position]
        day_date = day_dates.get(day_id)
        if day_date is None:
            continue

        start = _shift_to_day(draft_event.start, draft_date, day_date)
        events.append(
            draft_event.model_copy(
                update={
                    "id": new_identifier(),
                    "day_id": day_id,
                    "start": start,
                    "end": start + duration,
                    "group_id": group_id,
                },
                deep=True,
            )
        )

    return events
