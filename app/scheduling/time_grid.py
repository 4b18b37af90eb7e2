"""벽시계 시각과 일자 기준 분/픽셀 축 사이의 변환 함수 모음.

모든 값은 플래너 시간대 기준의 naive `datetime`이며 시간대 재해석을 하지 않습니다.
입력 검증은 호출자 책임입니다.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta

MINUTES_PER_HOUR = 60


def minute_of_day(value: datetime) -> int:
    """자정 기준 경과 분(초 이하 절사)을 반환합니다."""
    return value.hour * MINUTES_PER_HOUR + value.minute


def _is_aligned(value: datetime, increment_minutes: int) -> bool:
    if value.second or value.microsecond:
        return False
    return value.minute % increment_minutes == 0 or minute_of_day(value) % increment_minutes == 0


def _midnight(value: datetime) -> datetime:
    return datetime.combine(value.date(), time())


def snap_to_increment(value: datetime, increment_minutes: int, round_up: bool = False) -> datetime:
    """시각을 스냅 단위 경계로 맞춥니다.

    분 값이 이미 단위의 배수이면 초/마이크로초만 0으로 만든 값을 그대로 반환합니다.
    그렇지 않으면 자정 기준 격자에서 요청 방향(`round_up`)의 인접 경계로 이동합니다.
    두 번 적용해도 한 번 적용한 결과와 같습니다.
    """
    base = value.replace(second=0, microsecond=0)
    if _is_aligned(base, increment_minutes):
        return base

    remainder = minute_of_day(base) % increment_minutes
    adjustment = increment_minutes - remainder if round_up else -remainder
    return base + timedelta(minutes=adjustment)


def round_to_increment(value: datetime, increment_minutes: int) -> datetime:
    """시각을 가장 가까운 스냅 단위 경계로 반올림합니다 (정확히 중간이면 늦은 쪽)."""
    if _is_aligned(value, increment_minutes):
        return value

    elapsed = (value - _midnight(value)).total_seconds() / 60
    nearest = math.floor(elapsed / increment_minutes + 0.5) * increment_minutes
    return _midnight(value) + timedelta(minutes=nearest)


def minutes_since_visible_start(value: datetime, visible_start_hour: int) -> float:
    """같은 날짜의 표시 시작 시각으로부터의 부호 있는 분 오프셋을 반환합니다.

    세로 픽셀 배치에만 사용하며 구간 비교에는 사용하지 않습니다.
    """
    baseline = _midnight(value) + timedelta(hours=visible_start_hour)
    return (value - baseline).total_seconds() / 60


def add_minutes(value: datetime, delta: float) -> datetime:
    return value + timedelta(minutes=delta)


def diff_minutes(start: datetime, end: datetime) -> float:
    """`end - start`를 분 단위로 반환합니다."""
    return (end - start).total_seconds() / 60


def at_day_time(day_date: date, hour: int, minute: int = 0) -> datetime:
    """날짜와 시/분으로 벽시계 시각을 만듭니다. 24시는 다음 날 자정입니다."""
    return datetime.combine(day_date, time()) + timedelta(hours=hour, minutes=minute)


def parse_timestamp(value: str) -> datetime:
    """ISO 문자열을 벽시계 시각으로 파싱합니다. 오프셋은 변환 없이 버립니다."""
    return datetime.fromisoformat(value).replace(tzinfo=None)


def format_timestamp(value: datetime) -> str:
    return value.isoformat(timespec="seconds")
