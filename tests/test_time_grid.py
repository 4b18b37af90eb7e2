"""시간 격자 변환 함수 테스트."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from app.scheduling.time_grid import (
    add_minutes,
    at_day_time,
    diff_minutes,
    format_timestamp,
    minutes_since_visible_start,
    parse_timestamp,
    round_to_increment,
    snap_to_increment,
)


def test_snap_to_increment_moves_down_by_default() -> None:
    assert snap_to_increment(datetime(2024, 5, 1, 10, 7), 15) == datetime(2024, 5, 1, 10, 0)


def test_snap_to_increment_moves_up_when_requested() -> None:
    assert snap_to_increment(datetime(2024, 5, 1, 10, 7), 15, round_up=True) == datetime(2024, 5, 1, 10, 15)


def test_snap_to_increment_keeps_aligned_minute_and_drops_seconds() -> None:
    value = datetime(2024, 5, 1, 10, 30, 45, 120)

    assert snap_to_increment(value, 15, round_up=True) == datetime(2024, 5, 1, 10, 30)


def test_snap_to_increment_round_up_can_cross_midnight() -> None:
    assert snap_to_increment(datetime(2024, 5, 1, 23, 50), 45, round_up=True) == datetime(2024, 5, 2, 0, 0)


@pytest.mark.parametrize("increment", [1, 5, 7, 15, 30, 45, 60, 90])
@pytest.mark.parametrize("round_up", [False, True])
def test_snap_to_increment_is_idempotent(increment: int, round_up: bool) -> None:
    samples = [
        datetime(2024, 5, 1, 0, 0),
        datetime(2024, 5, 1, 6, 13, 27),
        datetime(2024, 5, 1, 10, 50),
        datetime(2024, 5, 1, 13, 59, 59),
        datetime(2024, 5, 1, 21, 10),
    ]

    for value in samples:
        once = snap_to_increment(value, increment, round_up=round_up)
        assert snap_to_increment(once, increment, round_up=round_up) == once


def test_round_to_increment_picks_nearest_boundary() -> None:
    assert round_to_increment(datetime(2024, 5, 1, 10, 7), 15) == datetime(2024, 5, 1, 10, 0)
    assert round_to_increment(datetime(2024, 5, 1, 10, 8), 15) == datetime(2024, 5, 1, 10, 15)


def test_round_to_increment_rounds_half_up() -> None:
    assert round_to_increment(datetime(2024, 5, 1, 10, 7, 30), 15) == datetime(2024, 5, 1, 10, 15)


def test_minutes_since_visible_start_is_signed() -> None:
    assert minutes_since_visible_start(datetime(2024, 5, 1, 9, 30), 8) == 90
    assert minutes_since_visible_start(datetime(2024, 5, 1, 5, 30), 6) == -30


def test_add_and_diff_minutes() -> None:
    start = datetime(2024, 5, 1, 9, 0)

    assert add_minutes(start, 90) == datetime(2024, 5, 1, 10, 30)
    assert diff_minutes(start, datetime(2024, 5, 1, 10, 30)) == 90
    assert diff_minutes(datetime(2024, 5, 1, 10, 30), start) == -90


def test_at_day_time_hour_24_is_next_midnight() -> None:
    assert at_day_time(date(2024, 5, 1), 24) == datetime(2024, 5, 2, 0, 0)
    assert at_day_time(date(2024, 5, 1), 8, 30) == datetime(2024, 5, 1, 8, 30)


def test_parse_timestamp_drops_offset_without_conversion() -> None:
    assert parse_timestamp("2024-05-01T09:30:00+02:00") == datetime(2024, 5, 1, 9, 30)


def test_parse_timestamp_rejects_malformed_text() -> None:
    with pytest.raises(ValueError):
        parse_timestamp("not-a-timestamp")


def test_format_timestamp_uses_seconds_precision() -> None:
    assert format_timestamp(datetime(2024, 5, 1, 9, 30, 0, 500)) == "2024-05-01T09:30:00"
