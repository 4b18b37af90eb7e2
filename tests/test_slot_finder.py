"""슬롯 탐색 테스트."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from app.scheduling.slot_finder import TimeSlot, compute_slot

DAY = date(2024, 5, 1)


@dataclass
class _Booked:
    start: datetime
    end: datetime


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 5, 1, hour, minute)


def _slot(duration: int, events: list[_Booked], increment: int = 30) -> TimeSlot:
    return compute_slot(DAY, 8, 20, increment, duration, events)


def test_empty_day_starts_at_window_start() -> None:
    slot = _slot(60, [])

    assert slot == TimeSlot(start=_at(8), end=_at(9))
    assert slot.duration_minutes == 60


def test_prefers_first_gap_that_fits() -> None:
    events = [_Booked(_at(8), _at(9)), _Booked(_at(11), _at(12))]

    slot = _slot(120, events)

    assert slot.start == _at(9)
    assert slot.end == _at(11)


def test_skips_gap_that_is_too_short() -> None:
    events = [_Booked(_at(8), _at(9)), _Booked(_at(10), _at(12))]

    slot = _slot(90, events)

    assert slot.start == _at(12)
    assert slot.end == _at(13, 30)


def test_full_day_is_pushed_past_window_end() -> None:
    events = [
        _Booked(_at(8), _at(10)),
        _Booked(_at(10), _at(12)),
        _Booked(_at(12), _at(20)),
    ]

    slot = _slot(120, events)

    assert slot.start == _at(20)
    assert slot.end == _at(22)


def test_window_overflow_starts_after_snapped_last_end() -> None:
    events = [_Booked(_at(8), _at(19)), _Booked(_at(19), _at(21, 10))]

    slot = _slot(120, events)

    assert slot.start == _at(21, 30)
    assert slot.end == _at(23, 30)


def test_input_order_does_not_matter() -> None:
    events = [_Booked(_at(11), _at(12)), _Booked(_at(8), _at(9))]

    assert _slot(120, events) == _slot(120, list(reversed(events)))


def test_input_sequence_is_not_mutated() -> None:
    events = [_Booked(_at(11), _at(12)), _Booked(_at(8), _at(9))]
    snapshot = list(events)

    _slot(60, events)

    assert events == snapshot


def test_unaligned_event_end_is_snapped_up() -> None:
    events = [_Booked(_at(8), _at(9, 10))]

    slot = _slot(60, events)

    assert slot.start == _at(9, 30)
    assert slot.end == _at(10, 30)


def test_slot_overrunning_window_is_pulled_back_to_window_end() -> None:
    events = [_Booked(_at(8), _at(18))]

    slot = _slot(180, events)

    assert slot.end == _at(20)
    assert slot.start == _at(17)


def test_duration_longer_than_window_is_truncated_to_window() -> None:
    slot = _slot(13 * 60, [])

    assert slot.start == _at(8)
    assert slot.end == _at(20)


def test_events_before_window_are_ignored() -> None:
    events = [_Booked(_at(6), _at(7, 30))]

    slot = _slot(60, events)

    assert slot.start == _at(8)


def test_same_inputs_give_same_result() -> None:
    events = [_Booked(_at(9), _at(10)), _Booked(_at(9), _at(9, 45)), _Booked(_at(13), _at(14))]

    assert _slot(120, events) == _slot(120, events)
