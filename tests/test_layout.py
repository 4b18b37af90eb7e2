"""타임라인 픽셀 배치 테스트."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

import pytest

from app.scheduling.layout import TimelineMetrics, build_day_descriptors, layout_event_block
from app.schemas.planner import PlannerDay, PlannerSettings, VisibleHours


@dataclass
class _Event:
    day_id: str
    start: datetime


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 5, 1, hour, minute)


@pytest.fixture
def metrics() -> TimelineMetrics:
    return TimelineMetrics.from_settings(PlannerSettings())


def test_metrics_from_default_settings(metrics: TimelineMetrics) -> None:
    assert metrics.pixels_per_minute == pytest.approx(40 / 60)
    assert metrics.pixels_per_increment == pytest.approx(20.0)
    assert metrics.timeline_height == pytest.approx(640.0)


def test_pixels_per_increment_has_minimum_height() -> None:
    settings = PlannerSettings(increment_minutes=5)

    metrics = TimelineMetrics.from_settings(settings)

    assert metrics.pixels_per_increment == pytest.approx(12.0)


def test_hour_marks_cover_window_inclusive(metrics: TimelineMetrics) -> None:
    marks = metrics.hour_marks()

    assert len(marks) == 17
    assert marks[0].label == "06:00"
    assert marks[0].top == 0
    assert marks[-1].label == "22:00"
    assert marks[-1].top == pytest.approx(640.0)


def test_block_inside_window(metrics: TimelineMetrics) -> None:
    layout = layout_event_block(_at(8), _at(9), metrics)

    assert layout.top == pytest.approx(80.0)
    assert layout.height == pytest.approx(40.0)
    assert layout.intersects is True
    assert layout.clipped is False


def test_short_block_gets_minimum_height(metrics: TimelineMetrics) -> None:
    layout = layout_event_block(_at(8), _at(8, 5), metrics)

    assert layout.height == pytest.approx(20.0)


def test_block_crossing_window_end_is_clipped(metrics: TimelineMetrics) -> None:
    layout = layout_event_block(_at(21, 30), _at(23), metrics)

    assert layout.top == pytest.approx(620.0)
    assert layout.height == pytest.approx(20.0)
    assert layout.clipped_bottom is True
    assert layout.clipped_top is False


def test_block_after_window_sticks_to_bottom_edge(metrics: TimelineMetrics) -> None:
    layout = layout_event_block(_at(23), _at(23, 30), metrics)

    assert layout.intersects is False
    assert layout.height == pytest.approx(15.0)
    assert layout.top == pytest.approx(625.0)
    assert layout.clipped_bottom is True


def test_block_before_window_sticks_to_top_edge(metrics: TimelineMetrics) -> None:
    layout = layout_event_block(_at(5), _at(5, 30), metrics)

    assert layout.intersects is False
    assert layout.top == 0
    assert layout.height == pytest.approx(15.0)
    assert layout.clipped_top is True


def test_custom_visible_hours_shift_blocks() -> None:
    settings = PlannerSettings(visible_hours=VisibleHours(start=8, end=20))
    metrics = TimelineMetrics.from_settings(settings, hour_height_px=60.0)

    layout = layout_event_block(_at(9), _at(10), metrics)

    assert layout.top == pytest.approx(60.0)
    assert metrics.timeline_height == pytest.approx(720.0)


def test_day_descriptors_follow_day_order() -> None:
    days = {
        "a": PlannerDay(id="a", date=date(2024, 5, 1)),
        "b": PlannerDay(id="b", date=date(2024, 5, 2)),
    }

    descriptors = build_day_descriptors(["b", "a"], days, [], date(2024, 5, 1), date(2024, 5, 2))

    assert [day.id for day in descriptors] == ["b", "a"]


def test_day_descriptors_add_days_referenced_only_by_events() -> None:
    days = {"a": PlannerDay(id="a", date=date(2024, 5, 1))}
    events = [_Event(day_id="orphan", start=datetime(2024, 5, 3, 10, 0))]

    descriptors = build_day_descriptors(["a"], days, events, date(2024, 5, 1), date(2024, 5, 3))

    assert [day.id for day in descriptors] == ["a", "orphan"]
    assert descriptors[1].date == date(2024, 5, 3)


def test_day_descriptors_fall_back_to_trip_range() -> None:
    descriptors = build_day_descriptors([], {}, [], date(2024, 5, 1), date(2024, 5, 3))

    assert [day.date for day in descriptors] == [date(2024, 5, 1), date(2024, 5, 2), date(2024, 5, 3)]
    assert descriptors[0].id == "2024-05-01"
