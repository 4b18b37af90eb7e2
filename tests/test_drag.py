"""드래그/리사이즈 컨트롤러 테스트."""

from __future__ import annotations

from datetime import datetime

from app.scheduling.drag import (
    DragController,
    TimelineGrid,
    apply_pointer_move,
    begin_drag,
    delta_increments,
    nudge_bounds,
)
from app.schemas.enums import DragMode, NudgeDirection
from app.schemas.planner import BlockEvent

GRID = TimelineGrid(increment_minutes=15, pixels_per_increment=20.0)
ORIGIN_Y = 100.0


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 5, 1, hour, minute)


def _event(start: datetime = _at(10), end: datetime = _at(11)) -> BlockEvent:
    return BlockEvent(id="evt-1", day_id="d0", title="점심", start=start, end=end)


def _controller() -> tuple[DragController, list[tuple[str, datetime, datetime]]]:
    commits: list[tuple[str, datetime, datetime]] = []
    controller = DragController(GRID, lambda event_id, start, end: commits.append((event_id, start, end)))
    return controller, commits


def _replay(moves: list[float]) -> list[tuple[str, datetime, datetime]]:
    controller, commits = _controller()
    controller.pointer_down(_event(), DragMode.MOVE, pointer_id=1, pointer_y=ORIGIN_Y)
    for pointer_y in moves:
        controller.pointer_move(1, pointer_y)
    controller.pointer_up(1)
    return commits


def test_delta_increments_rounds_half_up() -> None:
    state = begin_drag(_event(), DragMode.MOVE, 1, ORIGIN_Y, 15)

    assert delta_increments(state, 109.9, GRID) == 0
    assert delta_increments(state, 110.0, GRID) == 1
    assert delta_increments(state, 90.0, GRID) == 0
    assert delta_increments(state, 89.9, GRID) == -1


def test_sub_increment_moves_do_not_commit() -> None:
    assert _replay([103.0, 106.0, 109.0]) == []


def test_move_commits_once_per_increment_crossed() -> None:
    commits = _replay([110.0, 130.0])

    assert commits == [
        ("evt-1", _at(10, 15), _at(11, 15)),
        ("evt-1", _at(10, 30), _at(11, 30)),
    ]


def test_replay_is_deterministic_regardless_of_intermediate_moves() -> None:
    coarse = _replay([110.0, 130.0])
    fine = _replay([103.0, 106.0, 110.0, 115.0, 119.0, 125.0, 130.0])

    assert coarse == fine


def test_moving_back_to_origin_commits_original_times() -> None:
    commits = _replay([130.0, 100.0])

    assert commits[-1] == ("evt-1", _at(10), _at(11))


def test_escape_rolls_back_to_original_times() -> None:
    controller, commits = _controller()
    controller.pointer_down(_event(), DragMode.MOVE, pointer_id=1, pointer_y=ORIGIN_Y)
    controller.pointer_move(1, 150.0)
    controller.pointer_move(1, 170.0)

    assert controller.escape() is True
    assert commits[-1] == ("evt-1", _at(10), _at(11))
    assert controller.is_dragging is False


def test_escape_when_idle_does_nothing() -> None:
    controller, commits = _controller()

    assert controller.escape() is False
    assert commits == []


def test_pointer_cancel_rolls_back() -> None:
    controller, commits = _controller()
    controller.pointer_down(_event(), DragMode.MOVE, pointer_id=3, pointer_y=ORIGIN_Y)
    controller.pointer_move(3, 140.0)

    assert controller.pointer_cancel(3) is True
    assert commits[-1] == ("evt-1", _at(10), _at(11))
    assert controller.state is None


def test_events_from_other_pointer_are_ignored() -> None:
    controller, commits = _controller()
    controller.pointer_down(_event(), DragMode.MOVE, pointer_id=1, pointer_y=ORIGIN_Y)

    assert controller.pointer_move(2, 200.0) is False
    assert controller.pointer_up(2) is None
    assert controller.pointer_cancel(2) is False
    assert commits == []
    assert controller.is_dragging is True


def test_second_pointer_down_is_ignored_while_dragging() -> None:
    controller, _ = _controller()
    controller.pointer_down(_event(), DragMode.MOVE, pointer_id=1, pointer_y=ORIGIN_Y)
    other = _event(_at(14), _at(15)).model_copy(update={"id": "evt-2"})

    assert controller.pointer_down(other, DragMode.RESIZE_END, pointer_id=2, pointer_y=50.0) is False
    assert controller.state.event_id == "evt-1"
    assert controller.state.pointer_id == 1


def test_lost_pointer_up_keeps_drag_until_escape() -> None:
    controller, _ = _controller()
    controller.pointer_down(_event(), DragMode.MOVE, pointer_id=1, pointer_y=ORIGIN_Y)
    controller.pointer_move(1, 120.0)

    assert controller.is_dragging is True
    controller.escape()
    assert controller.pointer_down(_event(), DragMode.MOVE, pointer_id=2, pointer_y=ORIGIN_Y) is True


def test_pointer_up_returns_final_state() -> None:
    controller, _ = _controller()
    controller.pointer_down(_event(), DragMode.MOVE, pointer_id=1, pointer_y=ORIGIN_Y)
    controller.pointer_move(1, 120.0)

    finished = controller.pointer_up(1)

    assert finished is not None
    assert (finished.pending_start, finished.pending_end) == (_at(10, 15), _at(11, 15))
    assert controller.is_dragging is False


def test_resize_changes_end_only() -> None:
    controller, commits = _controller()
    controller.pointer_down(_event(), DragMode.RESIZE_END, pointer_id=1, pointer_y=ORIGIN_Y)
    controller.pointer_move(1, 140.0)

    assert commits == [("evt-1", _at(10), _at(11, 30))]


def test_resize_keeps_minimum_duration() -> None:
    controller, commits = _controller()
    controller.pointer_down(_event(_at(10), _at(10, 30)), DragMode.RESIZE_END, pointer_id=1, pointer_y=ORIGIN_Y)
    controller.pointer_move(1, 20.0)

    start, end = commits[-1][1], commits[-1][2]
    assert start == _at(10)
    assert end == _at(10, 15)


def test_apply_pointer_move_returns_same_state_when_unchanged() -> None:
    state = begin_drag(_event(), DragMode.MOVE, 1, ORIGIN_Y, 15)

    next_state, changed = apply_pointer_move(state, 1, 105.0, GRID)

    assert changed is False
    assert next_state is state


def test_nudge_moves_one_increment_when_idle() -> None:
    controller, commits = _controller()

    assert controller.nudge(_event(), NudgeDirection.DOWN) is True
    assert controller.nudge(_event(), NudgeDirection.UP) is True
    assert commits == [
        ("evt-1", _at(10, 15), _at(11, 15)),
        ("evt-1", _at(9, 45), _at(10, 45)),
    ]


def test_nudge_is_ignored_while_dragging() -> None:
    controller, commits = _controller()
    controller.pointer_down(_event(), DragMode.MOVE, pointer_id=1, pointer_y=ORIGIN_Y)

    assert controller.nudge(_event(), NudgeDirection.DOWN) is False
    assert commits == []


def test_nudge_bounds_rounds_to_grid() -> None:
    start, end = nudge_bounds(_at(10, 7), _at(11, 7), NudgeDirection.DOWN, 15)

    assert (start, end) == (_at(10, 15), _at(11, 15))


def test_update_grid_changes_increment_for_next_drag() -> None:
    controller, commits = _controller()
    controller.update_grid(TimelineGrid(increment_minutes=30, pixels_per_increment=20.0))
    controller.pointer_down(_event(), DragMode.MOVE, pointer_id=1, pointer_y=ORIGIN_Y)
    controller.pointer_move(1, 120.0)

    assert commits == [("evt-1", _at(10, 30), _at(11, 30))]
