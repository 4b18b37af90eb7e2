"""타임라인 이벤트 드래그/리사이즈 컨트롤러.

포인터 이동을 스냅 단위 크기의 이산적인 시간 변화로 바꾸고, 단위 경계를 넘을 때마다
커밋 콜백을 한 번씩 호출합니다. 상태 전이는 `DragState` 값을 받아 새 값을 돌려주는
순수 함수로 구현하고, `DragController`가 유일한 상태 슬롯을 소유합니다.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Protocol

from app.core.logger import get_logger
from app.scheduling.time_grid import round_to_increment
from app.schemas.enums import DragMode, NudgeDirection

logger = get_logger(__name__)

CommitCallback = Callable[[str, datetime, datetime], None]

KEYBOARD_NUDGE_MULTIPLIER = 1


class DraggableEvent(Protocol):
    """드래그 대상 이벤트."""

    id: str
    day_id: str
    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class TimelineGrid:
    """드래그 계산에 필요한 격자 정보."""

    increment_minutes: int
    pixels_per_increment: float


@dataclass(frozen=True, slots=True)
class DragState:
    """진행 중인 드래그 한 건의 상태."""

    event_id: str
    day_id: str
    mode: DragMode
    pointer_id: int
    origin_y: float
    original_start: datetime
    original_end: datetime
    pending_start: datetime
    pending_end: datetime
    minimum_duration_minutes: int
    last_applied_delta: int = 0


def begin_drag(
    event: DraggableEvent,
    mode: DragMode,
    pointer_id: int,
    origin_y: float,
    minimum_duration_minutes: int,
) -> DragState:
    """포인터 다운 시점의 드래그 상태를 만듭니다."""
    return DragState(
        event_id=event.id,
        day_id=event.day_id,
        mode=mode,
        pointer_id=pointer_id,
        origin_y=origin_y,
        original_start=event.start,
        original_end=event.end,
        pending_start=event.start,
        pending_end=event.end,
        minimum_duration_minutes=minimum_duration_minutes,
    )


def delta_increments(state: DragState, pointer_y: float, grid: TimelineGrid) -> int:
    """원점 대비 이동 픽셀을 스냅 단위 개수로 반올림합니다 (0.5는 올림)."""
    delta_pixels = pointer_y - state.origin_y
    return math.floor(delta_pixels / grid.pixels_per_increment + 0.5)


def _bounds_for_delta(state: DragState, delta: int, grid: TimelineGrid) -> tuple[datetime, datetime]:
    # 누적 없이 항상 원래 시각에서 계산한다.
    increment = grid.increment_minutes
    shift = timedelta(minutes=delta * increment)

    if state.mode == DragMode.MOVE:
        return (
            round_to_increment(state.original_start + shift, increment),
            round_to_increment(state.original_end + shift, increment),
        )

    snapped_end = round_to_increment(state.original_end + shift, increment)
    minimum_end = state.original_start + timedelta(minutes=max(state.minimum_duration_minutes, increment))
    if snapped_end <= minimum_end:
        snapped_end = round_to_increment(minimum_end, increment)
    return state.original_start, snapped_end


def apply_pointer_move(
    state: DragState,
    pointer_id: int,
    pointer_y: float,
    grid: TimelineGrid,
) -> tuple[DragState, bool]:
    """포인터 이동을 반영합니다.

    Returns:
        (새 상태, 커밋 필요 여부). 다른 포인터의 이벤트이거나 단위 경계를 넘지 않았으면
        기존 상태와 `False`를 반환합니다.
    """
    if pointer_id != state.pointer_id:
        return state, False

    delta = delta_increments(state, pointer_y, grid)
    if delta == state.last_applied_delta:
        return state, False

    pending_start, pending_end = _bounds_for_delta(state, delta, grid)
    return (
        replace(state, pending_start=pending_start, pending_end=pending_end, last_applied_delta=delta),
        True,
    )


def nudge_bounds(
    start: datetime,
    end: datetime,
    direction: NudgeDirection,
    increment_minutes: int,
) -> tuple[datetime, datetime]:
    """키보드 화살표 한 번에 해당하는 새 시작/종료 시각을 계산합니다."""
    sign = -1 if direction == NudgeDirection.UP else 1
    shift = timedelta(minutes=sign * KEYBOARD_NUDGE_MULTIPLIER * increment_minutes)
    return (
        round_to_increment(start + shift, increment_minutes),
        round_to_increment(end + shift, increment_minutes),
    )


class DragController:
    """단일 드래그 슬롯을 소유하는 컨트롤러.

    동시에 하나의 드래그만 존재합니다. 드래그 중 새 포인터 다운은 무시하며,
    포인터 업이 유실되면 Escape로만 해제됩니다.
    """

    def __init__(self, grid: TimelineGrid, commit: CommitCallback) -> None:
        self._grid = grid
        self._commit = commit
        self._state: DragState | None = None

    @property
    def state(self) -> DragState | None:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state is not None

    @property
    def grid(self) -> TimelineGrid:
        return self._grid

    def update_grid(self, grid: TimelineGrid) -> None:
        """설정 변경 시 격자 정보를 교체합니다."""
        self._grid = grid

    def pointer_down(
        self,
        event: DraggableEvent,
        mode: DragMode,
        pointer_id: int,
        pointer_y: float,
    ) -> bool:
        """드래그를 시작합니다. 이미 드래그 중이면 `False`를 반환합니다."""
        if self._state is not None:
            logger.debug(
                "드래그 진행 중 새 포인터 다운을 무시합니다: active=%s incoming=%s",
                self._state.pointer_id,
                pointer_id,
            )
            return False

        self._state = begin_drag(
            event,
            mode,
            pointer_id,
            pointer_y,
            minimum_duration_minutes=self._grid.increment_minutes,
        )
        return True

    def pointer_move(self, pointer_id: int, pointer_y: float) -> bool:
        """포인터 이동을 반영하고 커밋했으면 `True`를 반환합니다."""
        if self._state is None:
            return False

        next_state, changed = apply_pointer_move(self._state, pointer_id, pointer_y, self._grid)
        self._state = next_state
        if changed:
            self._commit(next_state.event_id, next_state.pending_start, next_state.pending_end)
        return changed

    def pointer_up(self, pointer_id: int) -> DragState | None:
        """드래그를 종료하고 마지막 상태를 반환합니다. 다른 포인터면 `None`."""
        if self._state is None or pointer_id != self._state.pointer_id:
            return None

        finished = self._state
        self._state = None
        return finished

    def pointer_cancel(self, pointer_id: int) -> bool:
        """포인터 취소 시 원래 시각으로 되돌립니다."""
        if self._state is None or pointer_id != self._state.pointer_id:
            return False
        return self._rollback()

    def escape(self) -> bool:
        """Escape 키 입력 시 진행 중인 드래그를 되돌립니다."""
        if self._state is None:
            return False
        return self._rollback()

    def nudge(self, event: DraggableEvent, direction: NudgeDirection) -> bool:
        """드래그 중이 아닐 때 이벤트를 한 단위 위/아래로 옮깁니다."""
        if self._state is not None:
            return False

        start, end = nudge_bounds(event.start, event.end, direction, self._grid.increment_minutes)
        self._commit(event.id, start, end)
        return True

    def _rollback(self) -> bool:
        state = self._state
        self._state = None
        logger.debug("드래그를 취소하고 원래 시각으로 되돌립니다: event_id=%s", state.event_id)
        self._commit(state.event_id, state.original_start, state.original_end)
        return True
