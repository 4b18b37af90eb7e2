"""일정 배치 및 타임라인 계산 엔진."""

from app.scheduling.drag import DragController, DragState, TimelineGrid
from app.scheduling.layout import TimelineMetrics, build_day_descriptors, layout_event_block
from app.scheduling.recurrence import expand
from app.scheduling.slot_finder import TimeSlot, compute_slot
from app.scheduling.time_grid import snap_to_increment

__all__ = [
    "DragController",
    "DragState",
    "TimeSlot",
    "TimelineGrid",
    "TimelineMetrics",
    "build_day_descriptors",
    "compute_slot",
    "expand",
    "layout_event_block",
    "snap_to_increment",
]
