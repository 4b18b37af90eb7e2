"""플래너 스케줄링 서비스.

슬롯 탐색, 반복 전개, 드래그 커밋, 타임라인 배치를 저장소와 연결합니다.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta

from pydantic import ValidationError

from app.core.config import Settings, get_settings
from app.core.logger import get_logger
from app.scheduling.drag import CommitCallback, DragController, TimelineGrid
from app.scheduling.layout import TimelineMetrics, build_day_descriptors, layout_event_block
from app.scheduling.recurrence import expand
from app.scheduling.slot_finder import TimeSlot, compute_slot
from app.schemas.enums import EventType, NudgeDirection, RecurrenceMode
from app.schemas.planner import (
    DEFAULT_VISIBLE_END_HOUR,
    DEFAULT_VISIBLE_START_HOUR,
    ActivityEvent,
    DailyCountRecurrence,
    DailyUntilEndRecurrence,
    NoRecurrence,
    Planner,
    PlannerDay,
    PlannerEvent,
    PlannerSettings,
    VisibleHours,
    new_identifier,
)
from app.schemas.schedule import (
    HourMarkResponse,
    PlannerCreateRequest,
    ScheduleIdeaRequest,
    TimelineBlockResponse,
    TimelineDayResponse,
    TimelineResponse,
)
from app.services.event_store import PlannerStoreProtocol, get_planner_store

logger = get_logger(__name__)
active_tasks: set[asyncio.Task] = set()

RecurrencePolicyValue = NoRecurrence | DailyCountRecurrence | DailyUntilEndRecurrence


class PlannerNotFoundError(LookupError):
    """플래너가 존재하지 않을 때 발생합니다."""


class DayNotFoundError(LookupError):
    """플래너에 해당 일자가 없을 때 발생합니다."""


class EventNotFoundError(LookupError):
    """이벤트가 존재하지 않을 때 발생합니다."""


class ScheduleValidationError(ValueError):
    """일정 요청이 플래너 상태와 맞지 않을 때 발생합니다."""


def _on_commit_task_done(task: asyncio.Task) -> None:
    active_tasks.discard(task)
    try:
        exc = task.exception()
    except asyncio.CancelledError:
        logger.info("Commit task cancelled")
        return

    if exc is not None:
        logger.exception("Commit task failed", exc_info=exc)


def build_commit_callback(store: PlannerStoreProtocol, planner_id: str) -> CommitCallback:
    """드래그 컨트롤러용 커밋 콜백을 만듭니다.

    저장은 실행 중인 이벤트 루프에 태스크로 예약하고 기다리지 않습니다.
    겹치는 저장은 직렬화하지 않으므로 마지막 쓰기가 남습니다.
    """

    def _commit(event_id: str, start: datetime, end: datetime) -> None:
        task = asyncio.get_running_loop().create_task(store.update_event_times(planner_id, event_id, start, end))
        active_tasks.add(task)
        task.add_done_callback(_on_commit_task_done)
        logger.debug("Commit scheduled: event_id=%s start=%s end=%s", event_id, start, end)

    return _commit


def default_planner_settings(settings: Settings) -> PlannerSettings:
    """환경 설정의 기본값으로 스케줄링 설정을 만듭니다."""
    try:
        visible_hours = VisibleHours(
            start=settings.PLANNER_DEFAULT_VISIBLE_START_HOUR,
            end=settings.PLANNER_DEFAULT_VISIBLE_END_HOUR,
        )
    except ValidationError:
        logger.warning(
            "기본 표시 시간 범위가 올바르지 않아 %02d~%02d시로 대체합니다: start=%s end=%s",
            DEFAULT_VISIBLE_START_HOUR,
            DEFAULT_VISIBLE_END_HOUR,
            settings.PLANNER_DEFAULT_VISIBLE_START_HOUR,
            settings.PLANNER_DEFAULT_VISIBLE_END_HOUR,
        )
        visible_hours = VisibleHours()

    return PlannerSettings(
        increment_minutes=settings.PLANNER_DEFAULT_INCREMENT_MINUTES,
        visible_hours=visible_hours,
        timezone=settings.PLANNER_DEFAULT_TIMEZONE,
    )


def _trip_days(start_date: date, end_date: date) -> list[PlannerDay]:
    days: list[PlannerDay] = []
    cursor = start_date
    while cursor <= end_date:
        days.append(PlannerDay(id=new_identifier(), date=cursor))
        cursor += timedelta(days=1)
    return days


class PlannerService:
    """플래너 단위 스케줄링 유스케이스를 제공합니다."""

    def __init__(self, store: PlannerStoreProtocol, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or get_settings()

    async def create_planner(self, request: PlannerCreateRequest) -> Planner:
        """여행 기간의 날짜마다 일자를 만들어 플래너를 생성합니다."""
        scheduling = request.settings or default_planner_settings(self._settings)
        days = _trip_days(request.start_date, request.end_date)
        planner = Planner(
            id=new_identifier(),
            name=request.name,
            start_date=request.start_date,
            end_date=request.end_date,
            timezone=request.timezone or scheduling.timezone,
            settings=scheduling,
            day_order=[day.id for day in days],
            days={day.id: day for day in days},
        )
        return await self._store.create_planner(planner)

    async def get_planner(self, planner_id: str) -> Planner:
        planner = await self._store.get_planner(planner_id)
        if planner is None:
            raise PlannerNotFoundError(planner_id)
        return planner

    async def update_settings(self, planner_id: str, settings: PlannerSettings) -> Planner:
        planner = await self._store.update_settings(planner_id, settings)
        if planner is None:
            raise PlannerNotFoundError(planner_id)
        logger.info(
            "Planner settings updated: id=%s increment=%d visible=%02d-%02d",
            planner_id,
            settings.increment_minutes,
            settings.visible_hours.start,
            settings.visible_hours.end,
        )
        return planner

    async def list_day_events(self, planner_id: str, day_id: str) -> list[PlannerEvent]:
        """일자의 이벤트 스냅샷을 시작 시각 순으로 반환합니다."""
        planner = await self.get_planner(planner_id)
        self._require_day(planner, day_id)
        return await self._store.list_events_for_day(planner_id, day_id)

    async def preview_slot(self, planner_id: str, day_id: str, duration_minutes: int) -> TimeSlot:
        """저장하지 않고 배치될 구간만 계산합니다."""
        planner = await self.get_planner(planner_id)
        return await self._find_slot(planner, day_id, duration_minutes)

    async def schedule_idea(self, planner_id: str, day_id: str, request: ScheduleIdeaRequest) -> list[PlannerEvent]:
        """아이디어를 일자의 빈 구간에 활동 이벤트로 배치하고 저장합니다."""
        planner = await self.get_planner(planner_id)
        idea = request.idea
        duration_minutes = (
            request.duration_minutes or idea.suggested_duration_minutes or planner.settings.increment_minutes * 2
        )
        slot = await self._find_slot(planner, day_id, duration_minutes)

        draft = ActivityEvent(
            day_id=day_id,
            title=idea.title,
            start=slot.start,
            end=slot.end,
            timezone=planner.settings.timezone,
            notes=idea.description,
            images=list(idea.images),
            address=idea.address,
            tags=list(idea.tags),
        )
        logger.info("Idea scheduled: planner_id=%s idea=%s slot=%s~%s", planner_id, idea.id, slot.start, slot.end)
        return await self._expand_and_store(planner, draft, request.recurrence)

    async def create_events_with_recurrence(
        self,
        planner_id: str,
        draft: PlannerEvent,
        recurrence: RecurrencePolicyValue,
    ) -> list[PlannerEvent]:
        """초안 이벤트를 반복 정책에 따라 전개해 저장합니다.

        이벤트 식별자와 반복 묶음 식별자는 서버가 새로 발급하며, 요청에 담긴 값은 무시합니다.
        """
        planner = await self.get_planner(planner_id)
        day = self._require_day(planner, draft.day_id)
        if day.date is not None and draft.start.date() != day.date:
            raise ScheduleValidationError(
                f"이벤트 시작 날짜({draft.start.date()})가 일자 날짜({day.date})와 다릅니다."
            )
        draft = draft.model_copy(update={"id": new_identifier(), "group_id": None})
        return await self._expand_and_store(planner, draft, recurrence)

    async def commit_event_time(self, planner_id: str, event_id: str, start: datetime, end: datetime) -> PlannerEvent:
        """드래그/리사이즈 결과 시각을 저장합니다."""
        await self.get_planner(planner_id)
        event = await self._store.update_event_times(planner_id, event_id, start, end)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def nudge_event(self, planner_id: str, event_id: str, direction: NudgeDirection) -> PlannerEvent:
        """이벤트를 스냅 단위 하나만큼 위/아래로 옮깁니다."""
        planner = await self.get_planner(planner_id)
        event = await self._store.get_event(planner_id, event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        commits: list[tuple[str, datetime, datetime]] = []
        controller = DragController(self._timeline_grid(planner.settings), lambda *values: commits.append(values))
        controller.nudge(event, direction)

        updated = event
        for committed_id, start, end in commits:
            updated = await self.commit_event_time(planner_id, committed_id, start, end)
        return updated

    async def delete_event(self, planner_id: str, event_id: str, *, apply_to_series: bool = False) -> list[str]:
        """이벤트 또는 같은 반복 묶음 전체를 삭제합니다."""
        await self.get_planner(planner_id)
        deleted = await self._store.delete_event(planner_id, event_id, apply_to_series=apply_to_series)
        if not deleted:
            raise EventNotFoundError(event_id)
        return deleted

    async def create_drag_controller(self, planner_id: str) -> DragController:
        """플래너 설정 격자와 비동기 커밋 콜백을 가진 드래그 컨트롤러를 만듭니다."""
        planner = await self.get_planner(planner_id)
        return DragController(self._timeline_grid(planner.settings), build_commit_callback(self._store, planner_id))

    async def build_timeline(self, planner_id: str) -> TimelineResponse:
        """일자 열과 이벤트 블록 배치를 계산합니다."""
        planner = await self.get_planner(planner_id)
        events = await self._store.list_events(planner_id)
        metrics = self._metrics(planner.settings)
        descriptors = build_day_descriptors(
            planner.day_order,
            planner.days,
            events,
            planner.start_date,
            planner.end_date,
        )

        columns: list[TimelineDayResponse] = []
        for day in descriptors:
            day_events = sorted((event for event in events if event.day_id == day.id), key=lambda event: event.start)
            blocks = []
            for event in day_events:
                layout = layout_event_block(event.start, event.end, metrics)
                blocks.append(
                    TimelineBlockResponse(
                        event_id=event.id,
                        type=EventType(event.type),
                        title=event.title,
                        start=event.start,
                        end=event.end,
                        top=layout.top,
                        height=layout.height,
                        clipped_top=layout.clipped_top,
                        clipped_bottom=layout.clipped_bottom,
                    )
                )
            columns.append(TimelineDayResponse(day=day, blocks=blocks))

        return TimelineResponse(
            planner_id=planner.id,
            settings=planner.settings,
            timeline_height=metrics.timeline_height,
            pixels_per_minute=metrics.pixels_per_minute,
            pixels_per_increment=metrics.pixels_per_increment,
            hour_marks=[
                HourMarkResponse(hour=mark.hour, label=mark.label, top=mark.top, height=mark.height)
                for mark in metrics.hour_marks()
            ],
            days=columns,
        )

    def _metrics(self, settings: PlannerSettings) -> TimelineMetrics:
        return TimelineMetrics.from_settings(
            settings,
            hour_height_px=self._settings.TIMELINE_HOUR_HEIGHT_PX,
            min_slot_height_px=self._settings.TIMELINE_MIN_SLOT_HEIGHT_PX,
        )

    def _timeline_grid(self, settings: PlannerSettings) -> TimelineGrid:
        metrics = self._metrics(settings)
        return TimelineGrid(
            increment_minutes=metrics.increment_minutes,
            pixels_per_increment=metrics.pixels_per_increment,
        )

    @staticmethod
    def _require_day(planner: Planner, day_id: str) -> PlannerDay:
        day = planner.days.get(day_id)
        if day is None:
            raise DayNotFoundError(day_id)
        return day

    async def _find_slot(self, planner: Planner, day_id: str, duration_minutes: int) -> TimeSlot:
        day = self._require_day(planner, day_id)
        if day.date is None:
            raise ScheduleValidationError("날짜 정보가 없는 일자에는 자동 배치할 수 없습니다.")

        existing = await self._store.list_events_for_day(planner.id, day_id)
        settings = planner.settings
        return compute_slot(
            day.date,
            settings.visible_hours.start,
            settings.visible_hours.end,
            settings.increment_minutes,
            duration_minutes,
            existing,
        )

    async def _expand_and_store(
        self,
        planner: Planner,
        draft: PlannerEvent,
        recurrence: RecurrencePolicyValue,
    ) -> list[PlannerEvent]:
        events = expand(draft, recurrence, planner.day_order, planner.day_dates())
        if len(events) > 1:
            logger.info(
                "Recurrence expanded: planner_id=%s mode=%s count=%d",
                planner.id,
                RecurrenceMode(recurrence.mode),
                len(events),
            )
        return await self._store.create_events(planner.id, events)


def get_planner_service() -> PlannerService:
    """요청 단위 플래너 서비스를 제공합니다."""
    return PlannerService(get_planner_store())
