"""플래너/이벤트 저장소.

스케줄링 엔진이 사용하는 영속성 협력자입니다. 일자별 이벤트 목록은 호출 시점의
스냅샷으로 반환하며, 쓰기는 마지막 쓰기가 이기는 방식으로 처리합니다.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from functools import lru_cache

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from app.core.logger import get_logger
from app.database import get_session_local
from app.models.planner import PlannerDayRecord, PlannerEventRecord, PlannerRecord
from app.schemas.planner import (
    Planner,
    PlannerDay,
    PlannerEvent,
    PlannerSettings,
    VisibleHours,
    planner_event_adapter,
)

logger = get_logger(__name__)

_BASE_EVENT_FIELDS = {"id", "day_id", "type", "title", "start", "end", "timezone", "notes", "images", "group_id"}


class PlannerStoreProtocol(ABC):
    """플래너 저장소 인터페이스를 정의합니다."""

    @abstractmethod
    async def create_planner(self, planner: Planner) -> Planner:
        raise NotImplementedError

    @abstractmethod
    async def get_planner(self, planner_id: str) -> Planner | None:
        raise NotImplementedError

    @abstractmethod
    async def update_settings(self, planner_id: str, settings: PlannerSettings) -> Planner | None:
        raise NotImplementedError

    @abstractmethod
    async def list_events(self, planner_id: str) -> list[PlannerEvent]:
        raise NotImplementedError

    @abstractmethod
    async def list_events_for_day(self, planner_id: str, day_id: str) -> list[PlannerEvent]:
        """일자의 이벤트를 시작 시각 순으로 반환합니다."""
        raise NotImplementedError

    @abstractmethod
    async def get_event(self, planner_id: str, event_id: str) -> PlannerEvent | None:
        raise NotImplementedError

    @abstractmethod
    async def create_events(self, planner_id: str, events: list[PlannerEvent]) -> list[PlannerEvent]:
        raise NotImplementedError

    @abstractmethod
    async def update_event_times(
        self,
        planner_id: str,
        event_id: str,
        start: datetime,
        end: datetime,
    ) -> PlannerEvent | None:
        raise NotImplementedError

    @abstractmethod
    async def delete_event(self, planner_id: str, event_id: str, *, apply_to_series: bool = False) -> list[str]:
        """이벤트를 삭제하고 삭제된 식별자 목록을 반환합니다.

        Args:
            planner_id: 플래너 식별자
            event_id: 삭제할 이벤트 식별자
            apply_to_series: 같은 반복 묶음의 이벤트를 모두 삭제할지 여부

        Returns:
            삭제된 이벤트 식별자 목록 (없으면 빈 목록)
        """
        raise NotImplementedError


def _settings_from_record(record: PlannerRecord) -> PlannerSettings:
    return PlannerSettings(
        increment_minutes=record.increment_minutes,
        visible_hours=VisibleHours(start=record.visible_start_hour, end=record.visible_end_hour),
        timezone=record.settings_timezone,
    )


def _planner_from_record(record: PlannerRecord) -> Planner:
    days = [
        PlannerDay(id=day.id, date=day.day_date, headline=day.headline, notes=day.notes)
        for day in sorted(record.days, key=lambda item: item.position)
    ]
    return Planner(
        id=record.id,
        name=record.name,
        start_date=record.start_date,
        end_date=record.end_date,
        timezone=record.timezone,
        settings=_settings_from_record(record),
        day_order=[day.id for day in days],
        days={day.id: day for day in days},
    )


def _event_to_record(planner_id: str, event: PlannerEvent) -> PlannerEventRecord:
    return PlannerEventRecord(
        id=event.id,
        planner_id=planner_id,
        day_id=event.day_id,
        type=event.type,
        title=event.title,
        start=event.start,
        end=event.end,
        timezone=event.timezone,
        notes=event.notes,
        images=list(event.images),
        group_id=event.group_id,
        details=event.model_dump(mode="json", exclude=_BASE_EVENT_FIELDS),
    )


def _event_from_record(record: PlannerEventRecord) -> PlannerEvent:
    payload = {
        **(record.details or {}),
        "id": record.id,
        "day_id": record.day_id,
        "type": record.type,
        "title": record.title,
        "start": record.start,
        "end": record.end,
        "timezone": record.timezone,
        "notes": record.notes,
        "images": record.images or [],
        "group_id": record.group_id,
    }
    return planner_event_adapter.validate_python(payload)


class SqlAlchemyPlannerStore(PlannerStoreProtocol):
    """SQLAlchemy 세션 기반 저장소.

    동기 세션 작업을 `asyncio.to_thread`로 실행해 이벤트 루프를 막지 않습니다.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory or get_session_local()

    async def create_planner(self, planner: Planner) -> Planner:
        def _create() -> None:
            with self._session_factory() as session, session.begin():
                record = PlannerRecord(
                    id=planner.id,
                    name=planner.name,
                    start_date=planner.start_date,
                    end_date=planner.end_date,
                    timezone=planner.timezone,
                    increment_minutes=planner.settings.increment_minutes,
                    visible_start_hour=planner.settings.visible_hours.start,
                    visible_end_hour=planner.settings.visible_hours.end,
                    settings_timezone=planner.settings.timezone,
                )
                record.days = [
                    PlannerDayRecord(
                        id=day_id,
                        position=position,
                        day_date=planner.days[day_id].date if day_id in planner.days else None,
                        headline=planner.days[day_id].headline if day_id in planner.days else None,
                        notes=planner.days[day_id].notes if day_id in planner.days else None,
                    )
                    for position, day_id in enumerate(planner.day_order)
                ]
                session.add(record)

        await asyncio.to_thread(_create)
        logger.info("Planner created: id=%s days=%d", planner.id, len(planner.day_order))
        return planner

    async def get_planner(self, planner_id: str) -> Planner | None:
        def _get() -> Planner | None:
            with self._session_factory() as session:
                record = session.get(PlannerRecord, planner_id, options=[selectinload(PlannerRecord.days)])
                return _planner_from_record(record) if record else None

        return await asyncio.to_thread(_get)

    async def update_settings(self, planner_id: str, settings: PlannerSettings) -> Planner | None:
        def _update() -> Planner | None:
            with self._session_factory() as session, session.begin():
                record = session.get(PlannerRecord, planner_id, options=[selectinload(PlannerRecord.days)])
                if record is None:
                    return None
                record.increment_minutes = settings.increment_minutes
                record.visible_start_hour = settings.visible_hours.start
                record.visible_end_hour = settings.visible_hours.end
                record.settings_timezone = settings.timezone
                return _planner_from_record(record)

        return await asyncio.to_thread(_update)

    async def list_events(self, planner_id: str) -> list[PlannerEvent]:
        def _list() -> list[PlannerEvent]:
            with self._session_factory() as session:
                statement = (
                    select(PlannerEventRecord)
                    .where(PlannerEventRecord.planner_id == planner_id)
                    .order_by(PlannerEventRecord.start)
                )
                return [_event_from_record(record) for record in session.scalars(statement)]

        return await asyncio.to_thread(_list)

    async def list_events_for_day(self, planner_id: str, day_id: str) -> list[PlannerEvent]:
        def _list() -> list[PlannerEvent]:
            with self._session_factory() as session:
                statement = (
                    select(PlannerEventRecord)
                    .where(PlannerEventRecord.planner_id == planner_id, PlannerEventRecord.day_id == day_id)
                    .order_by(PlannerEventRecord.start)
                )
                return [_event_from_record(record) for record in session.scalars(statement)]

        return await asyncio.to_thread(_list)

    async def get_event(self, planner_id: str, event_id: str) -> PlannerEvent | None:
        def _get() -> PlannerEvent | None:
            with self._session_factory() as session:
                record = session.get(PlannerEventRecord, event_id)
                if record is None or record.planner_id != planner_id:
                    return None
                return _event_from_record(record)

        return await asyncio.to_thread(_get)

    async def create_events(self, planner_id: str, events: list[PlannerEvent]) -> list[PlannerEvent]:
        def _create() -> None:
            with self._session_factory() as session, session.begin():
                session.add_all([_event_to_record(planner_id, event) for event in events])

        await asyncio.to_thread(_create)
        logger.info("Events created: planner_id=%s count=%d", planner_id, len(events))
        return events

    async def update_event_times(
        self,
        planner_id: str,
        event_id: str,
        start: datetime,
        end: datetime,
    ) -> PlannerEvent | None:
        def _update() -> PlannerEvent | None:
            with self._session_factory() as session, session.begin():
                record = session.get(PlannerEventRecord, event_id)
                if record is None or record.planner_id != planner_id:
                    return None
                record.start = start
                record.end = end
                return _event_from_record(record)

        return await asyncio.to_thread(_update)

    async def delete_event(self, planner_id: str, event_id: str, *, apply_to_series: bool = False) -> list[str]:
        def _delete() -> list[str]:
            with self._session_factory() as session, session.begin():
                record = session.get(PlannerEventRecord, event_id)
                if record is None or record.planner_id != planner_id:
                    return []

                if not (apply_to_series and record.group_id):
                    session.delete(record)
                    return [event_id]

                condition = (PlannerEventRecord.planner_id == planner_id) & (
                    PlannerEventRecord.group_id == record.group_id
                )
                deleted_ids = list(session.scalars(select(PlannerEventRecord.id).where(condition)))
                session.execute(delete(PlannerEventRecord).where(condition))
                return deleted_ids

        deleted = await asyncio.to_thread(_delete)
        if deleted:
            logger.info("Events deleted: planner_id=%s ids=%s", planner_id, deleted)
        return deleted


@lru_cache(maxsize=1)
def get_planner_store() -> SqlAlchemyPlannerStore:
    """프로세스 단위 저장소 싱글톤을 반환합니다."""
    return SqlAlchemyPlannerStore()
