"""플래너 스케줄링 API."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import require_service_secret
from app.core.logger import get_logger
from app.schemas.planner import PlannerSettings
from app.schemas.schedule import (
    DeleteEventResponse,
    EventCreateRequest,
    EventResponse,
    EventTimeUpdateRequest,
    NudgeRequest,
    PlannerCreateRequest,
    PlannerResponse,
    ScheduledEventsResponse,
    ScheduleIdeaRequest,
    SlotPreviewRequest,
    SlotPreviewResponse,
    TimelineResponse,
)
from app.services.planner_service import (
    DayNotFoundError,
    EventNotFoundError,
    PlannerNotFoundError,
    PlannerService,
    ScheduleValidationError,
    get_planner_service,
)

router = APIRouter(prefix="/api/v1", tags=["planner"], dependencies=[Depends(require_service_secret)])
logger = get_logger(__name__)

PLANNER_ERROR_RESPONSES = {
    401: {
        "description": "인증 실패",
        "content": {
            "application/json": {
                "example": {"detail": "유효하지 않은 서비스 시크릿입니다."},
            }
        },
    },
    404: {
        "description": "리소스 없음",
        "content": {
            "application/json": {
                "examples": {
                    "planner": {"summary": "플래너 없음", "value": {"detail": "플래너를 찾을 수 없습니다."}},
                    "day": {"summary": "일자 없음", "value": {"detail": "일자를 찾을 수 없습니다."}},
                    "event": {"summary": "이벤트 없음", "value": {"detail": "이벤트를 찾을 수 없습니다."}},
                }
            }
        },
    },
}


def _to_http_exception(exc: Exception) -> HTTPException:
    if isinstance(exc, PlannerNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="플래너를 찾을 수 없습니다.")
    if isinstance(exc, DayNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="일자를 찾을 수 없습니다.")
    if isinstance(exc, EventNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="이벤트를 찾을 수 없습니다.")
    return HTTPException(status_code=422, detail=str(exc))


_HANDLED_ERRORS = (PlannerNotFoundError, DayNotFoundError, EventNotFoundError, ScheduleValidationError)


@router.post("/planners", response_model=PlannerResponse, status_code=status.HTTP_201_CREATED)
async def create_planner(
    request: PlannerCreateRequest,
    service: PlannerService = Depends(get_planner_service),  # noqa: B008
) -> PlannerResponse:
    """여행 기간의 일자를 포함한 플래너를 생성한다."""
    planner = await service.create_planner(request)
    return PlannerResponse(planner=planner)


@router.get("/planners/{planner_id}", response_model=PlannerResponse, responses=PLANNER_ERROR_RESPONSES)
async def get_planner(
    planner_id: str,
    service: PlannerService = Depends(get_planner_service),  # noqa: B008
) -> PlannerResponse:
    """플래너와 설정, 일자 목록을 반환한다."""
    try:
        planner = await service.get_planner(planner_id)
    except _HANDLED_ERRORS as exc:
        raise _to_http_exception(exc) from exc
    return PlannerResponse(planner=planner)


@router.patch("/planners/{planner_id}/settings", response_model=PlannerResponse, responses=PLANNER_ERROR_RESPONSES)
async def update_planner_settings(
    planner_id: str,
    settings: PlannerSettings,
    service: PlannerService = Depends(get_planner_service),  # noqa: B008
) -> PlannerResponse:
    """스냅 단위와 표시 시간 범위를 교체한다."""
    try:
        planner = await service.update_settings(planner_id, settings)
    except _HANDLED_ERRORS as exc:
        raise _to_http_exception(exc) from exc
    return PlannerResponse(planner=planner)


@router.get(
    "/planners/{planner_id}/days/{day_id}/events",
    response_model=ScheduledEventsResponse,
    responses=PLANNER_ERROR_RESPONSES,
)
async def list_day_events(
    planner_id: str,
    day_id: str,
    service: PlannerService = Depends(get_planner_service),  # noqa: B008
) -> ScheduledEventsResponse:
    """일자의 이벤트를 시작 시각 순으로 반환한다."""
    try:
        events = await service.list_day_events(planner_id, day_id)
    except _HANDLED_ERRORS as exc:
        raise _to_http_exception(exc) from exc
    return ScheduledEventsResponse(events=events)


@router.post(
    "/planners/{planner_id}/days/{day_id}/slot",
    response_model=SlotPreviewResponse,
    responses=PLANNER_ERROR_RESPONSES,
)
async def preview_slot(
    planner_id: str,
    day_id: str,
    request: SlotPreviewRequest,
    service: PlannerService = Depends(get_planner_service),  # noqa: B008
) -> SlotPreviewResponse:
    """저장 없이 자동 배치될 구간을 계산한다."""
    try:
        slot = await service.preview_slot(planner_id, day_id, request.duration_minutes)
    except _HANDLED_ERRORS as exc:
        raise _to_http_exception(exc) from exc
    return SlotPreviewResponse(day_id=day_id, start=slot.start, end=slot.end)


@router.post(
    "/planners/{planner_id}/days/{day_id}/ideas",
    response_model=ScheduledEventsResponse,
    status_code=status.HTTP_201_CREATED,
    responses=PLANNER_ERROR_RESPONSES,
)
async def schedule_idea(
    planner_id: str,
    day_id: str,
    request: ScheduleIdeaRequest,
    service: PlannerService = Depends(get_planner_service),  # noqa: B008
) -> ScheduledEventsResponse:
    """아이디어를 빈 구간에 배치하고 반복 정책에 따라 저장한다."""
    logger.info("Schedule idea request received: planner_id=%s day_id=%s", planner_id, day_id)
    try:
        events = await service.schedule_idea(planner_id, day_id, request)
    except _HANDLED_ERRORS as exc:
        raise _to_http_exception(exc) from exc
    return ScheduledEventsResponse(events=events)


@router.post(
    "/planners/{planner_id}/events",
    response_model=ScheduledEventsResponse,
    status_code=status.HTTP_201_CREATED,
    responses=PLANNER_ERROR_RESPONSES,
)
async def create_events(
    planner_id: str,
    request: EventCreateRequest,
    service: PlannerService = Depends(get_planner_service),  # noqa: B008
) -> ScheduledEventsResponse:
    """초안 이벤트를 반복 정책에 따라 전개해 저장한다."""
    try:
        events = await service.create_events_with_recurrence(planner_id, request.event, request.recurrence)
    except _HANDLED_ERRORS as exc:
        raise _to_http_exception(exc) from exc
    return ScheduledEventsResponse(events=events)


@router.patch(
    "/planners/{planner_id}/events/{event_id}/time",
    response_model=EventResponse,
    responses=PLANNER_ERROR_RESPONSES,
)
async def commit_event_time(
    planner_id: str,
    event_id: str,
    request: EventTimeUpdateRequest,
    service: PlannerService = Depends(get_planner_service),  # noqa: B008
) -> EventResponse:
    """드래그/리사이즈로 바뀐 시각을 저장한다."""
    try:
        event = await service.commit_event_time(planner_id, event_id, request.start, request.end)
    except _HANDLED_ERRORS as exc:
        raise _to_http_exception(exc) from exc
    return EventResponse(event=event)


@router.post(
    "/planners/{planner_id}/events/{event_id}/nudge",
    response_model=EventResponse,
    responses=PLANNER_ERROR_RESPONSES,
)
async def nudge_event(
    planner_id: str,
    event_id: str,
    request: NudgeRequest,
    service: PlannerService = Depends(get_planner_service),  # noqa: B008
) -> EventResponse:
    """이벤트를 스냅 단위 하나만큼 옮긴다."""
    try:
        event = await service.nudge_event(planner_id, event_id, request.direction)
    except _HANDLED_ERRORS as exc:
        raise _to_http_exception(exc) from exc
    return EventResponse(event=event)


@router.delete(
    "/planners/{planner_id}/events/{event_id}",
    response_model=DeleteEventResponse,
    responses=PLANNER_ERROR_RESPONSES,
)
async def delete_event(
    planner_id: str,
    event_id: str,
    apply_to_series: bool = Query(False, description="같은 반복 묶음 전체 삭제 여부"),
    service: PlannerService = Depends(get_planner_service),  # noqa: B008
) -> DeleteEventResponse:
    """이벤트 하나 또는 반복 묶음 전체를 삭제한다."""
    try:
        deleted_ids = await service.delete_event(planner_id, event_id, apply_to_series=apply_to_series)
    except _HANDLED_ERRORS as exc:
        raise _to_http_exception(exc) from exc
    return DeleteEventResponse(deleted_ids=deleted_ids)


@router.get("/planners/{planner_id}/timeline", response_model=TimelineResponse, responses=PLANNER_ERROR_RESPONSES)
async def get_timeline(
    planner_id: str,
    service: PlannerService = Depends(get_planner_service),  # noqa: B008
) -> TimelineResponse:
    """일자 열과 이벤트 블록의 픽셀 배치를 반환한다."""
    try:
        return await service.build_timeline(planner_id)
    except _HANDLED_ERRORS as exc:
        raise _to_http_exception(exc) from exc
