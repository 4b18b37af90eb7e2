"""플래너 도메인 열거형 모음."""

from enum import StrEnum


class EventType(StrEnum):
    """타임라인 이벤트 유형."""

    BLOCK = "block"
    TRAVEL = "travel"
    ACTIVITY = "activity"


class TravelMode(StrEnum):
    """이동 수단."""

    FLIGHT = "flight"
    TAXI = "taxi"
    RIDESHARE = "rideshare"
    BUS = "bus"
    TRAIN = "train"
    CAR = "car"
    BOAT = "boat"
    SUBWAY = "subway"
    TRAM = "tram"
    BIKE = "bike"
    WALK = "walk"
    OTHER = "other"


class RecurrenceMode(StrEnum):
    """반복 정책 모드."""

    NONE = "none"
    DAILY_COUNT = "daily-count"
    DAILY_UNTIL_END = "daily-until-end"


class DragMode(StrEnum):
    """드래그 상호작용 모드."""

    MOVE = "move"
    RESIZE_END = "resize-end"


class NudgeDirection(StrEnum):
    """키보드 화살표 이동 방향."""

    UP = "up"
    DOWN = "down"
