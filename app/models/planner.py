# app/models/planner.py
from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base


# 플래너 테이블 정의
class PlannerRecord(Base):
    __tablename__ = "planners"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    # 표시용 시간대 라벨 (변환에는 사용하지 않음)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False)

    # 스케줄링 설정
    increment_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    visible_start_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    visible_end_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    settings_timezone: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), server_default=func.now()
    )

    days: Mapped[list["PlannerDayRecord"]] = relationship(
        back_populates="planner",
        order_by="PlannerDayRecord.position",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<PlannerRecord(id={self.id}, name={self.name})>"


# 일자 테이블 정의 (position 순서가 day_order)
class PlannerDayRecord(Base):
    __tablename__ = "planner_days"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    planner_id: Mapped[str] = mapped_column(ForeignKey("planners.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    day_date: Mapped[date | None] = mapped_column("date", Date, nullable=True)
    headline: Mapped[str | None] = mapped_column(String(200), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    planner: Mapped[PlannerRecord] = relationship(back_populates="days")

    def __repr__(self):
        return f"<PlannerDayRecord(id={self.id}, date={self.day_date})>"


# 이벤트 테이블 정의
class PlannerEventRecord(Base):
    __tablename__ = "planner_events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    planner_id: Mapped[str] = mapped_column(ForeignKey("planners.id", ondelete="CASCADE"), index=True)
    day_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    # 벽시계 시각 (naive)
    start: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    timezone: Mapped[str] = mapped_column(String(64), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    images: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    group_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)

    # 유형별 필드 (travel_mode, address, tags 등)
    details: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), server_default=func.now()
    )

    def __repr__(self):
        return f"<PlannerEventRecord(id={self.id}, type={self.type}, start={self.start})>"
