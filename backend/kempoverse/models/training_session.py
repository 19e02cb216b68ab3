from datetime import datetime
from enum import Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, ForeignKey, String, Text, DateTime, UniqueConstraint, Enum as SAEnum
from kempoverse.db import Base
from kempoverse.models.entry import Category, new_id, utcnow
from kempoverse.models.types import JSONList

class SessionStatus(str, Enum):
    active = "active"
    completed = "completed"
    abandoned = "abandoned"

class TrainingSession(Base):
    __tablename__ = "training_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    categories: Mapped[list[str]] = mapped_column(JSONList, nullable=False)
    entry_count: Mapped[int] = mapped_column(Integer, nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[SessionStatus] = mapped_column(
        SAEnum(SessionStatus, name="session_status", native_enum=False, length=16),
        nullable=False,
        default=SessionStatus.active,
    )

    items = relationship(
        "TrainingSessionItem",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="TrainingSessionItem.sequence_order",
    )

class TrainingSessionItem(Base):
    __tablename__ = "training_session_items"
    __table_args__ = (UniqueConstraint("session_id", "sequence_order", name="uq_session_item_order"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    session_id: Mapped[str] = mapped_column(ForeignKey("training_sessions.id", ondelete="CASCADE"), index=True)
    # No FK: deleting an entry must not touch session history
    entry_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    entry_title: Mapped[str] = mapped_column(String(255), nullable=False)
    entry_category: Mapped[Category] = mapped_column(
        SAEnum(Category, name="entry_category", native_enum=False, length=32),
        nullable=False,
    )
    time_allocated_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    variation_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    variation_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    sequence_order: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    session = relationship("TrainingSession", back_populates="items")
