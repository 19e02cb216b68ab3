import uuid
from datetime import datetime, timezone
from enum import Enum
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, DateTime, Enum as SAEnum
from kempoverse.db import Base
from kempoverse.models.types import JSONList

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def new_id() -> str:
    return str(uuid.uuid4())

class Category(str, Enum):
    history = "history"
    technique = "technique"
    form = "form"
    self_defense = "self_defense"
    basic = "basic"

class Entry(Base):
    __tablename__ = "entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[Category] = mapped_column(
        SAEnum(Category, name="entry_category", native_enum=False, length=32),
        nullable=False,
        index=True,
    )
    subcategory: Mapped[str | None] = mapped_column(String(120), nullable=True)
    belts: Mapped[list[str] | None] = mapped_column(JSONList, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSONList, nullable=False)
    content_md: Mapped[str] = mapped_column(Text, nullable=False, default="")
    reference_urls: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    video_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    image_urls: Mapped[list[str] | None] = mapped_column(JSONList, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
