# kempoverse/repositories/base.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy.orm import Session
from sqlalchemy import Select, select, func

T = TypeVar("T")  # SQLAlchemy model type

@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int

class BaseRepository(Generic[T]):
    """Lightweight base for repositories using SQLAlchemy 2.0 style."""
    model: type[T]

    def __init__(self, db: Session):
        self.db = db

    def get(self, pk: Any) -> Optional[T]:
        return self.db.get(self.model, pk)

    def page_from_stmt(self, stmt: Select, *, limit: int = 50, offset: int = 0) -> Page[T]:
        # One query for the count, one for the slice
        total = self.db.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar_one()
        items = list(self.db.execute(stmt.limit(limit).offset(offset)).scalars().all())
        return Page(items=items, total=total, limit=limit, offset=offset)

    def add_and_commit(self, entity: T) -> T:
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete_by_id(self, pk: Any) -> bool:
        entity = self.get(pk)
        if entity is None:
            return False
        self.db.delete(entity)
        self.db.commit()
        return True
