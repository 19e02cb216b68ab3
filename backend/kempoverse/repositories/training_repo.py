# kempoverse/repositories/training_repo.py
from __future__ import annotations
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from kempoverse.models import SessionStatus, TrainingSession, TrainingSessionItem
from kempoverse.exceptions import NotFoundError
from kempoverse.repositories.base import BaseRepository, Page

class TrainingSessionRepository(BaseRepository[TrainingSession]):
    model = TrainingSession

    # READS
    def get_with_items(self, session_id: str) -> Optional[TrainingSession]:
        stmt = (
            select(TrainingSession)
            .where(TrainingSession.id == session_id)
            .options(selectinload(TrainingSession.items))
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list(self, *, limit: int = 20, offset: int = 0) -> Page[TrainingSession]:
        stmt = select(TrainingSession).order_by(TrainingSession.started_at.desc(), TrainingSession.id.asc())
        return self.page_from_stmt(stmt, limit=limit, offset=offset)

    def items_for(self, session_id: str) -> list[TrainingSessionItem]:
        stmt = (
            select(TrainingSessionItem)
            .where(TrainingSessionItem.session_id == session_id)
            .order_by(TrainingSessionItem.sequence_order.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    # WRITES
    def create_with_items(
        self, session: TrainingSession, items: list[TrainingSessionItem]
    ) -> TrainingSession:
        """Session row and all item rows commit together or not at all."""
        session.items = items
        try:
            self.db.add(session)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(session)
        return session

    def update_status(
        self, session_id: str, *, status: SessionStatus, completed_at: datetime
    ) -> TrainingSession:
        # No transition guard: re-finishing a finished session just overwrites it
        sess = self.get(session_id)
        if not sess:
            raise NotFoundError("Session not found")
        sess.status = status
        sess.completed_at = completed_at
        self.db.commit()
        self.db.refresh(sess)
        return sess
