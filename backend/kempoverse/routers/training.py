from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from kempoverse.db import get_db
from kempoverse.deps.auth import require_auth
from kempoverse.models import SessionStatus
from kempoverse.models.entry import utcnow
from kempoverse.repositories.entry_repo import EntryRepository
from kempoverse.repositories.training_repo import TrainingSessionRepository
from kempoverse.schemas.envelope import Envelope, Success
from kempoverse.schemas.training import (
    SessionCreate,
    SessionStatusUpdate,
    TrainingSessionDetail,
    TrainingSessionList,
)
from kempoverse.services.session_builder import SessionBuilder

router = APIRouter(prefix="/api/training/sessions", tags=["training"])

def get_session_builder(db: Session = Depends(get_db)) -> SessionBuilder:
    return SessionBuilder(EntryRepository(db), TrainingSessionRepository(db))

@router.get("", response_model=Envelope[TrainingSessionList])
def list_sessions(
    db: Session = Depends(get_db),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    page = TrainingSessionRepository(db).list(limit=limit, offset=offset)
    return {"data": {"sessions": page.items, "total": page.total}}

@router.post("", response_model=Envelope[TrainingSessionDetail], status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_auth)])
def create_session(payload: SessionCreate, builder: SessionBuilder = Depends(get_session_builder)):
    # Returned with its items so the client can start playback without another round trip
    sess = builder.create(payload.duration_minutes, payload.categories)
    return {"data": sess}

@router.get("/{session_id}", response_model=Envelope[TrainingSessionDetail])
def get_session(session_id: str, db: Session = Depends(get_db)):
    sess = TrainingSessionRepository(db).get_with_items(session_id)
    if not sess:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return {"data": sess}

@router.put("/{session_id}", response_model=Envelope[Success], dependencies=[Depends(require_auth)])
def update_session(session_id: str, payload: SessionStatusUpdate, db: Session = Depends(get_db)):
    if payload.status is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required field: status")
    TrainingSessionRepository(db).update_status(
        session_id,
        status=SessionStatus(payload.status),
        completed_at=payload.completed_at or utcnow(),
    )
    return {"data": {"success": True}}

@router.delete("/{session_id}", response_model=Envelope[Success], dependencies=[Depends(require_auth)])
def delete_session(session_id: str, db: Session = Depends(get_db)):
    # items go with it (ORM cascade + ON DELETE CASCADE)
    if not TrainingSessionRepository(db).delete_by_id(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return {"data": {"success": True}}
