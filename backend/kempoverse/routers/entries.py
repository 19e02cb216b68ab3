from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from kempoverse.db import get_db
from kempoverse.deps.auth import require_auth
from kempoverse.models import Category
from kempoverse.repositories.entry_repo import EntryRepository
from kempoverse.schemas.entry import EntryCreate, EntryList, EntryRead, EntryUpdate
from kempoverse.schemas.envelope import Envelope, Success

router = APIRouter(prefix="/api/entries", tags=["entries"])

@router.get("", response_model=Envelope[EntryList])
def list_entries(
    db: Session = Depends(get_db),
    q: str | None = Query(None, max_length=200),
    search: str | None = Query(None, max_length=200, description="Alias of q"),
    category: Category | None = None,
    tag: str | None = None,
    belt: str | None = None,
):
    repo = EntryRepository(db)
    query = (q or search or "").strip()
    if query:
        # relevance order; category is a plain-list filter only
        entries = repo.search(query, tag=tag, belt=belt)
    else:
        entries = repo.list(category=category, tag=tag, belt=belt)
    return {"data": {"entries": entries, "total": len(entries)}}

@router.get("/tags", response_model=Envelope[list[str]])
def list_tags(db: Session = Depends(get_db)):
    return {"data": EntryRepository(db).all_tags()}

@router.post("", response_model=Envelope[EntryRead], status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_auth)])
def create_entry(payload: EntryCreate, db: Session = Depends(get_db)):
    entry = EntryRepository(db).create(**payload.to_columns())
    return {"data": entry}

@router.get("/{entry_id}", response_model=Envelope[EntryRead])
def get_entry(entry_id: str, db: Session = Depends(get_db)):
    entry = EntryRepository(db).get(entry_id)
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return {"data": entry}

@router.put("/{entry_id}", response_model=Envelope[EntryRead], dependencies=[Depends(require_auth)])
def update_entry(entry_id: str, payload: EntryUpdate, db: Session = Depends(get_db)):
    entry = EntryRepository(db).update(entry_id, payload.changes())
    return {"data": entry}

@router.delete("/{entry_id}", response_model=Envelope[Success], dependencies=[Depends(require_auth)])
def delete_entry(entry_id: str, db: Session = Depends(get_db)):
    if not EntryRepository(db).delete_by_id(entry_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return {"data": {"success": True}}
