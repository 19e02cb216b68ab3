# kempoverse/repositories/entry_repo.py
from __future__ import annotations
import re
from typing import Any, Iterable, Optional

from sqlalchemy import Select, select, func

from kempoverse.exceptions import NotFoundError, ValidationError
from kempoverse.models import Category, Entry
from kempoverse.models.entry import utcnow
from kempoverse.repositories.base import BaseRepository

_WORD = re.compile(r"\w+", re.UNICODE)

# Relevance weights for the portable (non-PostgreSQL) search path
_WEIGHTS = (("title", 3), ("tags", 2), ("subcategory", 1), ("content_md", 1))


def _contains(values: Optional[Iterable[str]], needle: str) -> bool:
    """Case-insensitive substring match against any element of a list column."""
    n = needle.lower()
    return any(n in v.lower() for v in values or ())


def _relevance(entry: Entry, terms: list[str]) -> int:
    fields = {
        "title": entry.title.lower(),
        "tags": " ".join(entry.tags or ()).lower(),
        "subcategory": (entry.subcategory or "").lower(),
        "content_md": entry.content_md.lower(),
    }
    score = 0
    for term in terms:
        for name, weight in _WEIGHTS:
            if term in fields[name]:
                score += weight
    return score


def fulltext_search_stmt(query: str) -> Select:
    """PostgreSQL full-text match over title, subcategory, tags and content, best rank first."""
    document = func.to_tsvector(
        "english",
        func.concat_ws(" ", Entry.title, Entry.subcategory, Entry.tags, Entry.content_md),
    )
    tsquery = func.plainto_tsquery("english", query)
    return (
        select(Entry)
        .where(document.op("@@")(tsquery))
        .order_by(func.ts_rank(document, tsquery).desc(), Entry.updated_at.desc())
    )


class EntryRepository(BaseRepository[Entry]):
    model = Entry

    # READS
    def list(
        self,
        *,
        category: Optional[Category] = None,
        tag: Optional[str] = None,
        belt: Optional[str] = None,
    ) -> list[Entry]:
        stmt = select(Entry).order_by(Entry.updated_at.desc())
        if category is not None:
            stmt = stmt.where(Entry.category == category)
        entries = self.db.execute(stmt).scalars().all()
        return self._post_filter(entries, tag=tag, belt=belt)

    def search(self, query: str, *, tag: Optional[str] = None, belt: Optional[str] = None) -> list[Entry]:
        """Full-text search, best match first."""
        if self.db.get_bind().dialect.name == "postgresql":
            entries = self._search_postgres(query)
        else:
            entries = self._search_portable(query)
        return self._post_filter(entries, tag=tag, belt=belt)

    def list_by_categories(self, categories: Iterable[Category]) -> list[Entry]:
        stmt = (
            select(Entry)
            .where(Entry.category.in_(list(categories)))
            .order_by(Entry.created_at.asc(), Entry.id.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def all_tags(self) -> list[str]:
        tags: set[str] = set()
        for entry_tags in self.db.execute(select(Entry.tags)).scalars():
            tags.update(entry_tags or ())
        return sorted(tags)

    # WRITES
    def create(self, **columns: Any) -> Entry:
        return self.add_and_commit(Entry(**columns))

    def update(self, entry_id: str, changes: dict[str, Any]) -> Entry:
        """Apply only the given columns."""
        if not changes:
            raise ValidationError("No fields to update")
        entry = self.get(entry_id)
        if not entry:
            raise NotFoundError("Entry not found")
        for column, value in changes.items():
            setattr(entry, column, value)
        entry.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(entry)
        return entry

    # HELPERS
    def _post_filter(self, entries, *, tag: Optional[str], belt: Optional[str]) -> list[Entry]:
        # tags/belts are serialized lists, so these filters run after retrieval
        out = list(entries)
        if tag:
            out = [e for e in out if _contains(e.tags, tag)]
        if belt:
            out = [e for e in out if _contains(e.belts, belt)]
        return out

    def _search_postgres(self, query: str) -> list[Entry]:
        return list(self.db.execute(fulltext_search_stmt(query)).scalars().all())

    def _search_portable(self, query: str) -> list[Entry]:
        terms = [t.lower() for t in _WORD.findall(query)]
        if not terms:
            return []
        stmt = select(Entry).order_by(Entry.updated_at.desc())
        scored = [(e, _relevance(e, terms)) for e in self.db.execute(stmt).scalars().all()]
        # sorted() is stable, so ties keep most-recently-updated first
        return [e for e, score in sorted(scored, key=lambda pair: -pair[1]) if score > 0]
