import random
from collections import Counter

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from kempoverse.exceptions import ValidationError
from kempoverse.models import Category, TrainingSession, TrainingSessionItem
from kempoverse.repositories.entry_repo import EntryRepository
from kempoverse.repositories.training_repo import TrainingSessionRepository
from kempoverse.services.session_builder import SessionBuilder, select_entries, target_item_count


def seed(db, category, n):
    repo = EntryRepository(db)
    return [repo.create(title=f"{category.value} {i}", category=category, tags=["t"], content_md="")
            for i in range(n)]

def builder(db, seed_value=7):
    return SessionBuilder(EntryRepository(db), TrainingSessionRepository(db), rng=random.Random(seed_value))


@pytest.mark.parametrize("minutes,expected", [(5, 4), (19, 4), (20, 4), (25, 5), (30, 6), (44, 8), (40, 8), (120, 8)])
def test_target_item_count(minutes, expected):
    assert target_item_count(minutes) == expected

def test_every_duration_allocates_evenly(db):
    seed(db, Category.technique, 6)
    b = builder(db)
    for minutes in range(5, 121):
        sess = b.create(minutes, [Category.technique])
        n = min(target_item_count(minutes), 6)
        assert sess.entry_count == n == len(sess.items)
        per_item = minutes * 60 // n
        assert sum(i.time_allocated_seconds for i in sess.items) == per_item * n
        assert minutes * 60 - per_item * n < n
        assert [i.sequence_order for i in sess.items] == list(range(n))

def test_example_thirty_minutes(db):
    seed(db, Category.technique, 10)
    sess = builder(db).create(30, [Category.technique])
    assert len(sess.items) == 6
    assert all(i.time_allocated_seconds == 300 for i in sess.items)

def test_only_requested_categories(db):
    seed(db, Category.form, 3)
    seed(db, Category.basic, 3)
    seed(db, Category.history, 5)
    sess = builder(db).create(40, [Category.form, Category.basic])
    assert sess.entry_count == 6
    assert {i.entry_category for i in sess.items} <= {Category.form, Category.basic}
    assert sess.categories == ["form", "basic"]

def test_too_few_matching_entries(db):
    seed(db, Category.basic, 2)
    with pytest.raises(ValidationError) as exc:
        builder(db).create(10, [Category.basic])
    assert "Only found 2 entries" in exc.value.message
    assert "at least 4" in exc.value.message
    assert db.execute(select(func.count()).select_from(TrainingSession)).scalar_one() == 0

def test_no_matching_entries(db):
    seed(db, Category.basic, 5)
    with pytest.raises(ValidationError, match="No entries found"):
        builder(db).create(10, [Category.form])

@pytest.mark.parametrize("minutes,cats", [(None, [Category.basic]), (0, [Category.basic]), (10, None), (10, []), (4, [Category.basic]), (121, [Category.basic])])
def test_rejects_bad_requests(db, minutes, cats):
    seed(db, Category.basic, 5)
    with pytest.raises(ValidationError):
        builder(db).create(minutes, cats)

def test_items_snapshot_entry_title(db):
    entries = seed(db, Category.technique, 4)
    sess = builder(db).create(20, [Category.technique])
    repo = EntryRepository(db)
    for e in entries:
        repo.update(e.id, {"title": "renamed"})
    repo.delete_by_id(entries[0].id)

    items = TrainingSessionRepository(db).items_for(sess.id)
    assert len(items) == 4
    assert all(i.entry_title != "renamed" for i in items)

def test_seeded_builds_are_reproducible(db):
    seed(db, Category.technique, 10)
    a = builder(db, 42).create(30, [Category.technique])
    b = builder(db, 42).create(30, [Category.technique])
    assert [i.entry_id for i in a.items] == [i.entry_id for i in b.items]
    assert [i.variation_text for i in a.items] == [i.variation_text for i in b.items]

def test_selection_is_uniform():
    rng = random.Random(2024)
    pool = list(range(10))
    first = Counter(select_entries(pool, 6, rng)[0] for _ in range(20000))
    assert set(first) == set(pool)
    for count in first.values():
        assert abs(count / 20000 - 0.1) < 0.015
    assert pool == list(range(10))  # caller's list untouched

def test_session_and_items_commit_atomically(db):
    repo = TrainingSessionRepository(db)
    sess = TrainingSession(duration_minutes=10, categories=["basic"], entry_count=2)
    clash = [
        TrainingSessionItem(entry_id="e1", entry_title="A", entry_category=Category.basic,
                            time_allocated_seconds=300, sequence_order=0),
        TrainingSessionItem(entry_id="e2", entry_title="B", entry_category=Category.basic,
                            time_allocated_seconds=300, sequence_order=0),
    ]
    with pytest.raises(IntegrityError):
        repo.create_with_items(sess, clash)
    assert db.execute(select(func.count()).select_from(TrainingSession)).scalar_one() == 0
    assert db.execute(select(func.count()).select_from(TrainingSessionItem)).scalar_one() == 0
