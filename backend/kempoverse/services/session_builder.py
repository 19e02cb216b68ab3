"""
Builds timed training sessions from a random selection of entries.

Item count follows the requested duration (one technique per five minutes),
clamped to MIN_ITEMS..MAX_ITEMS and capped by how many entries match. Every
item gets the same share of the duration, rounded down to whole seconds.
"""
from __future__ import annotations

import logging
import random
from typing import Iterable, Optional

from kempoverse.exceptions import ValidationError
from kempoverse.models import Category, Entry, SessionStatus, TrainingSession, TrainingSessionItem
from kempoverse.models.entry import utcnow
from kempoverse.repositories.entry_repo import EntryRepository
from kempoverse.repositories.training_repo import TrainingSessionRepository
from kempoverse.services.variations import generate_variation

log = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 5
MAX_DURATION_MINUTES = 120
MINUTES_PER_ITEM = 5
MIN_ITEMS = 4
MAX_ITEMS = 8


def target_item_count(duration_minutes: int) -> int:
    return max(MIN_ITEMS, min(MAX_ITEMS, duration_minutes // MINUTES_PER_ITEM))


def validate_request(duration_minutes: Optional[int], categories: Optional[Iterable[Category]]) -> list[Category]:
    cats = list(dict.fromkeys(categories or ()))
    if not duration_minutes or not cats:
        raise ValidationError("Missing required fields: duration_minutes, categories")
    if not MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES:
        raise ValidationError(
            f"Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes"
        )
    return cats


def select_entries(entries: list[Entry], count: int, rng: random.Random) -> list[Entry]:
    """Uniformly random selection of up to `count` entries, in random order."""
    pool = list(entries)
    rng.shuffle(pool)
    return pool[:count]


def build_items(selected: list[Entry], duration_minutes: int, rng: random.Random) -> list[TrainingSessionItem]:
    seconds_each = (duration_minutes * 60) // len(selected)
    items = []
    for position, entry in enumerate(selected):
        variation = generate_variation(rng)
        items.append(TrainingSessionItem(
            entry_id=entry.id,
            # snapshot: later edits to the entry don't rewrite history
            entry_title=entry.title,
            entry_category=entry.category,
            time_allocated_seconds=seconds_each,
            variation_type=variation.type.value if variation.type else None,
            variation_text=variation.text,
            sequence_order=position,
        ))
    return items


class SessionBuilder:
    def __init__(
        self,
        entries: EntryRepository,
        sessions: TrainingSessionRepository,
        rng: Optional[random.Random] = None,
    ):
        self.entries = entries
        self.sessions = sessions
        self.rng = rng or random.Random()

    def create(self, duration_minutes: Optional[int], categories: Optional[Iterable[Category]]) -> TrainingSession:
        cats = validate_request(duration_minutes, categories)
        wanted = target_item_count(duration_minutes)

        matching = self.entries.list_by_categories(cats)
        if not matching:
            raise ValidationError("No entries found matching selected categories")

        selected = select_entries(matching, wanted, self.rng)
        if len(selected) < MIN_ITEMS:
            raise ValidationError(
                f"Only found {len(selected)} entries. Need at least {MIN_ITEMS}. "
                "Try enabling more categories."
            )

        session = TrainingSession(
            duration_minutes=duration_minutes,
            categories=[c.value for c in cats],
            entry_count=len(selected),
            started_at=utcnow(),
            status=SessionStatus.active,
        )
        created = self.sessions.create_with_items(session, build_items(selected, duration_minutes, self.rng))
        log.info("training session %s: %d items over %d min (%s)",
                 created.id, created.entry_count, duration_minutes, ",".join(session.categories))
        return created
