from kempoverse.models.entry import Category, Entry
from kempoverse.models.training_session import SessionStatus, TrainingSession, TrainingSessionItem

__all__ = [
    "Category",
    "Entry",
    "SessionStatus",
    "TrainingSession",
    "TrainingSessionItem",
]
