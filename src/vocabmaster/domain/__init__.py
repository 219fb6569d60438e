# Domain Package
from .errors import PersistenceError, SessionStateError, ValidationError, VocabMasterError
from .models import (
    AnswerSignals,
    DailyStats,
    Deck,
    Item,
    LevelInfo,
    Progress,
    Quality,
    ReviewEvent,
    ScheduleResult,
    StudyItem,
    WordStatus,
)
from .ports import AchievementSink, DeckRepository, ProgressStore
from .session import FailurePolicy, Phase, SessionQueue, SessionStats

__all__ = [
    "AchievementSink",
    "AnswerSignals",
    "DailyStats",
    "Deck",
    "DeckRepository",
    "FailurePolicy",
    "Item",
    "LevelInfo",
    "PersistenceError",
    "Phase",
    "Progress",
    "ProgressStore",
    "Quality",
    "ReviewEvent",
    "ScheduleResult",
    "SessionQueue",
    "SessionStateError",
    "SessionStats",
    "StudyItem",
    "ValidationError",
    "VocabMasterError",
    "WordStatus",
]
