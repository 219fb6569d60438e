"""
Domain models for items, their review progress and scheduling results.

These are pure data structures with no I/O or external dependencies.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum

from .constants import DEFAULT_BOX, DEFAULT_EASE_FACTOR, DEFAULT_INTERVAL, MAX_BOX, MIN_EASE_FACTOR
from .errors import ValidationError


class Quality(IntEnum):
    """Recall quality reported by the learner (1=Again, 2=Good, 3=Easy)."""

    AGAIN = 1
    GOOD = 2
    EASY = 3

    @classmethod
    def parse(cls, value: "Quality | int | str") -> "Quality":
        """
        Coerce a button value, number or name into a Quality.

        Raises:
            ValidationError: if the value is not one of the three ratings.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValidationError(f"Invalid quality: {value!r}")
        if isinstance(value, str):
            text = value.strip()
            if text.upper() in cls.__members__:
                return cls[text.upper()]
            if not text.isdigit():
                raise ValidationError(f"Invalid quality: {value!r}")
            value = int(text)
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Invalid quality: {value!r} (expected 1, 2 or 3)") from None

    @property
    def score(self) -> int:
        """SM-2 score on the 0-5 scale."""
        return {Quality.AGAIN: 0, Quality.GOOD: 3, Quality.EASY: 5}[self]

    @property
    def is_success(self) -> bool:
        return self.score >= 3


class WordStatus(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    MASTERED = "mastered"


@dataclass(frozen=True)
class Progress:
    """
    Per-item review state: SM-2 ease/interval plus a Leitner box.

    Every field is always present. Construction rejects values outside
    their bounds so the scheduling math never has to guard against them.

    Attributes:
        ease_factor: Interval growth multiplier, never below 1.3.
        interval: Days until the next review.
        repetitions: Consecutive successful reviews since the last lapse.
        box: Leitner rung, 1 (newest/hardest) to 5 (most consolidated).
        correct_streak: Consecutive correct answers, reset on any failure.
        wrong_count: Lifetime failures.
        total_reviews: Lifetime reviews.
        status: Lifecycle status, derived from repetitions/box/interval.
        next_review_date: None until the item is first reviewed.
        last_reviewed_at: Timestamp of the most recent review.
    """

    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = DEFAULT_INTERVAL
    repetitions: int = 0
    box: int = DEFAULT_BOX
    correct_streak: int = 0
    wrong_count: int = 0
    total_reviews: int = 0
    status: WordStatus = WordStatus.NEW
    next_review_date: date | None = None
    last_reviewed_at: datetime | None = None

    def __post_init__(self):
        if math.isnan(self.ease_factor) or self.ease_factor < MIN_EASE_FACTOR:
            raise ValidationError(
                f"ease_factor must be >= {MIN_EASE_FACTOR}, got {self.ease_factor}"
            )
        if not DEFAULT_BOX <= self.box <= MAX_BOX:
            raise ValidationError(f"box must be in [{DEFAULT_BOX}, {MAX_BOX}], got {self.box}")
        for name in ("interval", "repetitions", "correct_streak", "wrong_count", "total_reviews"):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name} must be >= 0, got {getattr(self, name)}")
        if not isinstance(self.status, WordStatus):
            try:
                object.__setattr__(self, "status", WordStatus(self.status))
            except ValueError:
                raise ValidationError(f"Unknown status: {self.status!r}") from None

    @property
    def is_new(self) -> bool:
        return self.status is WordStatus.NEW


@dataclass(frozen=True)
class Item:
    """A learnable unit (usually a word). Content is owned by the store."""

    id: int
    deck_id: int | None
    term: str
    definition: str
    example: str | None = None
    phonetic: str | None = None


@dataclass(frozen=True)
class StudyItem:
    """An item joined with its progress row, as returned by the store."""

    item: Item
    progress: Progress = field(default_factory=Progress)

    @property
    def id(self) -> int:
        return self.item.id


@dataclass(frozen=True)
class ReviewEvent:
    """A single answer, validated before it reaches the scheduler."""

    quality: Quality
    response_time_ms: int | None = None
    hard_mode: bool = False

    def __post_init__(self):
        object.__setattr__(self, "quality", Quality.parse(self.quality))
        if self.response_time_ms is not None and self.response_time_ms < 0:
            raise ValidationError(
                f"response_time_ms must be >= 0, got {self.response_time_ms}"
            )


@dataclass(frozen=True)
class ScheduleResult:
    progress: Progress
    next_review_date: date


@dataclass(frozen=True)
class LevelInfo:
    level: int  # 1-based
    title: str
    progress_percent: float  # 0-100, towards the next level
    next_level_xp: int


@dataclass
class DailyStats:
    day: date
    words_reviewed: int = 0
    correct_count: int = 0
    xp_earned: int = 0
    streak_maintained: bool = False


@dataclass(frozen=True)
class AnswerSignals:
    """
    Signals emitted after every successful answer.

    The engine does not know achievement rules; a sink decides what to
    unlock from these.
    """

    item_id: int
    quality: Quality
    words_total_reviewed: int
    mastered_count: int
    response_time_ms: int | None
    hour_of_day: int


@dataclass(frozen=True)
class Deck:
    id: int
    name: str
    description: str | None = None
    word_count: int = 0
