"""
Session state owned by a single study sitting.

A SessionQueue is a plain value: the session manager receives it, mutates
it after successful store writes, and hands it back. There is no global
session singleton.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .models import StudyItem


class Phase(str, Enum):
    """Presentation phase of the current item."""

    AWAITING_FLIP = "awaiting_flip"
    AWAITING_ANSWER = "awaiting_answer"
    ANSWERED = "answered"


class FailurePolicy(str, Enum):
    """
    What happens to an item answered with Again.

    REQUEUE appends it to the tail of the current queue for a redrill;
    ADVANCE moves straight on. Progress is persisted once per
    presentation either way.
    """

    REQUEUE = "requeue"
    ADVANCE = "advance"


@dataclass
class SessionStats:
    reviewed: int = 0
    correct: int = 0
    xp_earned: int = 0

    @property
    def accuracy(self) -> float:
        if self.reviewed == 0:
            return 0.0
        return self.correct / self.reviewed


@dataclass
class SessionQueue:
    """
    Ordered sequence of study items for one session.

    Attributes:
        entries: Items in presentation order; re-queued items appear twice.
        current_index: Cursor into entries.
        complete: Set once the last entry has been answered.
        deck_id: Optional deck scope the session was built for.
        cram: True when built from the unfiltered deck fallback.
        phase: Presentation phase of the current entry.
        stats: Aggregates for this session only.
        requeue_counts: item id -> times re-queued in this session.
        built_size: Number of entries the queue was built with, before any
            re-queued copies were appended.
    """

    entries: list[StudyItem] = field(default_factory=list)
    current_index: int = 0
    complete: bool = False
    deck_id: int | None = None
    cram: bool = False
    phase: Phase = Phase.AWAITING_FLIP
    stats: SessionStats = field(default_factory=SessionStats)
    requeue_counts: dict[int, int] = field(default_factory=dict)
    started_at: datetime | None = None
    presented_at: datetime | None = None
    built_size: int | None = None

    def __post_init__(self):
        if self.built_size is None:
            self.built_size = len(self.entries)

    @property
    def is_empty(self) -> bool:
        """True when there was nothing to study."""
        return not self.entries

    @property
    def current(self) -> StudyItem | None:
        if self.complete or not self.entries:
            return None
        return self.entries[self.current_index]

    @property
    def remaining(self) -> int:
        if self.complete:
            return 0
        return len(self.entries) - self.current_index

    def __len__(self) -> int:
        return len(self.entries)
