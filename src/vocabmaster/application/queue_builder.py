"""
Queue builder for study sessions.

Builds ordered study queues by:
1. Splitting candidates into due items and fresh (new) items
2. Sorting due items by due date (or by review priority)
3. Shuffling fresh items and appending them
4. Truncating to the session size
"""

import logging
import random
from dataclasses import dataclass
from datetime import date

from vocabmaster.domain.models import StudyItem, WordStatus

from .scheduler import review_priority

logger = logging.getLogger(__name__)


@dataclass
class QueueBuildResult:
    """Result of queue building operation."""

    ordered: list[StudyItem]  # Final bounded presentation order
    due: list[StudyItem]  # Due items, sorted
    fresh: list[StudyItem]  # New items, shuffled
    truncated: int  # Candidates dropped by the session size


def is_due(study_item: StudyItem, today: date) -> bool:
    """Learning/review items, or anything whose due date has arrived."""
    progress = study_item.progress
    if progress.status in (WordStatus.LEARNING, WordStatus.REVIEW):
        return True
    return progress.next_review_date is not None and progress.next_review_date <= today


def build_session_queue(
    candidates: list[StudyItem],
    today: date,
    limit: int,
    rng: random.Random | None = None,
    by_priority: bool = False,
) -> QueueBuildResult:
    """
    Order and bound candidates for one session.

    Args:
        candidates: Items from the store, in stable id order.
        today: The learner's current date.
        limit: Maximum number of items in the session.
        rng: Random source for shuffling new items (seed it for tests).
        by_priority: Sort due items by review priority instead of due date.

    Returns:
        QueueBuildResult with due items first, then shuffled fresh items.
    """
    rng = rng or random.Random()

    due: list[StudyItem] = []
    fresh: list[StudyItem] = []
    for candidate in candidates:
        if is_due(candidate, today):
            due.append(candidate)
        else:
            fresh.append(candidate)

    # sorted() is stable, so equal keys keep store (id) order
    if by_priority:
        due = sorted(due, key=lambda s: -review_priority(s.progress, today))
    else:
        due = sorted(due, key=lambda s: s.progress.next_review_date or date.min)

    rng.shuffle(fresh)

    combined = due + fresh
    ordered = combined[: max(limit, 0)]
    truncated = len(combined) - len(ordered)
    if truncated:
        logger.debug(f"Session bounded to {len(ordered)} items ({truncated} deferred)")

    return QueueBuildResult(ordered=ordered, due=due, fresh=fresh, truncated=truncated)
