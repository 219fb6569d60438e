"""
SM-2 scheduler enhanced with a Leitner box.

Given an item's progress and a quality rating, computes the updated
progress, the next review date and the lifecycle status.

This is a pure computation module with no I/O.
"""

import math
from dataclasses import replace
from datetime import date, datetime, timedelta

from vocabmaster.domain.constants import (
    AVG_DAYS_PER_BOX,
    DEFAULT_EASE_FACTOR,
    EASY_EASE_BONUS,
    EASY_INTERVAL_BONUS,
    HARD_LAPSE_EASE_PENALTY,
    HARD_MODE_INTERVAL_DAMPENER,
    LAPSE_INTERVAL_RETENTION,
    MASTERY_INTERVAL,
    MAX_INTERVAL,
    MAX_BOX,
    MIN_EASE_FACTOR,
    PRIORITY_BASE,
    PRIORITY_EASE_WEIGHT,
    PRIORITY_MAX,
    PRIORITY_MIN,
    PRIORITY_OVERDUE_WEIGHT,
    PRIORITY_STREAK_WEIGHT,
    PRIORITY_WRONG_WEIGHT,
    REVIEW_INTERVAL,
    SOFT_LAPSE_EASE_PENALTY,
)
from vocabmaster.domain.models import Progress, Quality, ScheduleResult, WordStatus


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    return math.floor(value + 0.5)


def derive_status(repetitions: int, box: int, interval: int) -> WordStatus:
    """
    Lifecycle status as a pure function of the scheduling model.

    Never returns NEW: that status only exists before the first review.
    """
    if repetitions == 0:
        return WordStatus.LEARNING
    if box >= MAX_BOX and interval >= MASTERY_INTERVAL:
        return WordStatus.MASTERED
    if interval >= REVIEW_INTERVAL:
        return WordStatus.REVIEW
    return WordStatus.LEARNING


def schedule(
    progress: Progress,
    quality: Quality | int,
    hard_mode: bool = False,
    now: datetime | None = None,
) -> ScheduleResult:
    """
    Apply one review to `progress`.

    Args:
        progress: Current state of the item.
        quality: Again/Good/Easy (1/2/3).
        hard_mode: Harsher lapses and damped interval growth.
        now: Review time; defaults to the current local time.

    Returns:
        ScheduleResult with the new progress and its next review date.

    Raises:
        ValidationError: if `quality` is not a valid rating.
    """
    quality = Quality.parse(quality)
    now = now or datetime.now()
    q = quality.score

    ease = progress.ease_factor
    interval = progress.interval
    repetitions = progress.repetitions
    box = progress.box
    correct_streak = progress.correct_streak
    wrong_count = progress.wrong_count

    if not quality.is_success:
        correct_streak = 0
        wrong_count += 1
        repetitions = 0

        if hard_mode:
            interval = 1
            box = 1
            ease = max(MIN_EASE_FACTOR, ease - HARD_LAPSE_EASE_PENALTY)
        else:
            if interval > MASTERY_INTERVAL:
                # Well-consolidated item: keep part of the interval, never promote the box
                interval = math.ceil(interval * LAPSE_INTERVAL_RETENTION)
                box = min(box, max(2, math.ceil(box / 2)))
            else:
                interval = 1
                box = 1
            ease = max(MIN_EASE_FACTOR, ease - SOFT_LAPSE_EASE_PENALTY)
    else:
        repetitions += 1
        correct_streak += 1
        box = min(MAX_BOX, box + 1)

        if repetitions == 1:
            interval = 1
        elif repetitions == 2:
            interval = 6
        else:
            interval = round_half_up(interval * ease)

        if quality is Quality.EASY:
            interval = round_half_up(interval * EASY_INTERVAL_BONUS)
            ease += EASY_EASE_BONUS

        if hard_mode:
            interval = max(1, round_half_up(interval * HARD_MODE_INTERVAL_DAMPENER))

        interval = min(interval, MAX_INTERVAL)
        ease = max(MIN_EASE_FACTOR, ease + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)))

    next_review_date = now.date() + timedelta(days=interval)
    updated = replace(
        progress,
        ease_factor=ease,
        interval=interval,
        repetitions=repetitions,
        box=box,
        correct_streak=correct_streak,
        wrong_count=wrong_count,
        total_reviews=progress.total_reviews + 1,
        status=derive_status(repetitions, box, interval),
        next_review_date=next_review_date,
        last_reviewed_at=now,
    )
    return ScheduleResult(progress=updated, next_review_date=next_review_date)


def days_overdue(progress: Progress, today: date) -> int:
    """Whole days past the due date; 0 when not due yet or never scheduled."""
    if progress.next_review_date is None:
        return 0
    return max(0, (today - progress.next_review_date).days)


def review_priority(progress: Progress, today: date | None = None) -> float:
    """
    Rank an item for smart ordering (higher = review sooner).

    Difficult, frequently failed and overdue items score higher; a good
    streak lowers the score. Clamped to [0, 100].
    """
    today = today or date.today()
    priority = PRIORITY_BASE
    priority += (DEFAULT_EASE_FACTOR - progress.ease_factor) * PRIORITY_EASE_WEIGHT
    priority += progress.wrong_count * PRIORITY_WRONG_WEIGHT
    priority -= progress.correct_streak * PRIORITY_STREAK_WEIGHT
    priority += days_overdue(progress, today) * PRIORITY_OVERDUE_WEIGHT
    return max(PRIORITY_MIN, min(PRIORITY_MAX, priority))


def predict_mastery_date(progress: Progress, today: date | None = None) -> date:
    """Estimate when the item reaches the top box, from average days per box."""
    today = today or date.today()
    if progress.box >= MAX_BOX:
        return today
    remaining = sum(AVG_DAYS_PER_BOX[progress.box - 1 : MAX_BOX])
    return today + timedelta(days=remaining)
