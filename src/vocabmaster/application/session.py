"""
Session Queue Manager: application layer orchestrator.

Builds a session queue from store candidates and drives it one answer at a
time: flip, answer (schedule + persist + stats), re-queue, advance, and the
once-per-day streak check when the session completes.

The manager holds no session state of its own; every operation takes the
SessionQueue it acts on.
"""

import asyncio
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta

from vocabmaster.domain.errors import SessionStateError, ValidationError
from vocabmaster.domain.models import (
    AnswerSignals,
    Quality,
    ReviewEvent,
    ScheduleResult,
    StudyItem,
)
from vocabmaster.domain.ports import AchievementSink, ProgressStore
from vocabmaster.domain.session import FailurePolicy, Phase, SessionQueue, SessionStats

from .config import AppConfig
from .leveling import xp_for_answer
from .queue_builder import build_session_queue
from .scheduler import schedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnswerOutcome:
    """What one answer did, for the caller to render."""

    item_id: int
    quality: Quality
    result: ScheduleResult
    xp_earned: int
    total_xp: int
    requeued: bool
    session_complete: bool
    streak: int | None = None  # Set when completion triggered the streak check


class SessionManager:
    """
    Drives study sessions against a ProgressStore.

    Follows Dependency Inversion: depends on the ProgressStore and
    AchievementSink abstractions, not concrete adapters. Store calls are
    awaited one at a time, and the queue is only mutated after every
    write of an answer has succeeded, so a failed answer can be retried.
    """

    def __init__(
        self,
        store: ProgressStore,
        *,
        session_size: int = 20,
        cram_limit: int = 20,
        hard_mode: bool = False,
        failure_policy: FailurePolicy = FailurePolicy.REQUEUE,
        max_requeues: int = 1,
        by_priority: bool = False,
        achievements: AchievementSink | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ):
        """
        Args:
            store: The repository (port) for candidates and progress writes.
            session_size: Default upper bound on items per session.
            cram_limit: Items taken from a deck when nothing in it is due.
            hard_mode: Default scheduling policy for answers.
            failure_policy: What to do with items answered Again.
            max_requeues: Times one item may be re-queued within a session.
            by_priority: Order due items by review priority instead of due date.
            achievements: Optional sink for per-answer signals.
            clock: Source of "now"; inject a fixed clock in tests.
            rng: Random source for shuffling new items.
        """
        self._store = store
        self.session_size = session_size
        self.cram_limit = cram_limit
        self.hard_mode = hard_mode
        self.failure_policy = FailurePolicy(failure_policy)
        self.max_requeues = max_requeues
        self.by_priority = by_priority
        self._achievements = achievements
        self._clock = clock or datetime.now
        self._rng = rng or random.Random()
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(
        cls, store: ProgressStore, config: AppConfig, **kwargs
    ) -> "SessionManager":
        options = {
            "session_size": config.session_size,
            "cram_limit": config.cram_limit,
            "hard_mode": config.hard_mode,
            "failure_policy": FailurePolicy(config.failure_policy),
            "max_requeues": config.max_requeues,
            "by_priority": config.priority_ordering,
        }
        options.update(kwargs)
        return cls(store, **options)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def start(self, deck_id: int | None = None, limit: int | None = None) -> SessionQueue:
        """
        Build a new session queue.

        Due items come first (oldest due date first), then new items in
        random order, bounded by `limit`. A deck with nothing due falls
        back to up to `cram_limit` arbitrary items of that deck. An empty
        queue is a valid result meaning "nothing to study".
        """
        limit = self.session_size if limit is None else limit
        if limit < 1:
            raise ValidationError(f"Session size must be at least 1, got {limit}")

        now = self._clock()
        today = now.date()

        candidates = await self._store.fetch_candidates(deck_id, today)
        cram = False

        if candidates:
            built = build_session_queue(
                candidates, today, limit, rng=self._rng, by_priority=self.by_priority
            )
            entries = built.ordered
            logger.info(
                f"Session started: {len(entries)} items "
                f"({len(built.due)} due, {len(built.fresh)} new, {built.truncated} deferred)"
            )
        elif deck_id is not None:
            cram_items = await self._store.fetch_deck_items_unfiltered(deck_id, self.cram_limit)
            entries = cram_items[:limit]
            cram = bool(entries)
            if cram:
                logger.info(f"Nothing due in deck {deck_id}; cramming {len(entries)} items")
        else:
            entries = []

        if not entries:
            logger.info("Nothing to study")

        return SessionQueue(
            entries=entries,
            deck_id=deck_id,
            cram=cram,
            started_at=now,
            presented_at=now,
        )

    def restart(self, queue: SessionQueue) -> SessionQueue:
        """Rewind a session to its first item and drop re-queued copies and stats."""
        del queue.entries[queue.built_size :]
        queue.current_index = 0
        queue.complete = False
        queue.phase = Phase.AWAITING_FLIP
        queue.stats = SessionStats()
        queue.requeue_counts.clear()
        queue.presented_at = self._clock()
        return queue

    # ------------------------------------------------------------------
    # Drive protocol
    # ------------------------------------------------------------------

    def flip(self, queue: SessionQueue) -> SessionQueue:
        """Reveal the answer side. No-op unless the current item awaits a flip."""
        if queue.current is not None and queue.phase is Phase.AWAITING_FLIP:
            queue.phase = Phase.AWAITING_ANSWER
        return queue

    async def answer(
        self,
        queue: SessionQueue,
        quality: Quality | int | str,
        response_time_ms: int | None = None,
        is_quiz: bool = False,
        hard_mode: bool | None = None,
    ) -> AnswerOutcome:
        """
        Grade the current item and advance.

        Raises:
            SessionStateError: if the current item has not been flipped, or
                the session is empty or complete.
            ValidationError: for an invalid quality or negative response time.
            PersistenceError: if the store fails; the queue is left untouched.
        """
        async with self._lock:
            current = self._answerable(queue)
            now = self._clock()
            if response_time_ms is None and queue.presented_at is not None:
                response_time_ms = max(0, int((now - queue.presented_at).total_seconds() * 1000))

            event = ReviewEvent(
                quality=quality,
                response_time_ms=response_time_ms,
                hard_mode=self.hard_mode if hard_mode is None else hard_mode,
            )
            result = schedule(current.progress, event.quality, event.hard_mode, now)

            streak = await self._store.read_streak()
            total_xp = await self._store.read_total_xp()
            xp = xp_for_answer(event.quality, streak, is_quiz)

            await self._store.persist_progress(current.id, result.progress)
            await self._store.increment_daily_stats(now.date(), event.quality.is_success, xp)
            await self._store.write_total_xp(total_xp + xp)

            will_requeue = self._should_requeue(queue, current.id, event.quality)
            new_streak = None
            if not will_requeue and queue.current_index >= len(queue.entries) - 1:
                new_streak = await self.maintain_streak(now.date())

            updated = replace(current, progress=result.progress)
            await self._emit_signals(updated, event, now)

            # Every store call succeeded: from here on the queue may change
            queue.entries[queue.current_index] = updated
            queue.stats.reviewed += 1
            queue.stats.correct += int(event.quality.is_success)
            queue.stats.xp_earned += xp
            queue.phase = Phase.ANSWERED

            requeued = self._requeue_if_failed(queue, updated, event.quality)
            self._advance(queue, now)

            return AnswerOutcome(
                item_id=current.id,
                quality=event.quality,
                result=result,
                xp_earned=xp,
                total_xp=total_xp + xp,
                requeued=requeued,
                session_complete=queue.complete,
                streak=new_streak,
            )

    async def maintain_streak(self, today: date | None = None) -> int:
        """
        Once-per-day streak update.

        Increments the streak when yesterday had reviews (or the streak is
        still 0), otherwise restarts it at 1. Returns the streak as stored.
        """
        today = today or self._clock().date()
        if await self._store.streak_maintained_on(today):
            return await self._store.read_streak()

        reviewed_yesterday = await self._store.reviewed_on(today - timedelta(days=1))
        current = await self._store.read_streak()
        new_streak = current + 1 if reviewed_yesterday or current == 0 else 1

        await self._store.write_streak(new_streak)
        await self._store.mark_streak_maintained(today)
        logger.info(f"Streak {current} -> {new_streak}")
        return new_streak

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _answerable(self, queue: SessionQueue) -> StudyItem:
        if queue.is_empty:
            raise SessionStateError("Nothing to study in this session")
        if queue.complete:
            raise SessionStateError("Session is already complete")
        if queue.phase is not Phase.AWAITING_ANSWER:
            raise SessionStateError(f"Cannot answer while {queue.phase.value}; flip the card first")
        return queue.entries[queue.current_index]

    def _should_requeue(self, queue: SessionQueue, item_id: int, quality: Quality) -> bool:
        if quality is not Quality.AGAIN or self.failure_policy is not FailurePolicy.REQUEUE:
            return False
        return queue.requeue_counts.get(item_id, 0) < self.max_requeues

    def _requeue_if_failed(
        self, queue: SessionQueue, study_item: StudyItem, quality: Quality
    ) -> bool:
        if not self._should_requeue(queue, study_item.id, quality):
            return False
        queue.requeue_counts[study_item.id] = queue.requeue_counts.get(study_item.id, 0) + 1
        queue.entries.append(study_item)
        logger.debug(f"Re-queued item {study_item.id} for a redrill")
        return True

    def _advance(self, queue: SessionQueue, now: datetime) -> None:
        if queue.current_index < len(queue.entries) - 1:
            queue.current_index += 1
            queue.phase = Phase.AWAITING_FLIP
            queue.presented_at = now
        else:
            queue.complete = True
            logger.info(
                f"Session complete: {queue.stats.correct}/{queue.stats.reviewed} correct, "
                f"+{queue.stats.xp_earned} XP"
            )

    async def _emit_signals(self, study_item: StudyItem, event: ReviewEvent, now: datetime) -> None:
        if self._achievements is None:
            return
        signals = AnswerSignals(
            item_id=study_item.id,
            quality=event.quality,
            words_total_reviewed=await self._store.count_reviewed_items(),
            mastered_count=await self._store.count_mastered_items(),
            response_time_ms=event.response_time_ms,
            hour_of_day=now.hour,
        )
        await self._achievements.emit(signals)
