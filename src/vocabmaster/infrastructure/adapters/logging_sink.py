"""Achievement sink that only records answer signals in the log."""

import logging

from vocabmaster.domain.constants import SPEED_ACHIEVEMENT_MS
from vocabmaster.domain.models import AnswerSignals
from vocabmaster.domain.ports import AchievementSink

logger = logging.getLogger(__name__)


class LoggingAchievementSink(AchievementSink):
    """
    Logs every signal at DEBUG, and fast correct answers at INFO.

    Stands in for a real achievement service; keeps the signals it saw so
    a front end can summarise them after a session.
    """

    def __init__(self):
        self.received: list[AnswerSignals] = []

    async def emit(self, signals: AnswerSignals) -> None:
        self.received.append(signals)
        logger.debug(
            f"item={signals.item_id} quality={signals.quality.name} "
            f"reviewed={signals.words_total_reviewed} mastered={signals.mastered_count} "
            f"rt={signals.response_time_ms}ms hour={signals.hour_of_day}"
        )
        if (
            signals.quality.is_success
            and signals.response_time_ms is not None
            and signals.response_time_ms < SPEED_ACHIEVEMENT_MS
        ):
            logger.info(f"Fast recall on item {signals.item_id} ({signals.response_time_ms} ms)")
