import logging

import pytest

from vocabmaster.domain.models import AnswerSignals, Quality
from vocabmaster.infrastructure.adapters.logging_sink import LoggingAchievementSink


def _signals(quality=Quality.GOOD, response_time_ms=1500):
    return AnswerSignals(
        item_id=3,
        quality=quality,
        words_total_reviewed=10,
        mastered_count=2,
        response_time_ms=response_time_ms,
        hour_of_day=23,
    )


@pytest.mark.asyncio
async def test_records_signals():
    sink = LoggingAchievementSink()
    await sink.emit(_signals())
    await sink.emit(_signals(Quality.AGAIN))
    assert [s.quality for s in sink.received] == [Quality.GOOD, Quality.AGAIN]


@pytest.mark.asyncio
async def test_fast_correct_answer_logged(caplog):
    sink = LoggingAchievementSink()
    with caplog.at_level(logging.INFO, logger="vocabmaster.infrastructure.adapters.logging_sink"):
        await sink.emit(_signals(response_time_ms=900))
        await sink.emit(_signals(Quality.AGAIN, response_time_ms=900))
        await sink.emit(_signals(response_time_ms=5000))

    fast = [r for r in caplog.records if "Fast recall" in r.message]
    assert len(fast) == 1
