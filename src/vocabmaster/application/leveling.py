"""
Leveling engine: cumulative XP to level/title/progress, and XP per answer.

Pure functions over the fixed tier table in domain.constants.
"""

from vocabmaster.domain.constants import (
    LEVELS,
    XP_AGAIN,
    XP_EASY,
    XP_GOOD,
    XP_MAX_STREAK_BONUS,
    XP_QUIZ_BONUS,
    XP_STREAK_BONUS_PER_DAY,
)
from vocabmaster.domain.errors import ValidationError
from vocabmaster.domain.models import LevelInfo, Quality

from .scheduler import round_half_up

_BASE_XP = {Quality.AGAIN: XP_AGAIN, Quality.GOOD: XP_GOOD, Quality.EASY: XP_EASY}


def level_of(total_xp: int, levels: tuple[tuple[int, str], ...] = LEVELS) -> LevelInfo:
    """
    Map cumulative XP to a LevelInfo.

    `level` is the 1-based index of the highest threshold <= total_xp.
    At the final tier progress is pinned to 100 and next_level_xp stays
    at the current threshold.
    """
    if total_xp < 0:
        raise ValidationError(f"total_xp must be >= 0, got {total_xp}")

    index = 0
    for i, (threshold, _) in enumerate(levels):
        if total_xp >= threshold:
            index = i
        else:
            break

    current_xp, title = levels[index]
    if index + 1 < len(levels):
        next_xp = levels[index + 1][0]
        percent = (total_xp - current_xp) / (next_xp - current_xp) * 100
    else:
        next_xp = current_xp
        percent = 100.0

    return LevelInfo(
        level=index + 1,
        title=title,
        progress_percent=min(percent, 100.0),
        next_level_xp=next_xp,
    )


def xp_for_answer(quality: Quality | int, streak_days: int = 0, is_quiz: bool = False) -> int:
    """XP earned for one answer, with streak (capped at +50%) and quiz bonuses."""
    quality = Quality.parse(quality)
    streak_bonus = min(max(streak_days, 0) * XP_STREAK_BONUS_PER_DAY, XP_MAX_STREAK_BONUS)
    quiz_bonus = XP_QUIZ_BONUS if is_quiz else 0.0
    return round_half_up(_BASE_XP[quality] * (1 + streak_bonus + quiz_bonus))
