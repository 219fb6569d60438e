import pytest

from vocabmaster.application.leveling import level_of, xp_for_answer
from vocabmaster.domain.errors import ValidationError
from vocabmaster.domain.models import Quality

# --- level_of ---


def test_level_zero_xp():
    info = level_of(0)
    assert info.level == 1
    assert info.title == "Beginner"
    assert info.progress_percent == 0.0
    assert info.next_level_xp == 100


def test_level_interpolates_within_tier():
    info = level_of(450)
    assert info.level == 3
    assert info.title == "Student"
    assert info.progress_percent == pytest.approx(50.0)
    assert info.next_level_xp == 600


def test_level_exact_threshold():
    info = level_of(1000)
    assert info.level == 5
    assert info.title == "Advanced"
    assert info.progress_percent == 0.0


def test_final_tier_is_pinned():
    for xp in (10000, 25000):
        info = level_of(xp)
        assert info.level == 10
        assert info.title == "Vocabulary God"
        assert info.progress_percent == 100.0
        assert info.next_level_xp == 10000


def test_negative_xp_rejected():
    with pytest.raises(ValidationError):
        level_of(-1)


def test_custom_table():
    info = level_of(15, levels=((0, "Novice"), (10, "Adept"), (30, "Sage")))
    assert (info.level, info.title, info.next_level_xp) == (2, "Adept", 30)
    assert info.progress_percent == pytest.approx(25.0)


def test_level_is_monotonic():
    levels = [level_of(xp).level for xp in range(0, 12000, 37)]
    assert levels == sorted(levels)
    assert all(0 <= level_of(xp).progress_percent <= 100 for xp in range(0, 12000, 37))


# --- xp_for_answer ---


@pytest.mark.parametrize(
    "quality, streak, quiz, expected",
    [
        (Quality.AGAIN, 0, False, 5),
        (Quality.GOOD, 0, False, 10),
        (Quality.EASY, 0, False, 15),
        (Quality.GOOD, 2, False, 11),
        (Quality.AGAIN, 10, False, 8),  # 5 * 1.5 = 7.5 rounds up
        (Quality.EASY, 4, False, 18),
        (Quality.GOOD, 10, False, 15),
        (Quality.GOOD, 40, False, 15),  # streak bonus capped at +50%
        (Quality.GOOD, 0, True, 12),
        (Quality.GOOD, 10, True, 17),
        (Quality.AGAIN, 0, True, 6),
    ],
)
def test_xp_for_answer(quality, streak, quiz, expected):
    assert xp_for_answer(quality, streak, quiz) == expected


def test_xp_rejects_invalid_quality():
    with pytest.raises(ValidationError):
        xp_for_answer(0)
