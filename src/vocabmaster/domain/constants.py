"""Centralized constants for the scheduling engine.

All magic numbers and defaults live here so every layer
imports from a single source of truth.
"""

# ---------- SM-2 / Leitner ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
DEFAULT_INTERVAL = 0
DEFAULT_BOX = 1
MAX_BOX = 5
MASTERY_INTERVAL = 21  # days
REVIEW_INTERVAL = 7  # days
MAX_INTERVAL = 36500  # days; keeps due dates representable

HARD_LAPSE_EASE_PENALTY = 0.3
SOFT_LAPSE_EASE_PENALTY = 0.15
LAPSE_INTERVAL_RETENTION = 0.4
EASY_INTERVAL_BONUS = 1.3
EASY_EASE_BONUS = 0.15
HARD_MODE_INTERVAL_DAMPENER = 0.6

# Average days spent in each box, used for mastery prediction
AVG_DAYS_PER_BOX = (1, 3, 5, 10, 14)

# ---------- Review priority ----------
PRIORITY_BASE = 50.0
PRIORITY_EASE_WEIGHT = 20.0
PRIORITY_WRONG_WEIGHT = 5.0
PRIORITY_STREAK_WEIGHT = 3.0
PRIORITY_OVERDUE_WEIGHT = 10.0
PRIORITY_MIN = 0.0
PRIORITY_MAX = 100.0

# ---------- XP ----------
XP_AGAIN = 5
XP_GOOD = 10
XP_EASY = 15
XP_STREAK_BONUS_PER_DAY = 0.05
XP_MAX_STREAK_BONUS = 0.5
XP_QUIZ_BONUS = 0.2

LEVELS: tuple[tuple[int, str], ...] = (
    (0, "Beginner"),
    (100, "Learner"),
    (300, "Student"),
    (600, "Intermediate"),
    (1000, "Advanced"),
    (1500, "Expert"),
    (2500, "Master"),
    (4000, "Grandmaster"),
    (6000, "Legend"),
    (10000, "Vocabulary God"),
)

# ---------- Sessions ----------
DEFAULT_SESSION_SIZE = 20
DEFAULT_CRAM_LIMIT = 20
DEFAULT_MAX_REQUEUES = 1
SPEED_ACHIEVEMENT_MS = 3000

# ---------- Settings keys (store) ----------
SETTING_STREAK = "streak"
SETTING_TOTAL_XP = "total_xp"
DEFAULT_SETTINGS = {
    "theme": "system",
    "daily_goal": "20",
    SETTING_STREAK: "0",
    SETTING_TOTAL_XP: "0",
    "level": "1",
}
