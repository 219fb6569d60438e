# Application Package
from .leveling import level_of, xp_for_answer
from .queue_builder import QueueBuildResult, build_session_queue
from .scheduler import derive_status, predict_mastery_date, review_priority, schedule
from .session import AnswerOutcome, SessionManager

__all__ = [
    "AnswerOutcome",
    "QueueBuildResult",
    "SessionManager",
    "build_session_queue",
    "derive_status",
    "level_of",
    "predict_mastery_date",
    "review_priority",
    "schedule",
    "xp_for_answer",
]
