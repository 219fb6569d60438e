# Infrastructure Adapters Package
from .logging_sink import LoggingAchievementSink
from .sqlite_store import SQLiteStore

__all__ = ["SQLiteStore", "LoggingAchievementSink"]
