"""
Store Factory
Centralizes building the store adapter and the session manager from config.
"""

from vocabmaster.application.config import AppConfig
from vocabmaster.application.session import SessionManager
from vocabmaster.domain.ports import AchievementSink
from vocabmaster.infrastructure.adapters.sqlite_store import SQLiteStore


def get_store(config: AppConfig) -> SQLiteStore:
    """
    Returns the store implementation for the configured database.
    """
    return SQLiteStore(config.database_path)


def get_session_manager(
    config: AppConfig,
    store: SQLiteStore | None = None,
    achievements: AchievementSink | None = None,
    **overrides,
) -> SessionManager:
    """
    Returns a SessionManager wired to the configured store.

    `overrides` replace individual config-derived options (e.g. rng, clock).
    """
    return SessionManager.from_config(
        store or get_store(config), config, achievements=achievements, **overrides
    )
