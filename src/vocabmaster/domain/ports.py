"""
Ports (interfaces) for the engine's collaborators.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import date

from .models import AnswerSignals, Deck, Progress, StudyItem


class ProgressStore(ABC):
    """
    Port for reading candidates and writing review progress.

    Implementations:
        - SQLiteStore: local SQLite database (one progress row per item).

    Every write raises PersistenceError on failure. Reads of scalar
    settings return 0 when the setting has never been written.
    """

    @abstractmethod
    async def fetch_candidates(self, deck_id: int | None, today: date) -> list[StudyItem]:
        """
        Fetch items eligible for a session.

        An item is a candidate if its status is new or learning, its next
        review date is missing, or the date is on or before `today`.

        Args:
            deck_id: Restrict to one deck, or None for the whole collection.
            today: The learner's current local date.

        Returns:
            Candidates in stable id order.
        """
        pass

    @abstractmethod
    async def fetch_deck_items_unfiltered(self, deck_id: int, limit: int) -> list[StudyItem]:
        """Fetch up to `limit` items of a deck regardless of due status (cram)."""
        pass

    @abstractmethod
    async def persist_progress(self, item_id: int, progress: Progress) -> None:
        pass

    @abstractmethod
    async def increment_daily_stats(self, day: date, correct: bool, xp_earned: int) -> None:
        """Add one reviewed word (and optionally one correct answer) to `day`."""
        pass

    @abstractmethod
    async def read_total_xp(self) -> int:
        pass

    @abstractmethod
    async def write_total_xp(self, value: int) -> None:
        pass

    @abstractmethod
    async def read_streak(self) -> int:
        pass

    @abstractmethod
    async def write_streak(self, value: int) -> None:
        pass

    @abstractmethod
    async def reviewed_on(self, day: date) -> bool:
        """True if at least one word was reviewed on `day`."""
        pass

    @abstractmethod
    async def streak_maintained_on(self, day: date) -> bool:
        pass

    @abstractmethod
    async def mark_streak_maintained(self, day: date) -> None:
        pass

    @abstractmethod
    async def count_reviewed_items(self) -> int:
        """Number of distinct items reviewed at least once."""
        pass

    @abstractmethod
    async def count_mastered_items(self) -> int:
        pass


class AchievementSink(ABC):
    """Receives answer signals; achievement rules live behind this port."""

    @abstractmethod
    async def emit(self, signals: AnswerSignals) -> None:
        pass


class DeckRepository(ABC):
    """Port for managing decks and their items (content, not progress)."""

    @abstractmethod
    async def add_deck(self, name: str, description: str | None = None) -> int:
        """Create a deck, or return the id of the existing deck with that name."""
        pass

    @abstractmethod
    async def list_decks(self) -> list[Deck]:
        pass

    @abstractmethod
    async def add_item(
        self,
        deck_id: int | None,
        term: str,
        definition: str,
        example: str | None = None,
        phonetic: str | None = None,
    ) -> int:
        """Insert an item together with its default progress."""
        pass
