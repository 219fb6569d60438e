from datetime import date, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from vocabmaster.domain.models import Item, Progress, StudyItem, WordStatus
from vocabmaster.domain.ports import ProgressStore
from vocabmaster.infrastructure.adapters.sqlite_store import SQLiteStore

NOW = datetime(2024, 3, 15, 9, 30)


def _make_item(item_id: int, deck_id: int | None = 1, **progress_fields) -> StudyItem:
    """StudyItem with a word named after its id and the given progress fields."""
    return StudyItem(
        item=Item(id=item_id, deck_id=deck_id, term=f"word{item_id}", definition=f"def{item_id}"),
        progress=Progress(**progress_fields),
    )


def _make_due(item_id: int, due: date, **progress_fields) -> StudyItem:
    progress_fields.setdefault("status", WordStatus.REVIEW)
    progress_fields.setdefault("repetitions", 2)
    progress_fields.setdefault("interval", 6)
    progress_fields.setdefault("box", 3)
    return _make_item(item_id, next_review_date=due, **progress_fields)


@pytest.fixture
def clock():
    """A fixed clock returning NOW."""
    return MagicMock(return_value=NOW)


@pytest.fixture
def mock_store():
    """An in-memory ProgressStore double with empty, successful defaults."""
    store = MagicMock(spec=ProgressStore)
    store.fetch_candidates = AsyncMock(return_value=[])
    store.fetch_deck_items_unfiltered = AsyncMock(return_value=[])
    store.persist_progress = AsyncMock(return_value=None)
    store.increment_daily_stats = AsyncMock(return_value=None)
    store.read_total_xp = AsyncMock(return_value=0)
    store.write_total_xp = AsyncMock(return_value=None)
    store.read_streak = AsyncMock(return_value=0)
    store.write_streak = AsyncMock(return_value=None)
    store.reviewed_on = AsyncMock(return_value=False)
    store.streak_maintained_on = AsyncMock(return_value=False)
    store.mark_streak_maintained = AsyncMock(return_value=None)
    store.count_reviewed_items = AsyncMock(return_value=0)
    store.count_mastered_items = AsyncMock(return_value=0)
    return store


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "data" / "vocab.db"


@pytest.fixture
def sqlite_store(db_path):
    return SQLiteStore(db_path)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_item():
    return _make_item


@pytest.fixture
def make_due():
    return _make_due
