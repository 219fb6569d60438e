"""
SQLite Store: infrastructure adapter for the local collection database.

Implements ProgressStore over one SQLite file: one row per word, one
progress row per word (1:1), a stats row per day and a key/value settings
table for cumulative XP and the streak.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

from vocabmaster.domain.constants import DEFAULT_SETTINGS, SETTING_STREAK, SETTING_TOTAL_XP
from vocabmaster.domain.errors import PersistenceError, ValidationError
from vocabmaster.domain.models import DailyStats, Deck, Item, Progress, StudyItem, WordStatus
from vocabmaster.domain.ports import DeckRepository, ProgressStore

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS decks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    description TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS words (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    deck_id INTEGER REFERENCES decks(id),
    term TEXT NOT NULL,
    definition TEXT NOT NULL,
    example TEXT,
    phonetic TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS progress (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    word_id INTEGER UNIQUE NOT NULL REFERENCES words(id),
    ease_factor REAL DEFAULT 2.5,
    interval INTEGER DEFAULT 0,
    repetitions INTEGER DEFAULT 0,
    next_review TEXT,
    status TEXT DEFAULT 'new',
    last_reviewed TEXT,
    leitner_box INTEGER DEFAULT 1,
    correct_streak INTEGER DEFAULT 0,
    wrong_count INTEGER DEFAULT 0,
    total_reviews INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS stats (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    date TEXT UNIQUE,
    words_reviewed INTEGER DEFAULT 0,
    correct_count INTEGER DEFAULT 0,
    xp_earned INTEGER DEFAULT 0,
    streak_maintained INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS settings (key TEXT PRIMARY KEY, value TEXT);
"""

_STUDY_COLUMNS = """
    w.id, w.deck_id, w.term, w.definition, w.example, w.phonetic,
    p.ease_factor, p.interval, p.repetitions, p.leitner_box, p.correct_streak,
    p.wrong_count, p.total_reviews, p.status, p.next_review, p.last_reviewed
"""


class SQLiteStore(ProgressStore, DeckRepository):
    """
    Local SQLite implementation of the progress store.

    Opens a short-lived connection per call, so one instance can be shared
    by the CLI and a session manager without holding the file open.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._init()

    def _init(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot create database directory: {e}") from e

        with self._connect() as conn:
            conn.executescript(SCHEMA)
            conn.executemany(
                "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?)",
                list(DEFAULT_SETTINGS.items()),
            )
        created = self.ensure_progress_records()
        if created:
            logger.info(f"Created progress rows for {created} words")
        logger.debug(f"Database ready at {self.path}")

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.path)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not open {self.path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceError(str(e)) from e
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Collection management
    # ------------------------------------------------------------------

    def ensure_progress_records(self) -> int:
        """Create default progress rows for words that have none."""
        with self._connect() as conn:
            cur = conn.execute(
                """
                INSERT INTO progress (word_id, status)
                SELECT w.id, 'new' FROM words w
                LEFT JOIN progress p ON w.id = p.word_id
                WHERE p.id IS NULL
                """
            )
            return cur.rowcount

    async def add_deck(self, name: str, description: str | None = None) -> int:
        name = name.strip()
        if not name:
            raise ValidationError("Deck name must not be empty")
        with self._connect() as conn:
            row = conn.execute("SELECT id FROM decks WHERE name = ?", (name,)).fetchone()
            if row:
                return row["id"]
            cur = conn.execute(
                "INSERT INTO decks (name, description, created_at) VALUES (?, ?, ?)",
                (name, description, datetime.now().isoformat(timespec="seconds")),
            )
            logger.info(f"Created deck '{name}'")
            return cur.lastrowid

    async def list_decks(self) -> list[Deck]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT d.id, d.name, d.description, COUNT(w.id) AS word_count
                FROM decks d LEFT JOIN words w ON w.deck_id = d.id
                GROUP BY d.id ORDER BY d.id
                """
            ).fetchall()
        return [
            Deck(
                id=r["id"],
                name=r["name"],
                description=r["description"],
                word_count=r["word_count"],
            )
            for r in rows
        ]

    async def add_item(
        self,
        deck_id: int | None,
        term: str,
        definition: str,
        example: str | None = None,
        phonetic: str | None = None,
    ) -> int:
        """Insert a word together with its default progress row."""
        if not term.strip() or not definition.strip():
            raise ValidationError("Both term and definition are required")
        with self._connect() as conn:
            cur = conn.execute(
                """
                INSERT INTO words (deck_id, term, definition, example, phonetic, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    deck_id,
                    term.strip(),
                    definition.strip(),
                    example,
                    phonetic,
                    datetime.now().isoformat(timespec="seconds"),
                ),
            )
            word_id = cur.lastrowid
            conn.execute("INSERT INTO progress (word_id, status) VALUES (?, 'new')", (word_id,))
            return word_id

    async def get_study_item(self, item_id: int) -> StudyItem | None:
        with self._connect() as conn:
            row = conn.execute(
                f"""
                SELECT {_STUDY_COLUMNS}
                FROM words w LEFT JOIN progress p ON w.id = p.word_id
                WHERE w.id = ?
                """,
                (item_id,),
            ).fetchone()
        return _row_to_study_item(row) if row else None

    async def get_daily_stats(self, day: date) -> DailyStats:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM stats WHERE date = ?", (day.isoformat(),)).fetchone()
        if row is None:
            return DailyStats(day=day)
        return DailyStats(
            day=day,
            words_reviewed=row["words_reviewed"],
            correct_count=row["correct_count"],
            xp_earned=row["xp_earned"],
            streak_maintained=bool(row["streak_maintained"]),
        )

    # ------------------------------------------------------------------
    # ProgressStore
    # ------------------------------------------------------------------

    async def fetch_candidates(self, deck_id: int | None, today: date) -> list[StudyItem]:
        query = f"""
            SELECT {_STUDY_COLUMNS}
            FROM words w LEFT JOIN progress p ON w.id = p.word_id
            WHERE (
                p.status IS NULL
                OR p.status IN ('new', 'learning')
                OR p.next_review IS NULL
                OR p.next_review <= ?
            )
        """
        params: list = [today.isoformat()]
        if deck_id is not None:
            query += " AND w.deck_id = ?"
            params.append(deck_id)
        query += " ORDER BY w.id ASC"

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_study_item(r) for r in rows]

    async def fetch_deck_items_unfiltered(self, deck_id: int, limit: int) -> list[StudyItem]:
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT {_STUDY_COLUMNS}
                FROM words w LEFT JOIN progress p ON w.id = p.word_id
                WHERE w.deck_id = ?
                ORDER BY
                  CASE
                    WHEN p.status IS NULL OR p.status = 'new' THEN 0
                    WHEN p.status = 'learning' THEN 1
                    WHEN p.status = 'review' THEN 2
                    ELSE 3
                  END,
                  w.id ASC
                LIMIT ?
                """,
                (deck_id, limit),
            ).fetchall()
        return [_row_to_study_item(r) for r in rows]

    async def persist_progress(self, item_id: int, progress: Progress) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO progress (
                    word_id, ease_factor, interval, repetitions, next_review, status,
                    last_reviewed, leitner_box, correct_streak, wrong_count, total_reviews
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(word_id) DO UPDATE SET
                    ease_factor = excluded.ease_factor,
                    interval = excluded.interval,
                    repetitions = excluded.repetitions,
                    next_review = excluded.next_review,
                    status = excluded.status,
                    last_reviewed = excluded.last_reviewed,
                    leitner_box = excluded.leitner_box,
                    correct_streak = excluded.correct_streak,
                    wrong_count = excluded.wrong_count,
                    total_reviews = excluded.total_reviews
                """,
                (
                    item_id,
                    progress.ease_factor,
                    progress.interval,
                    progress.repetitions,
                    progress.next_review_date.isoformat() if progress.next_review_date else None,
                    progress.status.value,
                    progress.last_reviewed_at.isoformat() if progress.last_reviewed_at else None,
                    progress.box,
                    progress.correct_streak,
                    progress.wrong_count,
                    progress.total_reviews,
                ),
            )

    async def increment_daily_stats(self, day: date, correct: bool, xp_earned: int) -> None:
        with self._connect() as conn:
            conn.execute("INSERT OR IGNORE INTO stats (date) VALUES (?)", (day.isoformat(),))
            conn.execute(
                """
                UPDATE stats SET
                    words_reviewed = words_reviewed + 1,
                    correct_count = correct_count + ?,
                    xp_earned = xp_earned + ?
                WHERE date = ?
                """,
                (int(correct), xp_earned, day.isoformat()),
            )

    async def read_total_xp(self) -> int:
        return self._read_int_setting(SETTING_TOTAL_XP)

    async def write_total_xp(self, value: int) -> None:
        self._write_setting(SETTING_TOTAL_XP, value)

    async def read_streak(self) -> int:
        return self._read_int_setting(SETTING_STREAK)

    async def write_streak(self, value: int) -> None:
        self._write_setting(SETTING_STREAK, value)

    async def reviewed_on(self, day: date) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM stats WHERE date = ? AND words_reviewed > 0", (day.isoformat(),)
            ).fetchone()
        return row is not None

    async def streak_maintained_on(self, day: date) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM stats WHERE date = ? AND streak_maintained = 1",
                (day.isoformat(),),
            ).fetchone()
        return row is not None

    async def mark_streak_maintained(self, day: date) -> None:
        with self._connect() as conn:
            conn.execute("INSERT OR IGNORE INTO stats (date) VALUES (?)", (day.isoformat(),))
            conn.execute(
                "UPDATE stats SET streak_maintained = 1 WHERE date = ?", (day.isoformat(),)
            )

    async def count_reviewed_items(self) -> int:
        with self._connect() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM progress WHERE total_reviews > 0"
            ).fetchone()[0]

    async def count_mastered_items(self) -> int:
        with self._connect() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM progress WHERE status = ?", (WordStatus.MASTERED.value,)
            ).fetchone()[0]

    # ------------------------------------------------------------------
    # Settings helpers
    # ------------------------------------------------------------------

    def _read_int_setting(self, key: str) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        if row is None or row["value"] in (None, ""):
            return 0
        try:
            return int(row["value"])
        except ValueError as e:
            raise PersistenceError(f"Setting '{key}' is not an integer: {row['value']!r}") from e

    def _write_setting(self, key: str, value: int) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO settings (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, str(value)),
            )


def _row_to_study_item(row: sqlite3.Row) -> StudyItem:
    """Build a StudyItem, filling defaults for words without a progress row."""
    item = Item(
        id=row["id"],
        deck_id=row["deck_id"],
        term=row["term"],
        definition=row["definition"],
        example=row["example"],
        phonetic=row["phonetic"],
    )
    defaults = Progress()
    next_review = row["next_review"]
    last_reviewed = row["last_reviewed"]
    try:
        progress = Progress(
            ease_factor=_or(row["ease_factor"], defaults.ease_factor),
            interval=_or(row["interval"], defaults.interval),
            repetitions=_or(row["repetitions"], defaults.repetitions),
            box=_or(row["leitner_box"], defaults.box),
            correct_streak=_or(row["correct_streak"], defaults.correct_streak),
            wrong_count=_or(row["wrong_count"], defaults.wrong_count),
            total_reviews=_or(row["total_reviews"], defaults.total_reviews),
            status=WordStatus(row["status"] or WordStatus.NEW.value),
            next_review_date=date.fromisoformat(next_review[:10]) if next_review else None,
            last_reviewed_at=datetime.fromisoformat(last_reviewed) if last_reviewed else None,
        )
    except ValueError as e:
        # Covers unknown statuses, bad dates and out-of-bounds fields (ValidationError)
        raise PersistenceError(f"Corrupt progress row for word {row['id']}: {e}") from e
    return StudyItem(item=item, progress=progress)


def _or(value, default):
    return default if value is None else value
