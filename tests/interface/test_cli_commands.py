"""Tests for CLI commands: help, deck management, queue, study, level, stats and config."""

import asyncio
import json
from datetime import date, timedelta
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from vocabmaster.domain.errors import PersistenceError, SessionStateError, ValidationError
from vocabmaster.domain.models import Progress, WordStatus
from vocabmaster.infrastructure.adapters.sqlite_store import SQLiteStore
from vocabmaster.interface._common import humanize_error
from vocabmaster.interface.cli import app

runner = CliRunner()


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "cli.db")


def invoke(db, *args, **kwargs):
    return runner.invoke(app, ["--db", db, *args], **kwargs)


def _seed_deck(db, words=(("serene", "calm"), ("ardent", "passionate"))):
    result = invoke(db, "deck", "add", "Core", "--description", "Basics")
    assert result.exit_code == 0, result.output
    for term, definition in words:
        result = invoke(db, "deck", "add-word", "1", term, definition)
        assert result.exit_code == 0, result.output


# --- Help / version ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "spaced-repetition" in result.stdout
    assert "study" in result.stdout
    assert "deck" in result.stdout


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "2.0.0"


# --- Decks ---


def test_deck_add_and_list(db):
    _seed_deck(db)

    result = invoke(db, "deck", "list", "--json")

    assert result.exit_code == 0
    decks = json.loads(result.stdout)
    assert decks == [{"id": 1, "name": "Core", "description": "Basics", "words": 2}]


def test_deck_list_empty(db):
    result = invoke(db, "deck", "list")
    assert result.exit_code == 0
    assert "No decks yet" in result.stdout


def test_add_word_rejects_blank_definition(db):
    invoke(db, "deck", "add", "Core")
    result = invoke(db, "deck", "add-word", "1", "serene", " ")
    assert result.exit_code == 1


def test_deck_import(db, tmp_path):
    deck_file = tmp_path / "gre.yaml"
    deck_file.write_text(
        "deck: GRE\nwords:\n"
        "  - term: laconic\n    definition: using few words\n"
        "  - term: missing-definition\n",
        encoding="utf-8",
    )

    result = invoke(db, "deck", "import", str(deck_file))

    assert result.exit_code == 0, result.output
    assert "Imported 1 words into 'GRE'" in result.stdout
    assert "Skipped 1 entries" in result.stdout


def test_deck_import_invalid_yaml(db, tmp_path):
    deck_file = tmp_path / "broken.yaml"
    deck_file.write_text("- not\n- a mapping\n", encoding="utf-8")

    result = invoke(db, "deck", "import", str(deck_file))

    assert result.exit_code == 1


# --- Queue ---


def test_queue_json(db):
    _seed_deck(db)

    result = invoke(db, "queue", "--json", "--seed", "3")

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert not data["cram"]
    assert sorted(i["term"] for i in data["items"]) == ["ardent", "serene"]
    assert all(i["status"] == "new" for i in data["items"])


def test_queue_size_bound(db):
    _seed_deck(db)
    result = invoke(db, "queue", "--json", "--size", "1")
    assert len(json.loads(result.stdout)["items"]) == 1


def test_queue_rejects_zero_size(db):
    result = invoke(db, "queue", "--size", "0")
    assert result.exit_code == 1


def test_queue_nothing_to_study(db):
    result = invoke(db, "queue")
    assert result.exit_code == 0
    assert "Nothing to study" in result.stdout


# --- Study ---


def test_study_session(db):
    _seed_deck(db)

    # flip + Good, then flip + Easy
    result = invoke(db, "study", "--seed", "1", input="\n2\n\n3\n")

    assert result.exit_code == 0, result.output
    assert "Reviewed 2, correct 2" in result.stdout
    assert "Streak: 1 day(s)" in result.stdout

    stats = json.loads(invoke(db, "stats", "--json").stdout)
    assert stats["words_reviewed"] == 2
    assert stats["correct"] == 2
    assert stats["xp_earned"] == 25
    assert stats["total_xp"] == 25
    assert stats["streak"] == 1


def test_study_again_requeues(db):
    _seed_deck(db, words=(("serene", "calm"),))

    result = invoke(db, "study", input="\n1\n\n2\n")

    assert result.exit_code == 0, result.output
    assert "see this one again" in result.stdout
    assert "Reviewed 2, correct 1" in result.stdout


def test_study_prompts_outside_event_loop(db, monkeypatch):
    _seed_deck(db, words=(("serene", "calm"),))
    loops_seen = []
    real_prompt = typer.prompt

    def recording_prompt(*args, **kwargs):
        try:
            loops_seen.append(asyncio.get_running_loop())
        except RuntimeError:
            loops_seen.append(None)
        return real_prompt(*args, **kwargs)

    monkeypatch.setattr(typer, "prompt", recording_prompt)

    result = invoke(db, "study", input="\n2\n")

    assert result.exit_code == 0, result.output
    assert loops_seen == [None, None]


def test_study_quit_early(db):
    _seed_deck(db)

    result = invoke(db, "study", input="q\n")

    assert result.exit_code == 0
    assert "Reviewed 0" in result.stdout
    assert json.loads(invoke(db, "stats", "--json").stdout)["streak"] == 0


def test_study_reprompts_invalid_quality(db):
    _seed_deck(db, words=(("serene", "calm"),))

    result = invoke(db, "study", input="\n7\n2\n")

    assert result.exit_code == 0, result.output
    assert "Invalid input" in result.stdout
    assert "Reviewed 1, correct 1" in result.stdout


def test_study_cram_when_nothing_due(db):
    _seed_deck(db, words=(("serene", "calm"),))
    mastered = Progress(
        interval=30,
        repetitions=5,
        box=5,
        status=WordStatus.MASTERED,
        next_review_date=date.today() + timedelta(days=30),
    )
    asyncio.run(SQLiteStore(Path(db)).persist_progress(1, mastered))

    result = invoke(db, "study", "--deck", "1", input="\n2\n")

    assert result.exit_code == 0, result.output
    assert "cramming instead" in result.stdout


def test_study_empty_collection(db):
    result = invoke(db, "study")
    assert result.exit_code == 0
    assert "Nothing to study" in result.stdout


# --- Level / stats ---


def test_level_json(db):
    result = invoke(db, "level", "--json")
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data == {
        "total_xp": 0,
        "level": 1,
        "title": "Beginner",
        "progress_percent": 0.0,
        "next_level_xp": 100,
    }


def test_stats_text(db):
    result = invoke(db, "stats")
    assert result.exit_code == 0
    assert "Streak: 0 day(s)" in result.stdout


# --- Config ---


def test_config_show_uses_db_override(db):
    result = invoke(db, "config", "show")

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["database_path"].endswith("cli.db")
    assert data["session_size"] >= 1


def test_unusable_database_exits_non_zero(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    result = runner.invoke(app, ["--db", str(blocker / "v.db"), "level"])
    assert result.exit_code == 1


# --- humanize_error ---


@pytest.mark.parametrize(
    "error, prefix",
    [
        (ValidationError("bad quality"), "Invalid input"),
        (PersistenceError("disk full"), "Database error"),
        (SessionStateError("flip first"), "Session error"),
        (RuntimeError("boom"), "boom"),
    ],
)
def test_humanize_error(error, prefix):
    assert humanize_error(error).startswith(prefix)
