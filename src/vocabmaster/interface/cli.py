"""vocabmaster CLI: root commands and subgroup registration."""

import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Annotated

import typer

from vocabmaster.application.leveling import level_of
from vocabmaster.consts import VERSION
from vocabmaster.interface._common import _resolve_with_overrides, open_store, run_async

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="vocabmaster: spaced-repetition vocabulary trainer.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}

# ---------------------------------------------------------------------------
# Register subgroups
# ---------------------------------------------------------------------------

from vocabmaster.interface.deck_commands import deck_app  # noqa: E402
from vocabmaster.interface.study_commands import queue, study  # noqa: E402

app.add_typer(deck_app, name="deck")
app.command("queue")(queue)
app.command("study")(study)

config_app = typer.Typer(help="Manage vocabmaster configuration.")
app.add_typer(config_app, name="config")


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    db: Annotated[
        Path | None, typer.Option("--db", help="Database file (overrides config).")
    ] = None,
):
    """Global settings for vocabmaster."""
    ctx.ensure_object(dict)
    overrides = ctx.obj.setdefault("overrides", {})
    if db is not None:
        overrides["database_path"] = db
    overrides["verbose"] = verbose
    logging.getLogger("vocabmaster").setLevel(_LOG_LEVELS.get(verbose, logging.DEBUG))


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def version():
    """Print the vocabmaster version."""
    typer.echo(VERSION)


@app.command()
def level(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show your level, title and progress towards the next level."""
    store = open_store(ctx)
    total_xp = run_async(store.read_total_xp())
    info = level_of(total_xp)

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "total_xp": total_xp,
                    "level": info.level,
                    "title": info.title,
                    "progress_percent": round(info.progress_percent, 1),
                    "next_level_xp": info.next_level_xp,
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Level {info.level}: {info.title}")
    typer.echo(f"XP: {total_xp} / {info.next_level_xp} ({info.progress_percent:.0f}%)")


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show today's review stats, the streak and total XP."""
    store = open_store(ctx)

    async def gather():
        return (
            await store.get_daily_stats(date.today()),
            await store.read_streak(),
            await store.read_total_xp(),
            await store.count_mastered_items(),
        )

    today, streak, total_xp, mastered = run_async(gather())

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "date": today.day.isoformat(),
                    "words_reviewed": today.words_reviewed,
                    "correct": today.correct_count,
                    "xp_earned": today.xp_earned,
                    "streak": streak,
                    "total_xp": total_xp,
                    "mastered": mastered,
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Today: {today.words_reviewed} reviewed, {today.correct_count} correct")
    typer.echo(f"XP today: {today.xp_earned}  Total: {total_xp}")
    typer.echo(f"Streak: {streak} day(s)  Mastered: {mastered}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve_with_overrides(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
