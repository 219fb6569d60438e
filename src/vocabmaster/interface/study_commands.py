"""Study commands: preview a session queue and run an interactive session."""

import json
import random
from typing import Annotated

import typer

from vocabmaster.application import factory
from vocabmaster.application.leveling import level_of
from vocabmaster.domain.errors import ValidationError
from vocabmaster.domain.models import Quality
from vocabmaster.infrastructure.adapters.logging_sink import LoggingAchievementSink
from vocabmaster.interface._common import (
    _resolve_with_overrides,
    humanize_error,
    open_store,
    run_async,
)

QUIT_WORDS = {"q", "quit", "exit"}


def queue(
    ctx: typer.Context,
    deck: Annotated[int | None, typer.Option(help="Restrict to one deck id.")] = None,
    size: Annotated[int | None, typer.Option(help="Maximum items in the session.")] = None,
    seed: Annotated[int | None, typer.Option(help="Seed for shuffling new items.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Preview the next study session without answering anything."""
    config = _resolve_with_overrides(ctx)
    manager = factory.get_session_manager(
        config, store=open_store(ctx), rng=random.Random(seed)
    )
    session = run_async(manager.start(deck_id=deck, limit=size))

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "deck_id": session.deck_id,
                    "cram": session.cram,
                    "items": [
                        {
                            "id": s.id,
                            "term": s.item.term,
                            "status": s.progress.status.value,
                            "next_review": (
                                s.progress.next_review_date.isoformat()
                                if s.progress.next_review_date
                                else None
                            ),
                        }
                        for s in session.entries
                    ],
                },
                indent=2,
            )
        )
        return

    if session.is_empty:
        typer.secho("Nothing to study.", fg="yellow")
        return

    if session.cram:
        typer.secho("Nothing due in this deck; cramming instead.", fg="yellow")
    typer.echo(f"Session: {len(session)} items")
    for position, s in enumerate(session.entries, start=1):
        due = s.progress.next_review_date.isoformat() if s.progress.next_review_date else "-"
        typer.echo(f"  {position:>3}. {s.item.term}  [{s.progress.status.value}, due {due}]")


def study(
    ctx: typer.Context,
    deck: Annotated[int | None, typer.Option(help="Restrict to one deck id.")] = None,
    size: Annotated[int | None, typer.Option(help="Maximum items in the session.")] = None,
    hard: Annotated[
        bool | None, typer.Option("--hard/--normal", help="Harsher scheduling penalties.")
    ] = None,
    seed: Annotated[int | None, typer.Option(help="Seed for shuffling new items.")] = None,
):
    """[bold green]Study[/bold green]: flip each card, then grade it 1 (Again), 2 (Good), 3 (Easy)."""
    config = _resolve_with_overrides(ctx, hard_mode=hard)
    store = open_store(ctx)
    manager = factory.get_session_manager(
        config,
        store=store,
        achievements=LoggingAchievementSink(),
        rng=random.Random(seed),
    )

    session = run_async(manager.start(deck_id=deck, limit=size))
    if session.is_empty:
        typer.secho("Nothing to study.", fg="yellow")
        return
    if session.cram:
        typer.secho("Nothing due in this deck; cramming instead.", fg="yellow")

    # Prompts run outside the event loop; each manager call gets its own asyncio.run
    while not session.complete:
        current = session.current
        typer.echo("")
        typer.secho(f"[{session.current_index + 1}/{len(session)}] {current.item.term}", bold=True)
        if current.item.phonetic:
            typer.echo(f"  {current.item.phonetic}")

        reply = typer.prompt("Enter to flip, q to quit", default="", show_default=False)
        if reply.strip().lower() in QUIT_WORDS:
            break
        manager.flip(session)
        typer.echo(f"  {current.item.definition}")
        if current.item.example:
            typer.echo(f"  e.g. {current.item.example}")

        quality = _prompt_quality()
        if quality is None:
            break
        outcome = run_async(manager.answer(session, quality))

        colour = "red" if outcome.quality is Quality.AGAIN else "green"
        typer.secho(
            f"  -> next review in {outcome.result.progress.interval} day(s) "
            f"({outcome.result.progress.status.value}), +{outcome.xp_earned} XP",
            fg=colour,
        )
        if outcome.requeued:
            typer.echo("  (you will see this one again before the session ends)")
        if outcome.streak is not None:
            typer.secho(f"Streak: {outcome.streak} day(s)", fg="cyan")

    stats = session.stats
    typer.echo("")
    typer.secho(
        f"Reviewed {stats.reviewed}, correct {stats.correct} "
        f"({stats.accuracy:.0%}), +{stats.xp_earned} XP",
        fg="green" if session.complete else "yellow",
    )
    info = level_of(run_async(store.read_total_xp()))
    typer.echo(f"Level {info.level} {info.title} ({info.progress_percent:.0f}%)")


def _prompt_quality() -> Quality | None:
    while True:
        reply = typer.prompt("Again(1) / Good(2) / Easy(3)")
        if reply.strip().lower() in QUIT_WORDS:
            return None
        try:
            return Quality.parse(reply)
        except ValidationError as e:
            typer.secho(humanize_error(e), fg="red")
