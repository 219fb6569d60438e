"""Deck management commands: add, list, import, add-word."""

import json
from pathlib import Path
from typing import Annotated

import typer

from vocabmaster.application.deck_import import import_deck_file
from vocabmaster.interface._common import open_store, run_async

deck_app = typer.Typer(help="Manage decks and words.", no_args_is_help=True)


@deck_app.command("add")
def add(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Deck name.")],
    description: Annotated[str | None, typer.Option(help="Short description.")] = None,
):
    """Create a deck (returns the existing one if the name is taken)."""
    store = open_store(ctx)
    deck_id = run_async(store.add_deck(name, description))
    typer.secho(f"Deck '{name}' ready (id {deck_id}).", fg="green")


@deck_app.command("list")
def list_decks(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List decks with their word counts."""
    store = open_store(ctx)
    decks = run_async(store.list_decks())

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": d.id,
                        "name": d.name,
                        "description": d.description,
                        "words": d.word_count,
                    }
                    for d in decks
                ],
                indent=2,
            )
        )
        return

    if not decks:
        typer.secho("No decks yet. Create one with 'vocabmaster deck add'.", fg="yellow")
        return
    for d in decks:
        typer.echo(f"[{d.id}] {d.name}  ({d.word_count} words)")


@deck_app.command("add-word")
def add_word(
    ctx: typer.Context,
    deck_id: Annotated[int, typer.Argument(help="Target deck id.")],
    term: Annotated[str, typer.Argument(help="Word or phrase to learn.")],
    definition: Annotated[str, typer.Argument(help="Meaning shown on the back.")],
    example: Annotated[str | None, typer.Option(help="Example sentence.")] = None,
    phonetic: Annotated[str | None, typer.Option(help="Pronunciation.")] = None,
):
    """Add a single word to a deck."""
    store = open_store(ctx)
    word_id = run_async(store.add_item(deck_id, term, definition, example, phonetic))
    typer.secho(f"Added '{term}' (id {word_id}).", fg="green")


@deck_app.command("import")
def import_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="YAML deck file.", exists=True, dir_okay=False)],
    name: Annotated[
        str | None, typer.Option(help="Deck name (overrides the one in the file).")
    ] = None,
):
    """Import words from a YAML deck file."""
    store = open_store(ctx)
    result = run_async(import_deck_file(store, path, deck_name=name))

    typer.secho(
        f"Imported {result.imported} words into '{result.deck_name}' (id {result.deck_id}).",
        fg="green",
    )
    if result.skipped:
        typer.secho(f"Skipped {len(result.skipped)} entries:", fg="yellow")
        for reason in result.skipped:
            typer.echo(f"  {reason}")
