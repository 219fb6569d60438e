"""Shared helpers for CLI command modules."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

import typer

from vocabmaster.application import factory
from vocabmaster.application.config import AppConfig, resolve_config
from vocabmaster.domain.errors import PersistenceError, SessionStateError, ValidationError
from vocabmaster.infrastructure.adapters.sqlite_store import SQLiteStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _resolve_with_overrides(ctx: typer.Context | None = None, **overrides: Any) -> AppConfig:
    """Resolve config, layering global options from the root callback under command options."""
    merged: dict[str, Any] = {}
    if ctx is not None and isinstance(ctx.obj, dict):
        merged.update(ctx.obj.get("overrides", {}))
    merged.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return resolve_config(merged)
    except ValueError as e:
        typer.secho(f"Invalid configuration: {e}", fg="red", err=True)
        raise typer.Exit(2) from None


def humanize_error(e: Exception) -> str:
    """Turn engine exceptions into one-line messages for the terminal."""
    if isinstance(e, ValidationError):
        return f"Invalid input: {e}"
    if isinstance(e, PersistenceError):
        return f"Database error: {e}"
    if isinstance(e, SessionStateError):
        return f"Session error: {e}"
    return str(e)


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, reporting engine errors and exiting non-zero."""
    try:
        return asyncio.run(coro)
    except (ValidationError, PersistenceError, SessionStateError) as e:
        logger.debug("Command failed", exc_info=True)
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(1) from None


def open_store(ctx: typer.Context | None = None, **overrides: Any) -> SQLiteStore:
    """Open the configured store, exiting with a message if the database is unusable."""
    config = _resolve_with_overrides(ctx, **overrides)
    try:
        return factory.get_store(config)
    except PersistenceError as e:
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(1) from None
