"""CLI command for bulk-importing characters from a JSON file.

The file holds a JSON array of character objects:

    [{"name": "Rick Sanchez", "species": "Human", "gender": "Male", "location": "Earth"}]

Usage:
    catalog import characters.json
    catalog import characters.json --dry-run
    catalog import characters.json --database-url sqlite+aiosqlite:///./catalog.db

Imports publish no creation events, so cached listings pick the new
characters up only after their entries expire.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from pydantic import TypeAdapter, ValidationError

from catalog.core.model import CharacterCreateRequest

app = typer.Typer(help="Import characters from a JSON file")

_requests = TypeAdapter(list[CharacterCreateRequest])


@app.callback(invoke_without_command=True)
def import_characters(
    path: Path = typer.Argument(
        ...,
        help="Path to a JSON array of characters",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    database_url: str | None = typer.Option(
        None,
        "--database-url",
        "-d",
        help="Database to import into (defaults to CATALOG_DATABASE_URL)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Validate the file without writing anything",
    ),
) -> None:
    """Validate a character file and insert it in one transaction."""
    from rich.console import Console

    console = Console()

    try:
        requests = _requests.validate_json(path.read_bytes())
    except ValidationError as e:
        console.print(f"[red]Invalid character file:[/red] {e.error_count()} error(s)")
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            console.print(f"  {location}: {error['msg']}")
        raise typer.Exit(code=1) from e

    console.print(f"[blue]Validated {len(requests)} characters[/blue] from {path}")
    if dry_run:
        console.print("[yellow]Dry run mode - no changes made[/yellow]")
        return

    count = asyncio.run(_import(requests, database_url))
    console.print(f"[green]Imported {count} characters[/green]")


async def _import(requests: list[CharacterCreateRequest], database_url: str | None) -> int:
    from catalog.characters.commands import CharactersCreateCommand, CharactersCreateCommandHandler
    from catalog.config import settings
    from catalog.persistence.db import (
        create_engine_from_settings,
        create_session_factory,
        init_db,
        session_context,
    )
    from catalog.persistence.repositories import SqlCharacterRepository

    target = settings
    if database_url:
        target = settings.model_copy(update={"database_url": database_url})
    engine = create_engine_from_settings(target)
    try:
        await init_db(engine)
        async with session_context(create_session_factory(engine)) as session:
            handler = CharactersCreateCommandHandler(SqlCharacterRepository(session))
            return await handler.handle(CharactersCreateCommand(tuple(requests)))
    finally:
        await engine.dispose()
