"""Tests for the catalog command line."""

import asyncio
import json
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from catalog.cli import app
from catalog.config import Settings
from catalog.persistence.db import (
    create_engine_from_settings,
    create_session_factory,
    session_context,
)
from catalog.persistence.repositories import SqlCharacterRepository

runner = CliRunner()

CHARACTERS = [
    {"name": "Rick Sanchez", "species": "Human", "gender": "Male", "location": "Earth"},
    {"name": "Squanchy", "species": "Cat-Person", "gender": "Male", "location": "Squanch"},
]


def _stored_names(database_url: str) -> list[str]:
    async def load() -> list[str]:
        engine = create_engine_from_settings(Settings(_env_file=None, database_url=database_url))
        try:
            async with session_context(create_session_factory(engine)) as session:
                return [c.name for c in await SqlCharacterRepository(session).get_all()]
        finally:
            await engine.dispose()

    return asyncio.run(load())


class TestServe:
    def test_runs_app_factory(self) -> None:
        with patch("uvicorn.run") as run:
            result = runner.invoke(app, ["serve", "--port", "9000", "--log-level", "DEBUG"])

        assert result.exit_code == 0
        run.assert_called_once()
        kwargs = run.call_args.kwargs
        assert kwargs["app"] == "catalog.api.app:create_app"
        assert kwargs["factory"] is True
        assert kwargs["port"] == 9000
        assert kwargs["log_level"] == "debug"


class TestImport:
    @pytest.fixture
    def database_url(self, tmp_path: Path) -> str:
        return f"sqlite+aiosqlite:///{tmp_path}/import.db"

    @pytest.fixture
    def source(self, tmp_path: Path) -> Path:
        path = tmp_path / "characters.json"
        path.write_text(json.dumps(CHARACTERS))
        return path

    def test_imports_file(self, source: Path, database_url: str) -> None:
        """All characters in the file are inserted."""
        result = runner.invoke(app, ["import", str(source), "--database-url", database_url])

        assert result.exit_code == 0, result.output
        assert "Imported 2 characters" in result.output
        assert _stored_names(database_url) == ["Rick Sanchez", "Squanchy"]

    def test_dry_run_writes_nothing(self, source: Path, database_url: str, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["import", str(source), "--database-url", database_url, "--dry-run"]
        )

        assert result.exit_code == 0
        assert "Validated 2 characters" in result.output
        assert not (tmp_path / "import.db").exists()

    def test_invalid_file_rejected(self, tmp_path: Path, database_url: str) -> None:
        """Validation errors abort before anything is written."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([CHARACTERS[0], {"name": "", "species": "Human"}]))

        result = runner.invoke(app, ["import", str(path), "--database-url", database_url])

        assert result.exit_code == 1
        assert "Invalid character file" in result.output
        assert not (tmp_path / "import.db").exists()
