"""CLI for the character catalog.

Usage:
    catalog --help
    catalog serve --port 8080
    catalog import characters.json
"""

import typer

from catalog.cli.import_cmd import app as import_app
from catalog.cli.serve import app as serve_app

app = typer.Typer(
    name="catalog",
    help="Character catalog service",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(import_app, name="import")


@app.callback()
def callback() -> None:
    """Character catalog service."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
