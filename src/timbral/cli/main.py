from __future__ import annotations

import typer

from .base import configure_logging
from .commands.catalog import catalog_command
from .commands.features import features_command

configure_logging()
app = typer.Typer(
    help="Spectral and harmonic feature extraction CLI",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("features")(features_command)


@app.command("catalog")
def catalog() -> None:
    """List the spectral and harmonic features that feature lists may name."""
    catalog_command()


def main() -> None:
    """Main entry point for package CLI.

    Invokes the Typer application, which handles command parsing and
    execution.

    Side Effects:
        - Processes CLI arguments and executes commands.
        - May exit with non-zero code on errors.
    """
    app()


if __name__ == "__main__":
    main()
