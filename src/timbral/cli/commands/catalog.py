"""CLI command listing the feature catalog."""

from __future__ import annotations

import typer

from ...features import FEATURE_SET, HARMONIC_SET, catalog


def catalog_command() -> None:
    """Print known spectral and harmonic features with their aliases."""
    groups = catalog()
    for group, canonical in (("spectral", FEATURE_SET), ("harmonic", HARMONIC_SET)):
        typer.secho(f"{group} features", bold=True)
        for name, aliases in groups[group].items():
            typer.echo(f"  {name:<14} {', '.join(aliases)}")
        typer.echo(f"  all/full = {canonical}")
