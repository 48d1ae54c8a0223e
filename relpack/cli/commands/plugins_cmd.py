"""Plugins command - list the lifecycle plugins that would run."""

from __future__ import annotations

import typer

from relpack.cli.context import build_context
from relpack.output.console import Style


def plugins(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show skipped candidates"),
) -> None:
    """List discovered plugins, in dispatch order, with the hooks they implement."""
    ctx = build_context(verbose=verbose)
    console = ctx.console

    extensions = ctx.registry.discover()
    if not extensions:
        console.print("No plugins found", Style.DIM)
        return

    console.header("Plugins")
    for ext in extensions:
        hooks = ", ".join(str(phase) for phase in ext.implemented_hooks()) or "no hooks"
        console.print(f"  {ext.name} [{ext.source}]")
        console.print(f"    {hooks}", Style.DIM)
