"""Release command - assemble and package a release."""

from __future__ import annotations

import typer

from relpack.cli.context import build_context
from relpack.core.errors import ErrorCode
from relpack.core.result import Err
from relpack.output.errors import (
    build_failure_exit_code,
    print_build_failure,
    print_resolve_error,
    resolve_error_exit_code,
)
from relpack.services.release import (
    DirectoryAssembler,
    ReleaseBuilder,
    ZipPackager,
    resolve_release,
)


def release(
    name: str | None = typer.Argument(None, help="Release to build (default: default_release)"),
    env: str | None = typer.Option(None, "--env", "-e", help="Environment profile to apply"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log verbosely"),
) -> None:
    """Build a release, running lifecycle plugins around assembly and packaging."""
    ctx = build_context(verbose=verbose)
    console = ctx.console

    config = ctx.config
    if config is None:
        if ctx.config_error is None:
            console.error("You are missing a release config file (rel/config.toml)")
        else:
            console.error("Cannot build a release without a valid rel/config.toml")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    resolved = resolve_release(config, ctx.project, name=name, environment=env)
    if isinstance(resolved, Err):
        print_resolve_error(resolved.error, console)
        raise typer.Exit(code=resolve_error_exit_code(resolved.error))

    builder = ReleaseBuilder(
        registry=ctx.registry,
        console=console,
        assembler=DirectoryAssembler(root=ctx.project.root),
        packager=ZipPackager(),
    )
    built = builder.build(resolved.value)
    if isinstance(built, Err):
        print_build_failure(built.error, console)
        raise typer.Exit(code=build_failure_exit_code(built.error))
