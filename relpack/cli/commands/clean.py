"""Clean command - remove release artifacts."""

from __future__ import annotations

import typer

from relpack.cli.context import build_context
from relpack.core.errors import ErrorCode
from relpack.core.result import Err
from relpack.services.clean import CleanFailed, run_clean

_IMPLODE_WARNING = (
    "THIS WILL REMOVE ALL RELEASES AND RELATED CONFIGURATION!\n"
    "Are you absolutely sure you want to proceed?"
)


def _confirm_implode() -> bool:
    return typer.confirm(_IMPLODE_WARNING, default=False)


def cleanup_args(*, implode: bool, no_confirm: bool, verbose: bool) -> tuple[str, ...]:
    """Command line arguments handed to after_cleanup plugins."""
    args: list[str] = []
    if implode:
        args.append("--implode")
    if no_confirm:
        args.append("--no-confirm")
    if verbose:
        args.append("--verbose")
    return tuple(args)


def clean(
    implode: bool = typer.Option(False, "--implode", help="Remove all release files"),
    no_confirm: bool = typer.Option(False, "--no-confirm", help="Do not ask before --implode"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log verbosely"),
) -> None:
    """Clean up release-related files, then run after_cleanup plugins."""
    ctx = build_context(verbose=verbose)

    try:
        result = run_clean(
            cleanup_args(implode=implode, no_confirm=no_confirm, verbose=verbose),
            project=ctx.project,
            registry=ctx.registry,
            console=ctx.console,
            implode=implode,
            no_confirm=no_confirm,
            confirm=_confirm_implode,
        )
    except Exception as e:
        ctx.console.error(f"{type(e).__name__}: {e}")
        raise typer.Exit(code=int(ErrorCode.PLUGIN_ERROR)) from e

    if isinstance(result, Err):
        code = ErrorCode.IO_ERROR if isinstance(result.error, CleanFailed) else ErrorCode.ENV_ERROR
        raise typer.Exit(code=int(code))
