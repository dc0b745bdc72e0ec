import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from pgext_install.config import get_settings
from pgext_install.core.pipeline import run_pipeline
from pgext_install.core.project import locate_project
from pgext_install.errors import PipelineError, ToolchainError
from pgext_install.toolchain import PgConfigHostLayout

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _report_failure(exc: PipelineError) -> None:
    err_console.print(f"[red]{exc.stage} failed:[/red] {escape(exc.message)}", soft_wrap=True)
    if isinstance(exc, ToolchainError) and exc.diagnostics:
        err_console.print(exc.diagnostics, markup=False, highlight=False, soft_wrap=True, end="")


def install(
    path: Annotated[Path, typer.Argument(help="Path to the extension project.")] = Path("."),
    extra: Annotated[str | None, typer.Option(help="Extra flags appended to the link command.")] = None,
    profile: Annotated[str | None, typer.Option(help="Cargo profile directory under target/.")] = None,
    pg_config: Annotated[str | None, typer.Option(help="pg_config executable to query.")] = None,
    cc: Annotated[str | None, typer.Option(help="C compiler used to compile and link.")] = None,
    timeout: Annotated[float | None, typer.Option(help="Seconds to wait for each external command.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every build step.")] = False,
) -> None:
    """Build the PostgreSQL extension in PATH and install it into the local server."""
    _configure_logging(verbose)
    try:
        settings = get_settings()
    except ValueError as exc:
        err_console.print(f"[red]configuration failed:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(1) from exc

    timeout = timeout if timeout is not None else settings.timeout
    host = PgConfigHostLayout(pg_config or settings.pg_config, timeout=timeout)

    try:
        layout = locate_project(path, profile or settings.profile)
        result = run_pipeline(
            layout,
            host,
            compiler=cc or settings.compiler,
            extra_flags=extra,
            timeout=timeout,
        )
    except PipelineError as exc:
        _report_failure(exc)
        raise typer.Exit(1) from exc

    for deployed in result.deployed:
        console.print(
            f"[green]Copied[/green] {escape(str(deployed.source))} into {escape(str(deployed.destination))}",
            soft_wrap=True,
        )
    console.print(
        f'Execute "CREATE EXTENSION {escape(result.identity.name)};" in your database to access the extension.',
        soft_wrap=True,
    )
