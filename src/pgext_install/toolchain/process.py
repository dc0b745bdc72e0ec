import logging
import shlex
import subprocess
from collections.abc import Sequence

from pgext_install.core.ports.process import CommandRunner
from pgext_install.errors import ToolchainError
from pgext_install.models import CommandResult

logger = logging.getLogger(__name__)


def run_command(args: Sequence[str], timeout: float | None = None) -> CommandResult:
    """Run *args* to completion and capture both output streams.

    Implements the ``CommandRunner`` protocol. Raises ``OSError`` when the
    executable cannot be started and ``subprocess.TimeoutExpired`` on timeout.
    """
    result = subprocess.run(
        list(args),
        check=False,
        capture_output=True,
        text=True,
        timeout=timeout,
    )
    return CommandResult(
        args=tuple(args),
        exit_code=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
    )


def format_command(args: Sequence[str]) -> str:
    return shlex.join(args)


def invoke(
    runner: CommandRunner,
    args: Sequence[str],
    error: type[ToolchainError],
    timeout: float | None = None,
) -> CommandResult:
    """Run one external tool, raising *error* if it cannot start, times out or exits non-zero."""
    command = format_command(args)
    logger.info("Running: %s", command)
    try:
        result = runner(args, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        raise error(f"Timed out after {timeout}s: {command}", command=args) from exc
    except OSError as exc:
        raise error(f"Could not run {args[0]}: {exc}", command=args) from exc

    if not result.ok:
        raise error(
            f"{args[0]} exited with status {result.exit_code}: {command}",
            command=args,
            diagnostics=result.stderr,
        )
    return result
