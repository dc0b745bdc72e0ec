import logging
from pathlib import Path

from pgext_install.core.ports.process import CommandRunner
from pgext_install.errors import HostConfigUnavailable
from pgext_install.models import HostLayout
from pgext_install.toolchain.process import invoke, run_command

logger = logging.getLogger(__name__)

INCLUDEDIR_SERVER = "--includedir-server"
PKGLIBDIR = "--pkglibdir"
SHAREDIR = "--sharedir"


class PgConfigHostLayout:
    """Ask ``pg_config`` for installation directories, one invocation per lookup.

    Implements the ``HostLayoutProvider`` protocol. Nothing is cached: each
    call reflects the installation as it is at that moment.
    """

    def __init__(
        self,
        executable: str = "pg_config",
        runner: CommandRunner = run_command,
        timeout: float | None = None,
    ) -> None:
        self._executable = executable
        self._runner = runner
        self._timeout = timeout

    def query(self, flag: str) -> Path:
        args = [self._executable, flag]
        result = invoke(self._runner, args, HostConfigUnavailable, timeout=self._timeout)
        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if len(lines) != 1:
            raise HostConfigUnavailable(
                f"Could not determine PostgreSQL {flag}: unexpected output {result.stdout!r}",
                command=args,
                diagnostics=result.stderr,
            )
        directory = Path(lines[0])
        logger.info("Found Postgres directory: %s = %s", flag, directory)
        return directory

    def server_include_dir(self) -> Path:
        return self.query(INCLUDEDIR_SERVER)

    def shared_module_dir(self) -> Path:
        return self.query(PKGLIBDIR)

    def shared_data_dir(self) -> Path:
        return self.query(SHAREDIR)


class StaticHostLayout:
    """Fixed host layout, for tests and hosts without ``pg_config``."""

    def __init__(self, layout: HostLayout) -> None:
        self.layout = layout

    def server_include_dir(self) -> Path:
        return self.layout.server_include_dir

    def shared_module_dir(self) -> Path:
        return self.layout.shared_module_dir

    def shared_data_dir(self) -> Path:
        return self.layout.shared_data_dir
