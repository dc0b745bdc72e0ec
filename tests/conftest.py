"""Shared fixtures and helpers for tests."""

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from pgext_install.core.project import locate_project
from pgext_install.models import CommandResult, ExtensionIdentity, HostLayout, ProjectLayout
from pgext_install.toolchain.pg_config import StaticHostLayout

_REPO_ROOT = Path(__file__).parent.parent

DEMO_MANIFEST = """\
[package]
name = "demo"
description = "Demo functions"
version = "0.1.0"
edition = "2018"

[lib]
crate-type = ["staticlib"]
"""

DEMO_SQL = """\
create function add(a integer, b integer) returns integer as 'file.so','add' language c strict;
create function one() returns integer language sql as $$ select 1 $$;
create function concat_text(a text, b text) returns text as 'file.so','concat_text' language C immutable;
"""


# ---------------------------------------------------------------------------
# Auto-marker: every test under tests/unit is a unit test
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        rel = Path(str(item.fspath)).relative_to(_REPO_ROOT / "tests")
        if rel.parts and rel.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Fake external processes
# ---------------------------------------------------------------------------


class RecordingRunner:
    """``CommandRunner`` that records invocations instead of starting processes.

    Successful commands create the file named by ``-o`` so downstream steps see
    the artifact they expect. ``fail_on`` maps an argument that identifies a
    command (e.g. ``"-c"`` or ``"-shared"``) to the result it should return.
    """

    def __init__(self, stdout: Callable[[Sequence[str]], str] | None = None) -> None:
        self.calls: list[list[str]] = []
        self.timeouts: list[float | None] = []
        self.fail_on: dict[str, CommandResult] = {}
        self._stdout = stdout

    def __call__(self, args: Sequence[str], timeout: float | None = None) -> CommandResult:
        self.calls.append(list(args))
        self.timeouts.append(timeout)
        for marker, result in self.fail_on.items():
            if marker in args:
                return result
        if "-o" in args:
            Path(args[list(args).index("-o") + 1]).write_bytes(b"\x7fELF")
        stdout = self._stdout(args) if self._stdout else ""
        return CommandResult(args=tuple(args), exit_code=0, stdout=stdout, stderr="")

    def fail(self, marker: str, stderr: str, exit_code: int = 1) -> None:
        self.fail_on[marker] = CommandResult(args=(), exit_code=exit_code, stdout="", stderr=stderr)


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


# ---------------------------------------------------------------------------
# Projects and host layouts
# ---------------------------------------------------------------------------


@pytest.fixture
def identity() -> ExtensionIdentity:
    return ExtensionIdentity(name="demo", description="Demo functions", version="0.1.0")


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Path]:
    def _make_project(
        manifest: str = DEMO_MANIFEST,
        sql: str | None = DEMO_SQL,
        sql_name: str = "demo.sql",
        archive: str | None = "libdemo.a",
    ) -> Path:
        project = tmp_path / "project"
        (project / "sql").mkdir(parents=True)
        (project / "Cargo.toml").write_text(manifest, encoding="utf-8")
        if sql is not None:
            (project / "sql" / sql_name).write_text(sql, encoding="utf-8")
        if archive is not None:
            release = project / "target" / "release"
            release.mkdir(parents=True)
            (release / archive).write_bytes(b"!<arch>\n")
        return project

    return _make_project


@pytest.fixture
def project_layout(make_project: Callable[..., Path]) -> ProjectLayout:
    return locate_project(make_project())


@pytest.fixture
def host_layout(tmp_path: Path) -> HostLayout:
    layout = HostLayout(
        server_include_dir=tmp_path / "pg" / "include" / "server",
        shared_module_dir=tmp_path / "pg" / "lib",
        shared_data_dir=tmp_path / "pg" / "share",
    )
    layout.server_include_dir.mkdir(parents=True)
    layout.shared_module_dir.mkdir(parents=True)
    (layout.shared_data_dir / "extension").mkdir(parents=True)
    return layout


@pytest.fixture
def static_host(host_layout: HostLayout) -> StaticHostLayout:
    return StaticHostLayout(host_layout)
