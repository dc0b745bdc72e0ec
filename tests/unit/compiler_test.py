"""Unit tests for compiling and linking the generated wrapper."""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest

from pgext_install.errors import CompileFailed, LinkFailed, SourceWriteFailed
from pgext_install.models import CommandResult, ExtensionIdentity
from pgext_install.toolchain.compiler import (
    compile_object,
    link_shared_library,
    split_extra_flags,
    write_generated_source,
)


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    path = tmp_path / "target" / "release" / "postgres"
    path.mkdir(parents=True)
    return path


def test_write_generated_source_truncates(build_dir: Path, identity: ExtensionIdentity) -> None:
    (build_dir / "demo.c").write_text("x" * 1000, encoding="utf-8")

    src = write_generated_source(build_dir, identity, "PG_MODULE_MAGIC;\n")

    assert src == build_dir / "demo.c"
    assert src.read_text(encoding="utf-8") == "PG_MODULE_MAGIC;\n"


def test_write_generated_source_failure(tmp_path: Path, identity: ExtensionIdentity) -> None:
    with pytest.raises(SourceWriteFailed):
        write_generated_source(tmp_path / "missing", identity, "")


def test_compile_command_line(build_dir: Path, identity: ExtensionIdentity, runner: Any) -> None:
    src = write_generated_source(build_dir, identity, "")

    obj = compile_object(
        build_dir,
        src,
        identity,
        include_dir=Path("/pg/include/server"),
        library_dir=Path("/proj/target/release"),
        runner=runner,
    )

    assert obj == build_dir / "demo.o"
    assert runner.calls == [
        [
            "gcc",
            "-c",
            str(src),
            "-fPIC",
            "-o",
            str(obj),
            "-I/pg/include/server",
            "-L/proj/target/release",
            "-ldemo",
        ]
    ]


def test_compile_failure_keeps_diagnostics_verbatim(build_dir: Path, identity: ExtensionIdentity, runner: Any) -> None:
    diagnostics = "demo.c:4:1: error: unknown type name 'PG_MODULE_MAGI'\n    4 | PG_MODULE_MAGI;\n"
    runner.fail("-c", diagnostics)
    src = write_generated_source(build_dir, identity, "")

    with pytest.raises(CompileFailed) as excinfo:
        compile_object(
            build_dir, src, identity, include_dir=Path("/inc"), library_dir=Path("/lib"), runner=runner
        )

    assert excinfo.value.diagnostics == diagnostics
    assert excinfo.value.command is not None
    assert excinfo.value.command[0] == "gcc"
    assert excinfo.value.stage == "compile"


def test_compile_without_object_file_fails(build_dir: Path, identity: ExtensionIdentity) -> None:
    def _silent(args: Sequence[str], timeout: float | None = None) -> CommandResult:
        return CommandResult(args=tuple(args), exit_code=0, stdout="", stderr="")

    src = write_generated_source(build_dir, identity, "")
    with pytest.raises(CompileFailed, match="was not produced"):
        compile_object(build_dir, src, identity, include_dir=Path("/inc"), library_dir=Path("/lib"), runner=_silent)


def test_missing_compiler(build_dir: Path, identity: ExtensionIdentity) -> None:
    def _missing(args: Sequence[str], timeout: float | None = None) -> CommandResult:
        raise FileNotFoundError(2, "No such file or directory", args[0])

    src = write_generated_source(build_dir, identity, "")
    with pytest.raises(CompileFailed, match="Could not run clang-99"):
        compile_object(
            build_dir,
            src,
            identity,
            include_dir=Path("/inc"),
            library_dir=Path("/lib"),
            compiler="clang-99",
            runner=_missing,
        )


def test_link_command_line_uses_whole_archive(build_dir: Path, identity: ExtensionIdentity, runner: Any) -> None:
    obj = build_dir / "demo.o"
    obj.write_bytes(b"")
    library_dir = build_dir.parent

    so = link_shared_library(
        build_dir, obj, identity, library_dir=library_dir, extra_flags="-lm -lpthread", runner=runner
    )

    assert so == build_dir / "libdemo.so"
    assert runner.calls == [
        [
            "gcc",
            str(obj),
            "-shared",
            "-o",
            str(so),
            "-Wl,--whole-archive",
            str(library_dir / "libdemo.a"),
            "-Wl,--no-whole-archive",
            "-lm",
            "-lpthread",
        ]
    ]


def test_link_uses_cargo_library_name(build_dir: Path, runner: Any) -> None:
    identity = ExtensionIdentity(name="pg-demo", description="d", version="1")
    obj = build_dir / "pg-demo.o"
    obj.write_bytes(b"")

    so = link_shared_library(build_dir, obj, identity, library_dir=build_dir.parent, runner=runner)

    assert so.name == "libpg-demo.so"
    assert str(build_dir.parent / "libpg_demo.a") in runner.calls[0]


def test_link_requires_object_file(build_dir: Path, identity: ExtensionIdentity, runner: Any) -> None:
    with pytest.raises(LinkFailed, match="does not exist"):
        link_shared_library(build_dir, build_dir / "demo.o", identity, library_dir=build_dir, runner=runner)
    assert runner.calls == []


def test_link_failure_keeps_diagnostics(build_dir: Path, identity: ExtensionIdentity, runner: Any) -> None:
    runner.fail("-shared", "undefined reference to `add'\n")
    obj = build_dir / "demo.o"
    obj.write_bytes(b"")

    with pytest.raises(LinkFailed) as excinfo:
        link_shared_library(build_dir, obj, identity, library_dir=build_dir, runner=runner)

    assert excinfo.value.diagnostics == "undefined reference to `add'\n"


@pytest.mark.parametrize(
    ("extra", "expected"),
    [
        (None, []),
        ("", []),
        ("-lm", ["-lm"]),
        ("-lm  -L/opt/lib", ["-lm", "-L/opt/lib"]),
        ("-Wl,-rpath,/opt/lib -lssl", ["-Wl,-rpath,/opt/lib", "-lssl"]),
    ],
)
def test_split_extra_flags(extra: str | None, expected: list[str]) -> None:
    assert split_extra_flags(extra) == expected
