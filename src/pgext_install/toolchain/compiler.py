import logging
from pathlib import Path

from pgext_install.core.ports.process import CommandRunner
from pgext_install.errors import CompileFailed, LinkFailed, SourceWriteFailed
from pgext_install.models import ExtensionIdentity
from pgext_install.toolchain.process import invoke, run_command

logger = logging.getLogger(__name__)

DEFAULT_COMPILER = "gcc"
WHOLE_ARCHIVE = "-Wl,--whole-archive"
NO_WHOLE_ARCHIVE = "-Wl,--no-whole-archive"


def write_generated_source(build_dir: Path, identity: ExtensionIdentity, source: str) -> Path:
    src_path = build_dir / identity.source_name
    try:
        # "w" truncates whatever an earlier run left behind
        with src_path.open("w", encoding="utf-8") as src_file:
            src_file.write(source)
    except OSError as exc:
        raise SourceWriteFailed(f"Unable to write generated source {src_path}: {exc}") from exc
    logger.info("Wrote generated source %s", src_path)
    return src_path


def split_extra_flags(extra_flags: str | None) -> list[str]:
    """Split caller-supplied link flags on single spaces, dropping empty fragments."""
    if not extra_flags:
        return []
    return [flag for flag in extra_flags.split(" ") if flag]


def compile_command(
    source_path: Path,
    object_path: Path,
    identity: ExtensionIdentity,
    include_dir: Path,
    library_dir: Path,
    compiler: str = DEFAULT_COMPILER,
) -> list[str]:
    return [
        compiler,
        "-c",
        str(source_path),
        "-fPIC",
        "-o",
        str(object_path),
        f"-I{include_dir}",
        f"-L{library_dir}",
        f"-l{identity.library_name}",
    ]


def link_command(
    object_path: Path,
    shared_library_path: Path,
    static_library: Path,
    extra_flags: str | None = None,
    compiler: str = DEFAULT_COMPILER,
) -> list[str]:
    return [
        compiler,
        str(object_path),
        "-shared",
        "-o",
        str(shared_library_path),
        WHOLE_ARCHIVE,
        str(static_library),
        NO_WHOLE_ARCHIVE,
        *split_extra_flags(extra_flags),
    ]


def static_library_path(library_dir: Path, identity: ExtensionIdentity) -> Path:
    return library_dir / f"lib{identity.library_name}.a"


def compile_object(
    build_dir: Path,
    source_path: Path,
    identity: ExtensionIdentity,
    *,
    include_dir: Path,
    library_dir: Path,
    compiler: str = DEFAULT_COMPILER,
    runner: CommandRunner = run_command,
    timeout: float | None = None,
) -> Path:
    """Compile the generated wrapper into a position-independent object file."""
    object_path = build_dir / identity.object_name
    args = compile_command(source_path, object_path, identity, include_dir, library_dir, compiler)
    invoke(runner, args, CompileFailed, timeout=timeout)
    if not object_path.is_file():
        raise CompileFailed(f"{compiler} reported success but {object_path} was not produced", command=args)
    return object_path


def link_shared_library(
    build_dir: Path,
    object_path: Path,
    identity: ExtensionIdentity,
    *,
    library_dir: Path,
    extra_flags: str | None = None,
    compiler: str = DEFAULT_COMPILER,
    runner: CommandRunner = run_command,
    timeout: float | None = None,
) -> Path:
    """Link the object file and the whole static archive into ``lib<name>.so``.

    The archive goes through ``--whole-archive`` because nothing in the wrapper
    references the registered symbols, so the linker would otherwise drop them.
    """
    if not object_path.is_file():
        raise LinkFailed(f"Object file {object_path} does not exist")

    shared_library = build_dir / identity.shared_library_name
    args = link_command(
        object_path,
        shared_library,
        static_library_path(library_dir, identity),
        extra_flags,
        compiler,
    )
    invoke(runner, args, LinkFailed, timeout=timeout)
    return shared_library
