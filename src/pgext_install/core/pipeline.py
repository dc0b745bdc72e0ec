import logging
from dataclasses import dataclass

from pgext_install.core.manifest import read_extension_identity
from pgext_install.core.ports.host import HostLayoutProvider
from pgext_install.core.ports.process import CommandRunner
from pgext_install.core.scanner import scan_declarations
from pgext_install.core.wrapper import generate_wrapper
from pgext_install.errors import ProjectLayoutError
from pgext_install.models import BuildArtifacts, Declaration, DeployedFile, ExtensionIdentity, ProjectLayout
from pgext_install.toolchain.compiler import (
    DEFAULT_COMPILER,
    compile_object,
    link_shared_library,
    write_generated_source,
)
from pgext_install.toolchain.deploy import deploy_extension
from pgext_install.toolchain.metadata import write_extension_metadata
from pgext_install.toolchain.process import run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    identity: ExtensionIdentity
    declarations: list[Declaration]
    artifacts: BuildArtifacts
    deployed: list[DeployedFile]


def run_pipeline(
    layout: ProjectLayout,
    host: HostLayoutProvider,
    *,
    runner: CommandRunner = run_command,
    compiler: str = DEFAULT_COMPILER,
    extra_flags: str | None = None,
    timeout: float | None = None,
) -> PipelineResult:
    """Build and install the extension described by *layout*.

    Stages run strictly in order and the first failure propagates as a
    ``PipelineError``; files written by earlier stages are left in place.
    """
    identity = read_extension_identity(layout.manifest_path)

    try:
        sql_text = layout.sql_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ProjectLayoutError(f"Could not read SQL definition {layout.sql_path}: {exc}") from exc
    declarations = scan_declarations(sql_text)
    source = generate_wrapper([d.function_name for d in declarations])

    build_dir = layout.build_dir
    sql_script_path, descriptor_path = write_extension_metadata(build_dir, layout.sql_path, identity)
    source_path = write_generated_source(build_dir, identity, source)

    include_dir = host.server_include_dir()
    object_path = compile_object(
        build_dir,
        source_path,
        identity,
        include_dir=include_dir,
        library_dir=layout.library_dir,
        compiler=compiler,
        runner=runner,
        timeout=timeout,
    )
    shared_library_path = link_shared_library(
        build_dir,
        object_path,
        identity,
        library_dir=layout.library_dir,
        extra_flags=extra_flags,
        compiler=compiler,
        runner=runner,
        timeout=timeout,
    )

    artifacts = BuildArtifacts(
        source_path=source_path,
        object_file_path=object_path,
        shared_library_path=shared_library_path,
        sql_script_path=sql_script_path,
        descriptor_path=descriptor_path,
    )
    deployed = deploy_extension(artifacts, identity, host)
    logger.info("Extension %s %s installed", identity.name, identity.version)

    return PipelineResult(identity=identity, declarations=declarations, artifacts=artifacts, deployed=deployed)
