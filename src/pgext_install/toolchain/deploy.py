import logging
import os
import shutil
import tempfile
from pathlib import Path

from pgext_install.core.ports.host import HostLayoutProvider
from pgext_install.errors import DeployFailed
from pgext_install.models import BuildArtifacts, DeployedFile, ExtensionIdentity

logger = logging.getLogger(__name__)

EXTENSION_SUBDIR = "extension"


def install_file(source: Path, destination: Path) -> None:
    """Copy *source* next to *destination* under a temporary name, then rename it into place.

    A failed copy leaves *destination* untouched.
    """
    fd, staging = tempfile.mkstemp(prefix=f".{destination.name}.", dir=destination.parent)
    os.close(fd)
    try:
        shutil.copyfile(source, staging)
        shutil.copymode(source, staging)
        os.replace(staging, destination)
    except BaseException:
        Path(staging).unlink(missing_ok=True)
        raise


def _deploy_one(artifact: str, source: Path, destination: Path) -> DeployedFile:
    try:
        install_file(source, destination)
    except OSError as exc:
        raise DeployFailed(f"Unable to copy {artifact} {source} to {destination}: {exc}", artifact=artifact) from exc
    logger.info("%s copied into %s", source, destination)
    return DeployedFile(artifact=artifact, source=source, destination=destination)


def deploy_extension(
    artifacts: BuildArtifacts,
    identity: ExtensionIdentity,
    host: HostLayoutProvider,
) -> list[DeployedFile]:
    """Install the shared library, SQL script and descriptor into the host directories.

    Copies happen in that order and are not rolled back when a later one fails.
    """
    module_dir = host.shared_module_dir()
    extension_dir = host.shared_data_dir() / EXTENSION_SUBDIR

    # module_pathname is '$libdir/<name>', so the library is installed without the lib prefix
    targets = [
        ("shared library", artifacts.shared_library_path, module_dir / f"{identity.name}.so"),
        ("SQL script", artifacts.sql_script_path, extension_dir / identity.sql_script_name),
        ("control file", artifacts.descriptor_path, extension_dir / identity.control_name),
    ]
    return [_deploy_one(artifact, source, destination) for artifact, source, destination in targets]
