"""Error taxonomy for the extension build pipeline.

Every error is terminal for a run. The CLI catches ``PipelineError``, prints
``stage`` and ``message`` and, for toolchain failures, the captured
diagnostics of the external command.
"""

from __future__ import annotations

from collections.abc import Sequence


class PipelineError(Exception):
    stage = "pipeline"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


class ManifestError(PipelineError):
    stage = "manifest"


class ManifestUnreadable(ManifestError):
    pass


class ManifestMalformed(ManifestError):
    pass


class ManifestIncomplete(ManifestError):
    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


# ---------------------------------------------------------------------------
# Scanner / project layout
# ---------------------------------------------------------------------------


class ScanFailed(PipelineError):
    stage = "scan"


class ProjectLayoutError(PipelineError):
    stage = "project"


# ---------------------------------------------------------------------------
# Toolchain
# ---------------------------------------------------------------------------


class ToolchainError(PipelineError):
    stage = "toolchain"

    def __init__(
        self,
        message: str,
        command: Sequence[str] | None = None,
        diagnostics: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command) if command is not None else None
        self.diagnostics = diagnostics


class MetadataWriteFailed(ToolchainError):
    stage = "metadata"


class SourceWriteFailed(ToolchainError):
    stage = "source"


class HostConfigUnavailable(ToolchainError):
    stage = "host-config"


class CompileFailed(ToolchainError):
    stage = "compile"


class LinkFailed(ToolchainError):
    stage = "link"


class DeployFailed(ToolchainError):
    stage = "deploy"

    def __init__(self, message: str, artifact: str) -> None:
        super().__init__(message)
        self.artifact = artifact
