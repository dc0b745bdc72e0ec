from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator


class ExtensionIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    version: str

    @field_validator("name", "description", "version")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("name", "version")
    @classmethod
    def _no_path_separator(cls, value: str) -> str:
        # both end up verbatim in file names
        if "/" in value or "\\" in value:
            raise ValueError("must not contain path separators")
        return value

    @property
    def library_name(self) -> str:
        """Stem of the static archive cargo produces for the crate."""
        return self.name.replace("-", "_")

    @property
    def sql_script_name(self) -> str:
        return f"{self.name}--{self.version}.sql"

    @property
    def control_name(self) -> str:
        return f"{self.name}.control"

    @property
    def source_name(self) -> str:
        return f"{self.name}.c"

    @property
    def object_name(self) -> str:
        return f"{self.name}.o"

    @property
    def shared_library_name(self) -> str:
        return f"lib{self.name}.so"


class HostLayout(BaseModel):
    model_config = ConfigDict(frozen=True)

    server_include_dir: Path
    shared_module_dir: Path
    shared_data_dir: Path


class BuildArtifacts(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_path: Path
    object_file_path: Path
    shared_library_path: Path
    sql_script_path: Path
    descriptor_path: Path


@dataclass(frozen=True)
class Declaration:
    function_name: str
    line: int


@dataclass(frozen=True)
class CommandResult:
    args: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class DeployedFile:
    artifact: str
    source: Path
    destination: Path


@dataclass(frozen=True)
class ProjectLayout:
    project_dir: Path
    manifest_path: Path
    sql_path: Path
    library_dir: Path
    build_dir: Path
