from pathlib import Path

from pgext_install.errors import ProjectLayoutError
from pgext_install.models import ProjectLayout

MANIFEST_NAME = "Cargo.toml"
SQL_DIR = "sql"
TARGET_DIR = "target"
BUILD_SUBDIR = "postgres"


def find_sql_definition(project_dir: Path) -> Path:
    """Return the single ``*.sql`` file of ``<project>/sql``."""
    sql_dir = project_dir / SQL_DIR
    if not sql_dir.is_dir():
        raise ProjectLayoutError(f"Missing sql directory at project root {project_dir}")
    try:
        scripts = sorted(p for p in sql_dir.iterdir() if p.suffix == ".sql" and p.is_file())
    except OSError as exc:
        raise ProjectLayoutError(f"Unable to view content of sql directory {sql_dir}: {exc}") from exc

    if not scripts:
        raise ProjectLayoutError(f"Missing SQL script file in {sql_dir}")
    if len(scripts) > 1:
        names = ", ".join(p.name for p in scripts)
        raise ProjectLayoutError(f"Multiple SQL script files in {sql_dir}: {names}")
    return scripts[0]


def locate_project(project_dir: Path, profile: str = "release") -> ProjectLayout:
    if not project_dir.is_dir():
        raise ProjectLayoutError(f"Project directory {project_dir} does not exist")
    project_dir = project_dir.resolve()
    library_dir = project_dir / TARGET_DIR / profile
    return ProjectLayout(
        project_dir=project_dir,
        manifest_path=project_dir / MANIFEST_NAME,
        sql_path=find_sql_definition(project_dir),
        library_dir=library_dir,
        build_dir=library_dir / BUILD_SUBDIR,
    )
