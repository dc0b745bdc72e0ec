"""Versioned SQL script and ``.control`` descriptor.

The descriptor is the line-oriented ``key = 'value'`` file the server reads
to discover an extension::

    # demo extension
    comment = 'Demo functions'
    default_version = '0.1.0'
    module_pathname = '$libdir/demo'
    relocatable=true
"""

import logging
import shutil
from pathlib import Path

from pgext_install.errors import MetadataWriteFailed
from pgext_install.models import ExtensionIdentity

logger = logging.getLogger(__name__)

_LIBDIR_PREFIX = "$libdir/"


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1].replace("''", "'")
    return value


def render_control_file(identity: ExtensionIdentity) -> str:
    lines = [
        f"# {identity.name} extension",
        f"comment = {_quote(identity.description)}",
        f"default_version = {_quote(identity.version)}",
        f"module_pathname = {_quote(_LIBDIR_PREFIX + identity.name)}",
        "relocatable=true",
    ]
    return "\n".join(lines) + "\n"


def parse_control_entries(text: str) -> dict[str, str]:
    entries: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        entries[key.strip()] = _unquote(value)
    return entries


def parse_control_file(text: str) -> ExtensionIdentity:
    """Recover the identity written by ``render_control_file``."""
    entries = parse_control_entries(text)
    for key in ("comment", "default_version", "module_pathname"):
        if key not in entries:
            raise ValueError(f"Control file has no {key} entry")
    module_pathname = entries["module_pathname"]
    name = module_pathname.removeprefix(_LIBDIR_PREFIX)
    return ExtensionIdentity(
        name=name,
        description=entries["comment"],
        version=entries["default_version"],
    )


def write_extension_metadata(build_dir: Path, sql_path: Path, identity: ExtensionIdentity) -> tuple[Path, Path]:
    """Copy the SQL definition to ``<name>--<version>.sql`` and write ``<name>.control``.

    *build_dir* is created when missing.

    Returns (sql_script_path, descriptor_path).
    """
    try:
        build_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise MetadataWriteFailed(f"Unable to create build directory {build_dir}: {exc}") from exc

    sql_out = build_dir / identity.sql_script_name
    try:
        shutil.copyfile(sql_path, sql_out)
    except OSError as exc:
        raise MetadataWriteFailed(f"Unable to copy {sql_path} to {sql_out}: {exc}") from exc

    control_path = build_dir / identity.control_name
    try:
        control_path.write_text(render_control_file(identity), encoding="utf-8")
    except OSError as exc:
        raise MetadataWriteFailed(f"Error writing control file {control_path}: {exc}") from exc

    logger.info("Wrote %s and %s", sql_out, control_path)
    return sql_out, control_path
