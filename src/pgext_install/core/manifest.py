import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pgext_install.errors import ManifestIncomplete, ManifestMalformed, ManifestUnreadable
from pgext_install.models import ExtensionIdentity

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("name", "description", "version")


def parse_manifest(text: str, source: str = "<manifest>") -> ExtensionIdentity:
    """Build an ``ExtensionIdentity`` from the ``[package]`` table of a TOML document."""
    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestMalformed(f"Could not parse {source}: {exc}") from exc

    package = document.get("package")
    if not isinstance(package, dict):
        raise ManifestIncomplete(f"{source} has no [package] table", field="package")

    fields: dict[str, Any] = {}
    for key in _REQUIRED_FIELDS:
        value = package.get(key)
        if not isinstance(value, str) or not value:
            raise ManifestIncomplete(f"{source}: invalid or missing package.{key} entry", field=key)
        fields[key] = value

    try:
        return ExtensionIdentity(**fields)
    except ValidationError as exc:
        error = exc.errors()[0]
        raise ManifestMalformed(f"{source}: package.{error['loc'][0]}: {error['msg']}") from exc


def read_extension_identity(manifest_path: Path) -> ExtensionIdentity:
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestUnreadable(f"Could not read manifest {manifest_path}: {exc}") from exc

    identity = parse_manifest(text, source=str(manifest_path))
    logger.info("Extension %s %s from %s", identity.name, identity.version, manifest_path)
    return identity
