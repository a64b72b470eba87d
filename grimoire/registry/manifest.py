"""Grimoire manifest data model and operations.

This module provides the GrimoireManifest dataclass and functions for loading
``grimoire.json`` files and decoding them against the manifest schema.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from grimoire.registry.errors import (
    ManifestMissingError,
    ManifestParseError,
    ManifestSchemaError,
)
from grimoire.registry.locator import MANIFEST_FILENAME

DEFAULT_TOPICS_DIR = "topics"
SOURCE_TYPES = frozenset({"github"})

SEMVER_PATTERN = re.compile(r"\d+\.\d+\.\d+(-[0-9A-Za-z.-]+)?(\+[0-9A-Za-z.-]+)?")
GITHUB_PATTERN = re.compile(r"[A-Za-z0-9._-]+/[A-Za-z0-9._-]+")

_KNOWN_KEYS = frozenset(
    {"name", "description", "version", "github", "sourceType", "topicsDir", "path"}
)


@dataclass
class GrimoireManifest:
    """Decoded contents of grimoire.json.

    Attributes:
        name: Display and lookup name (e.g. "effect-sql")
        description: Human-readable description
        version: Semantic version (e.g. "1.2.0")
        github: Source repository as "owner/repo"
        source_type: Where the source lives; only "github" is recognized
        topics_dir: Directory holding topic markdown, relative to the entry
        path: Sub-path within the source repository (monorepo sub-packages only)
        extra: Unrecognized keys, preserved as authored
    """

    name: str
    description: str
    version: str
    github: str
    source_type: str = "github"
    topics_dir: str = DEFAULT_TOPICS_DIR
    path: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def owner(self) -> str:
        return self.github.partition("/")[0]

    @property
    def repo(self) -> str:
        return self.github.partition("/")[2]

    def to_dict(self) -> dict[str, Any]:
        """Convert manifest to dictionary using grimoire.json key names."""
        result: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "github": self.github,
        }
        if self.path is not None:
            result["path"] = self.path
        result["sourceType"] = self.source_type
        result["topicsDir"] = self.topics_dir
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GrimoireManifest":
        """Create manifest from an already-valid dictionary.

        Use decode_manifest() for untrusted input; this raises KeyError on a
        missing required field.
        """
        return cls(
            name=data["name"],
            description=data["description"],
            version=data["version"],
            github=data["github"],
            source_type=data.get("sourceType", "github"),
            topics_dir=data.get("topicsDir", DEFAULT_TOPICS_DIR),
            path=data.get("path"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )


def read_manifest_data(entry_dir: Path) -> dict[str, Any]:
    """Read and parse grimoire.json from an entry directory.

    Args:
        entry_dir: Registry entry directory

    Returns:
        Parsed JSON object

    Raises:
        ManifestMissingError: If grimoire.json doesn't exist
        ManifestParseError: If grimoire.json is unreadable, not valid JSON or
                            not a JSON object
    """
    manifest_path = entry_dir / MANIFEST_FILENAME
    if not manifest_path.is_file():
        raise ManifestMissingError(manifest_path)

    try:
        with open(manifest_path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        raise ManifestParseError(manifest_path, str(e)) from e

    if not isinstance(data, dict):
        raise ManifestParseError(
            manifest_path, f"top level must be an object, got {type(data).__name__}"
        )
    return data


def _check_relative_path(value: str) -> str | None:
    """Return why ``value`` is not a usable relative path, or None."""
    if not value.strip():
        return "cannot be empty"
    if value.startswith("/") or "\\" in value:
        return f"must be a relative POSIX path, got {value!r}"
    if ".." in PurePosixPath(value).parts:
        return f"cannot point outside the entry directory: {value!r}"
    return None


def decode_manifest(
    data: dict[str, Any], manifest_path: Path
) -> tuple[GrimoireManifest, list[ManifestSchemaError]]:
    """Decode a parsed grimoire.json against the manifest schema.

    Every missing or wrong-typed field yields one ManifestSchemaError. The
    returned manifest is always usable: fields that failed validation fall
    back to an empty string (or the default topics directory) so callers can
    keep checking the rest of the entry.

    Args:
        data: Parsed JSON object
        manifest_path: Path of grimoire.json, attached to each error

    Returns:
        Tuple of (manifest, errors); errors is empty if the manifest is valid
    """
    errors: list[ManifestSchemaError] = []

    def error(name: str, reason: str) -> None:
        errors.append(ManifestSchemaError(manifest_path, name, reason))

    def string_field(name: str, required: bool = True) -> str | None:
        if name not in data:
            if required:
                error(name, "is required")
            return None
        value = data[name]
        if not isinstance(value, str):
            error(name, f"must be a string, got {type(value).__name__}")
            return None
        if not value.strip():
            error(name, "cannot be empty")
            return None
        return value

    name = string_field("name")
    description = string_field("description")

    version = string_field("version")
    if version is not None and not SEMVER_PATTERN.fullmatch(version):
        error("version", f"is not a semantic version: {version!r}")
        version = None

    github = string_field("github")
    if github is not None and not GITHUB_PATTERN.fullmatch(github):
        error("github", f"must look like 'owner/repo', got {github!r}")
        github = None

    # Recognized values are checked against the entry location by the validator
    source_type = string_field("sourceType")

    topics_dir = string_field("topicsDir", required=False)
    if topics_dir is not None:
        problem = _check_relative_path(topics_dir)
        if problem:
            error("topicsDir", problem)
            topics_dir = None

    sub_path = string_field("path", required=False)
    if sub_path is not None:
        problem = _check_relative_path(sub_path)
        if problem:
            error("path", problem)
            sub_path = None

    manifest = GrimoireManifest(
        name=name or "",
        description=description or "",
        version=version or "",
        github=github or "",
        source_type=source_type or "",
        topics_dir=topics_dir or DEFAULT_TOPICS_DIR,
        path=sub_path,
        extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
    )
    return manifest, errors


def load_manifest(entry_dir: Path) -> GrimoireManifest:
    """Load and decode grimoire.json, raising on the first problem.

    Args:
        entry_dir: Registry entry directory

    Returns:
        Decoded GrimoireManifest

    Raises:
        ManifestMissingError: If grimoire.json doesn't exist
        ManifestParseError: If grimoire.json contains invalid JSON
        ManifestSchemaError: If a field is missing or has the wrong type
    """
    manifest_path = entry_dir / MANIFEST_FILENAME
    manifest, errors = decode_manifest(read_manifest_data(entry_dir), manifest_path)
    if errors:
        raise errors[0]
    return manifest
