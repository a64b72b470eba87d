"""Grimoire registry core.

This module maps package identities to registry directories and validates
the grimoires (manifest plus topic documents) found there.
"""

from grimoire.registry.errors import (
    AmbiguousPathError,
    DuplicateSlugError,
    GrimoireError,
    GrimoireValidationError,
    IdentityMismatchError,
    InsufficientTopicsError,
    InvalidIdentityError,
    LocatorError,
    ManifestMissingError,
    ManifestParseError,
    ManifestSchemaError,
    RegistryViolation,
    TopicSchemaError,
)
from grimoire.registry.identity import PackageIdentity
from grimoire.registry.locator import entry_dir, enumerate_entries, from_path, to_path
from grimoire.registry.manifest import (
    GrimoireManifest,
    decode_manifest,
    load_manifest,
)
from grimoire.registry.models import Grimoire, ValidationReport
from grimoire.registry.registry import GrimoireRegistry
from grimoire.registry.topics import Topic, decode_topic, list_topic_files, sort_topics
from grimoire.registry.validator import load_grimoire, validate

__all__ = [
    # Identity and location
    "PackageIdentity",
    "to_path",
    "from_path",
    "entry_dir",
    "enumerate_entries",
    # Manifest
    "GrimoireManifest",
    "decode_manifest",
    "load_manifest",
    # Topics
    "Topic",
    "decode_topic",
    "list_topic_files",
    "sort_topics",
    # Validation
    "Grimoire",
    "ValidationReport",
    "validate",
    "load_grimoire",
    # Registry
    "GrimoireRegistry",
    # Errors
    "GrimoireError",
    "LocatorError",
    "InvalidIdentityError",
    "AmbiguousPathError",
    "RegistryViolation",
    "ManifestMissingError",
    "ManifestParseError",
    "ManifestSchemaError",
    "IdentityMismatchError",
    "InsufficientTopicsError",
    "TopicSchemaError",
    "DuplicateSlugError",
    "GrimoireValidationError",
]
