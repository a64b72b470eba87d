"""Grimoire entry validation.

This module validates one registry entry: its grimoire.json manifest, its
topic files and the cross-file rules between them. Problems are accumulated
rather than raised so a single run reports everything wrong with an entry;
only a missing or unparseable manifest stops validation early.
"""

import logging
from collections import defaultdict
from pathlib import Path, PurePosixPath

from grimoire.registry.errors import (
    DuplicateSlugError,
    GrimoireValidationError,
    IdentityMismatchError,
    InsufficientTopicsError,
    RegistryViolation,
)
from grimoire.registry.identity import PackageIdentity
from grimoire.registry.locator import MANIFEST_FILENAME, entry_dir
from grimoire.registry.manifest import (
    SOURCE_TYPES,
    GrimoireManifest,
    decode_manifest,
    read_manifest_data,
)
from grimoire.registry.models import Grimoire, ValidationReport
from grimoire.registry.topics import (
    DEFAULT_TOPIC_EXTENSIONS,
    Topic,
    decode_topic,
    list_topic_files,
    sort_topics,
)

logger = logging.getLogger(__name__)

MIN_TOPICS = 5


def _check_identity(
    manifest: GrimoireManifest,
    identity: PackageIdentity,
    manifest_path: Path,
    github_valid: bool,
) -> list[RegistryViolation]:
    errors: list[RegistryViolation] = []

    if manifest.source_type and manifest.source_type not in SOURCE_TYPES:
        errors.append(
            IdentityMismatchError(
                manifest_path, "sourceType", sorted(SOURCE_TYPES), manifest.source_type
            )
        )

    if github_valid and manifest.github != identity.github:
        errors.append(IdentityMismatchError(manifest_path, "github", identity.github, manifest.github))

    # The registry directory is authoritative for addressing; path is descriptive
    if manifest.path is not None and identity.path:
        declared = PurePosixPath(manifest.path).parts
        if declared[-len(identity.path) :] != identity.path:
            logger.warning(
                f"{identity}: manifest path {manifest.path!r} does not match "
                f"registry sub-path {'/'.join(identity.path)!r}"
            )

    return errors


def _check_duplicate_slugs(topics: list[Topic]) -> list[DuplicateSlugError]:
    by_slug: dict[str, list[Path]] = defaultdict(list)
    for topic in topics:
        by_slug[topic.slug].append(topic.source)

    return [
        DuplicateSlugError(slug, sorted(files, key=lambda p: p.name))
        for slug, files in sorted(by_slug.items())
        if len(files) > 1
    ]


def validate(
    registry_root: Path,
    identity: PackageIdentity,
    *,
    min_topics: int = MIN_TOPICS,
    topic_extensions: tuple[str, ...] = DEFAULT_TOPIC_EXTENSIONS,
) -> ValidationReport:
    """Validate one registry entry.

    Checks:
    - grimoire.json exists and parses (fatal otherwise)
    - manifest fields match the schema
    - sourceType is recognized and github matches the entry's owner/repo
    - the topics directory holds at least ``min_topics`` markdown files
    - every topic has well-formed frontmatter
    - no two topics share a slug

    Args:
        registry_root: Root directory of the registry tree
        identity: Entry to validate
        min_topics: Minimum number of topic files
        topic_extensions: Recognized topic file suffixes

    Returns:
        ValidationReport; its grimoire is None only after a fatal violation

    Raises:
        InvalidIdentityError: If the identity cannot be mapped to a path
    """
    directory = entry_dir(registry_root, identity)
    manifest_path = directory / MANIFEST_FILENAME

    try:
        data = read_manifest_data(directory)
    except RegistryViolation as e:
        logger.debug(f"{identity}: {e}")
        return ValidationReport(identity=identity, grimoire=None, errors=(e,))

    warnings: list[RegistryViolation] = []

    manifest, schema_errors = decode_manifest(data, manifest_path)
    warnings.extend(schema_errors)
    github_valid = not any(error.field == "github" for error in schema_errors)
    warnings.extend(_check_identity(manifest, identity, manifest_path, github_valid))

    topics_dir = directory.joinpath(*PurePosixPath(manifest.topics_dir).parts)
    topic_files = list_topic_files(topics_dir, topic_extensions)
    if len(topic_files) < min_topics:
        warnings.append(InsufficientTopicsError(topics_dir, len(topic_files), min_topics))

    topics: list[Topic] = []
    for topic_file in topic_files:
        topic, topic_errors = decode_topic(topic_file)
        warnings.extend(topic_errors)
        if topic is not None:
            topics.append(topic)

    warnings.extend(_check_duplicate_slugs(topics))

    grimoire = Grimoire(
        identity=identity,
        manifest=manifest,
        topics=tuple(sort_topics(topics)),
        directory=directory,
        warnings=tuple(warnings),
    )
    if warnings:
        logger.debug(f"{identity}: {len(warnings)} validation error(s)")
    else:
        logger.debug(f"{identity}: valid, {len(topics)} topics")

    return ValidationReport(identity=identity, grimoire=grimoire, errors=grimoire.warnings)


def load_grimoire(
    registry_root: Path,
    identity: PackageIdentity,
    *,
    strict: bool = False,
    min_topics: int = MIN_TOPICS,
    topic_extensions: tuple[str, ...] = DEFAULT_TOPIC_EXTENSIONS,
) -> Grimoire:
    """Validate an entry and return its Grimoire.

    Args:
        registry_root: Root directory of the registry tree
        identity: Entry to load
        strict: Raise if any non-fatal violation was found
        min_topics: Minimum number of topic files
        topic_extensions: Recognized topic file suffixes

    Returns:
        Grimoire (carrying its warnings when strict is False)

    Raises:
        ManifestMissingError: If grimoire.json doesn't exist
        ManifestParseError: If grimoire.json cannot be parsed
        GrimoireValidationError: If strict and any violation was found
    """
    report = validate(
        registry_root, identity, min_topics=min_topics, topic_extensions=topic_extensions
    )
    if report.grimoire is None:
        raise report.errors[0]
    if strict and report.errors:
        raise GrimoireValidationError(list(report.errors))
    return report.grimoire
