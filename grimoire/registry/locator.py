"""Mapping between package identities and registry directories.

This module converts ``PackageIdentity`` values to registry entry paths and
back, and enumerates every entry in a registry tree. An entry is any directory
at least two levels below the root that directly contains ``grimoire.json``;
depth alone never makes a directory an entry.
"""

import logging
from collections.abc import Iterator
from pathlib import Path, PurePath

from grimoire.registry.errors import AmbiguousPathError
from grimoire.registry.identity import SEPARATOR, PackageIdentity, check_segment, is_slug_safe

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "grimoire.json"


def to_path(identity: PackageIdentity) -> str:
    """Build the registry entry path for an identity.

    Args:
        identity: Package identity

    Returns:
        Entry path such as "effect-ts/effect/sql"

    Raises:
        InvalidIdentityError: If any segment is empty, "."/".." or contains a
            path separator
    """
    for segment in identity.segments:
        check_segment(segment)
    return SEPARATOR.join(identity.segments)


def from_path(relative_path: str | PurePath) -> PackageIdentity:
    """Split a registry entry path back into a package identity.

    Args:
        relative_path: Path relative to the registry root, either a string
                       using "/" or a PurePath

    Returns:
        PackageIdentity with owner, repo and any remaining segments as path

    Raises:
        AmbiguousPathError: If the path is absolute or has fewer than two
                            segments
        InvalidIdentityError: If a segment is not slug-safe
    """
    if isinstance(relative_path, PurePath):
        if relative_path.is_absolute():
            raise AmbiguousPathError(str(relative_path), "path must be relative to the registry root")
        segments = list(relative_path.parts)
    else:
        text = str(relative_path)
        if text.startswith(SEPARATOR):
            raise AmbiguousPathError(text, "path must be relative to the registry root")
        if text.endswith(SEPARATOR):
            text = text[: -len(SEPARATOR)]
        segments = text.split(SEPARATOR) if text else []

    if len(segments) < 2:
        raise AmbiguousPathError(
            str(relative_path), f"expected owner/repo[/path...], got {len(segments)} segment(s)"
        )

    owner, repo, *path = segments
    return PackageIdentity(owner=owner, repo=repo, path=tuple(path))


def entry_dir(registry_root: Path, identity: PackageIdentity) -> Path:
    """Resolve the on-disk directory of an entry under ``registry_root``."""
    return Path(registry_root).joinpath(*to_path(identity).split(SEPARATOR))


def enumerate_entries(registry_root: Path) -> Iterator[PackageIdentity]:
    """Walk a registry tree and yield every entry identity.

    The walk is restartable: each call re-reads the filesystem. Directories
    are visited in sorted name order, hidden and non-slug-safe directories are
    skipped, and symlinked directories are not followed.

    Args:
        registry_root: Directory holding ``<owner>/<repo>/...`` entries

    Yields:
        PackageIdentity for each directory that directly holds grimoire.json
    """
    root = Path(registry_root)
    if not root.is_dir():
        logger.warning(f"Registry root not found: {root}")
        return

    for misplaced in (root / MANIFEST_FILENAME, *root.glob(f"*/{MANIFEST_FILENAME}")):
        if misplaced.is_file():
            logger.warning(f"Ignoring {misplaced}: entries must be at least owner/repo deep")

    yield from _walk(root, ())


def _walk(directory: Path, segments: tuple[str, ...]) -> Iterator[PackageIdentity]:
    if len(segments) >= 2 and (directory / MANIFEST_FILENAME).is_file():
        owner, repo, *path = segments
        yield PackageIdentity(owner=owner, repo=repo, path=tuple(path))

    try:
        children = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.warning(f"Cannot list {directory}: {e}")
        return

    for child in children:
        if child.name.startswith(".") or child.is_symlink() or not child.is_dir():
            continue
        if not is_slug_safe(child.name):
            logger.warning(f"Skipping directory with unsafe name: {child}")
            continue
        yield from _walk(child, (*segments, child.name))
