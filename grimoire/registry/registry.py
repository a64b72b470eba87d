"""Grimoire registry index.

This module provides the GrimoireRegistry class for enumerating, looking up
and validating the entries of a registry tree.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from grimoire.registry.identity import PackageIdentity
from grimoire.registry.locator import enumerate_entries, from_path
from grimoire.registry.models import Grimoire, ValidationReport
from grimoire.registry.topics import DEFAULT_TOPIC_EXTENSIONS
from grimoire.registry.validator import MIN_TOPICS, load_grimoire, validate

logger = logging.getLogger(__name__)


class GrimoireRegistry:
    """Index of the entries in one registry tree.

    The index holds identities only. Grimoires are validated from disk on
    every call, so edits to an entry are picked up without a refresh; new or
    removed entries need refresh().

    Attributes:
        registry_root: Root directory of the registry tree
        entries: Dictionary mapping entry paths to identities
    """

    def __init__(
        self,
        registry_root: Path,
        *,
        min_topics: int = MIN_TOPICS,
        topic_extensions: tuple[str, ...] = DEFAULT_TOPIC_EXTENSIONS,
    ):
        """Initialize registry index.

        Args:
            registry_root: Root directory of the registry tree
            min_topics: Minimum number of topic files per entry
            topic_extensions: Recognized topic file suffixes
        """
        self.registry_root = Path(registry_root)
        self.min_topics = min_topics
        self.topic_extensions = tuple(topic_extensions)
        self.entries: dict[str, PackageIdentity] = {}
        self.refresh()

    def refresh(self) -> None:
        """Re-enumerate the registry tree and rebuild the index."""
        self.entries = {
            identity.entry_path: identity for identity in enumerate_entries(self.registry_root)
        }
        logger.debug(f"Indexed {len(self.entries)} entries under {self.registry_root}")

    def _identity(self, key: PackageIdentity | str) -> PackageIdentity:
        if isinstance(key, PackageIdentity):
            return key
        return from_path(key)

    def list_entries(self) -> list[PackageIdentity]:
        """List all indexed entries, sorted by entry path."""
        return [self.entries[path] for path in sorted(self.entries)]

    def has_entry(self, key: PackageIdentity | str) -> bool:
        """Check if an entry is indexed.

        Args:
            key: PackageIdentity or entry path (e.g. "effect-ts/effect/sql")
        """
        return self._identity(key).entry_path in self.entries

    def count(self) -> int:
        return len(self.entries)

    def validate(self, key: PackageIdentity | str) -> ValidationReport:
        """Validate one entry.

        The entry does not have to be indexed; a path without grimoire.json
        is reported as a missing manifest.
        """
        return validate(
            self.registry_root,
            self._identity(key),
            min_topics=self.min_topics,
            topic_extensions=self.topic_extensions,
        )

    def load(self, key: PackageIdentity | str, strict: bool = False) -> Grimoire:
        """Load one entry as a Grimoire.

        Raises:
            ManifestMissingError: If the entry has no grimoire.json
            ManifestParseError: If grimoire.json cannot be parsed
            GrimoireValidationError: If strict and the entry has violations
        """
        return load_grimoire(
            self.registry_root,
            self._identity(key),
            strict=strict,
            min_topics=self.min_topics,
            topic_extensions=self.topic_extensions,
        )

    def validate_all(self, workers: int = 1) -> list[ValidationReport]:
        """Validate every indexed entry.

        Entries are independent, so they can be checked in parallel.

        Args:
            workers: Number of worker threads (1 = sequential)

        Returns:
            One ValidationReport per entry, in entry-path order
        """
        identities = self.list_entries()
        if workers <= 1 or len(identities) <= 1:
            return [self.validate(identity) for identity in identities]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.validate, identities))
