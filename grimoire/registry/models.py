"""Validated grimoire data models.

This module provides the Grimoire aggregate returned by the validator and the
ValidationReport wrapping it.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from grimoire.registry.errors import RegistryViolation
from grimoire.registry.identity import PackageIdentity
from grimoire.registry.manifest import GrimoireManifest
from grimoire.registry.topics import Topic


@dataclass(frozen=True)
class Grimoire:
    """A validated registry entry: manifest plus ordered topics.

    Attributes:
        identity: Identity derived from the entry's registry location
        manifest: Decoded grimoire.json
        topics: Topics sorted by (order, slug)
        directory: Entry directory the grimoire was read from
        warnings: Non-fatal violations found during validation
    """

    identity: PackageIdentity
    manifest: GrimoireManifest
    topics: tuple[Topic, ...]
    directory: Path
    warnings: tuple[RegistryViolation, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.warnings

    @property
    def slugs(self) -> list[str]:
        return [topic.slug for topic in self.topics]

    def get_topic(self, key: str | int) -> Topic:
        """Look up a topic by slug or by 1-based position.

        Args:
            key: Topic slug (e.g. "overview"), or a position as an int or a
                 string of digits

        Returns:
            Matching Topic (first in order if the slug is duplicated)

        Raises:
            KeyError: If no topic matches
        """
        for topic in self.topics:
            if topic.slug == key:
                return topic

        if isinstance(key, int) or (isinstance(key, str) and key.isdigit()):
            position = int(key)
            if 1 <= position <= len(self.topics):
                return self.topics[position - 1]

        raise KeyError(f"No topic {key!r} in {self.identity}")

    def categories(self) -> list[str]:
        """Categories in order of first appearance."""
        return list(dict.fromkeys(topic.category for topic in self.topics))

    def topics_by_category(self) -> dict[str, list[Topic]]:
        grouped: dict[str, list[Topic]] = {}
        for topic in self.topics:
            grouped.setdefault(topic.category, []).append(topic)
        return grouped


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of validating one registry entry.

    Attributes:
        identity: Entry that was validated
        grimoire: Validated Grimoire, or None after a fatal violation
        errors: The fatal violation alone, or the grimoire's warnings
    """

    identity: PackageIdentity
    grimoire: Grimoire | None
    errors: tuple[RegistryViolation, ...] = ()

    @property
    def fatal(self) -> bool:
        return self.grimoire is None

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert report to a JSON-serialisable dictionary."""
        result: dict[str, Any] = {
            "entry": self.identity.entry_path,
            "ok": self.ok,
            "fatal": self.fatal,
            "errors": [error.to_dict() for error in self.errors],
        }
        if self.grimoire is not None:
            result["name"] = self.grimoire.manifest.name
            result["topics"] = self.grimoire.slugs
        return result
