"""Tests for the grimoire registry index."""

import pytest

from grimoire.registry.errors import (
    AmbiguousPathError,
    GrimoireValidationError,
    InsufficientTopicsError,
    ManifestMissingError,
)
from grimoire.registry.identity import PackageIdentity
from grimoire.registry.registry import GrimoireRegistry


@pytest.fixture
def populated_root(registry_root, make_entry):
    """Create a registry with a monorepo and a standalone entry."""
    make_entry("effect-ts/effect")
    make_entry("effect-ts/effect/sql")
    make_entry("effect-ts/effect/ai")
    make_entry("tim-smart/effect-atom", topics=3)
    return registry_root


class TestGrimoireRegistry:
    """Test GrimoireRegistry class."""

    def test_initialization_with_empty_directory(self, registry_root):
        registry = GrimoireRegistry(registry_root)
        assert registry.count() == 0
        assert registry.list_entries() == []

    def test_initialization_with_nonexistent_directory(self, tmp_path):
        registry = GrimoireRegistry(tmp_path / "nope")
        assert registry.count() == 0

    def test_list_entries_sorted(self, populated_root):
        registry = GrimoireRegistry(populated_root)

        assert [identity.entry_path for identity in registry.list_entries()] == [
            "effect-ts/effect",
            "effect-ts/effect/ai",
            "effect-ts/effect/sql",
            "tim-smart/effect-atom",
        ]

    def test_has_entry(self, populated_root):
        registry = GrimoireRegistry(populated_root)

        assert registry.has_entry("effect-ts/effect/sql")
        assert registry.has_entry(PackageIdentity("effect-ts", "effect", ("ai",)))
        assert not registry.has_entry("effect-ts/effect/http")

    def test_has_entry_rejects_ambiguous_key(self, populated_root):
        registry = GrimoireRegistry(populated_root)
        with pytest.raises(AmbiguousPathError):
            registry.has_entry("effect-ts")

    def test_refresh_picks_up_new_entries(self, populated_root, make_entry):
        registry = GrimoireRegistry(populated_root)
        assert registry.count() == 4

        make_entry("zio/zio")
        assert registry.count() == 4

        registry.refresh()
        assert registry.count() == 5
        assert registry.has_entry("zio/zio")

    def test_load_reads_fresh_from_disk(self, populated_root):
        registry = GrimoireRegistry(populated_root)
        first = registry.load("effect-ts/effect")

        (populated_root / "effect-ts" / "effect" / "topics" / "00-topic-0.md").unlink()
        second = registry.load("effect-ts/effect")

        assert len(first.topics) == 5
        assert len(second.topics) == 4

    def test_load_strict(self, populated_root):
        registry = GrimoireRegistry(populated_root)
        with pytest.raises(GrimoireValidationError):
            registry.load("tim-smart/effect-atom", strict=True)

    def test_load_unindexed_entry(self, populated_root):
        registry = GrimoireRegistry(populated_root)
        with pytest.raises(ManifestMissingError):
            registry.load("effect-ts/effect/http")

    def test_min_topics_applies(self, populated_root):
        registry = GrimoireRegistry(populated_root, min_topics=3)
        assert registry.validate("tim-smart/effect-atom").ok

    def test_validate_all_sequential(self, populated_root):
        registry = GrimoireRegistry(populated_root)

        reports = registry.validate_all()

        assert [r.identity.entry_path for r in reports] == [
            identity.entry_path for identity in registry.list_entries()
        ]
        failed = [r for r in reports if not r.ok]
        assert len(failed) == 1
        assert isinstance(failed[0].errors[0], InsufficientTopicsError)

    def test_validate_all_parallel_matches_sequential(self, populated_root):
        registry = GrimoireRegistry(populated_root)

        sequential = registry.validate_all(workers=1)
        parallel = registry.validate_all(workers=4)

        assert [r.to_dict() for r in parallel] == [r.to_dict() for r in sequential]
