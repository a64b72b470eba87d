"""Shared fixtures for building grimoire registry trees on disk."""

import json
from pathlib import Path

import pytest
import yaml


def write_manifest(entry_dir: Path, data: dict) -> Path:
    """Write grimoire.json, creating the entry directory."""
    entry_dir.mkdir(parents=True, exist_ok=True)
    manifest_path = entry_dir / "grimoire.json"
    manifest_path.write_text(json.dumps(data, indent=2) + "\n")
    return manifest_path


def write_topic(topics_dir: Path, filename: str, body: str = "# Heading\n\nBody text.\n", **fields) -> Path:
    """Write a topic file with the given frontmatter fields."""
    topics_dir.mkdir(parents=True, exist_ok=True)
    topic_path = topics_dir / filename
    frontmatter = yaml.safe_dump(fields, sort_keys=False)
    topic_path.write_text(f"---\n{frontmatter}---\n\n{body}")
    return topic_path


def manifest_for(entry_path: str, **overrides) -> dict:
    """Build a valid manifest dict for an entry path; None overrides drop the key."""
    owner, repo, *sub_path = entry_path.split("/")
    data = {
        "name": (sub_path or [repo])[-1],
        "description": f"Knowledge about {entry_path}",
        "version": "1.0.0",
        "github": f"{owner}/{repo}",
        "sourceType": "github",
        "topicsDir": "topics",
    }
    if sub_path:
        data["path"] = "/".join(["packages", *sub_path])
    for key, value in overrides.items():
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
    return data


@pytest.fixture
def registry_root(tmp_path):
    """Create an empty registry root directory."""
    root = tmp_path / "packages"
    root.mkdir()
    return root


@pytest.fixture
def make_entry(registry_root):
    """Factory creating a valid entry with ``topics`` topic files."""

    def _make(entry_path: str, topics: int = 5, **manifest_overrides) -> Path:
        entry_dir = registry_root.joinpath(*entry_path.split("/"))
        data = manifest_for(entry_path, **manifest_overrides)
        write_manifest(entry_dir, data)
        topics_dir = entry_dir / data.get("topicsDir", "topics")
        for i in range(topics):
            write_topic(
                topics_dir,
                f"{i:02d}-topic-{i}.md",
                title=f"Topic {i}",
                slug=f"topic-{i}",
                description=f"Description of topic {i}",
                order=i,
                category="basics" if i < 3 else "advanced",
            )
        return entry_dir

    return _make


@pytest.fixture
def topic_writer():
    """Expose write_topic to tests."""
    return write_topic


@pytest.fixture
def manifest_writer():
    """Expose write_manifest to tests, taking an entry path and manifest overrides."""

    def _write(entry_dir: Path, entry_path: str, **overrides) -> Path:
        return write_manifest(entry_dir, manifest_for(entry_path, **overrides))

    return _write
