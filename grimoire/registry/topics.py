"""Topic documents: markdown files with YAML frontmatter.

Frontmatter is parsed with python-frontmatter; the markdown body is kept as
raw text and never interpreted.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import frontmatter
import yaml

from grimoire.registry.errors import TopicSchemaError

DEFAULT_TOPIC_EXTENSIONS = (".md",)

REQUIRED_STRING_FIELDS = ("title", "slug", "description", "category")


@dataclass(frozen=True)
class Topic:
    """One topic document.

    Attributes:
        title: Display title
        slug: Address of the topic, unique within a grimoire
        description: One-line summary
        order: Sort position; need not be contiguous
        category: Free-form grouping label
        tags: Optional set of tags
        related_files: Optional source files the topic refers to
        body: Raw markdown after the frontmatter block
        source: File the topic was read from
    """

    title: str
    slug: str
    description: str
    order: int
    category: str
    body: str
    source: Path
    tags: frozenset[str] | None = None
    related_files: tuple[str, ...] | None = None

    @property
    def sort_key(self) -> tuple[int, str, str]:
        # File name only breaks ties between duplicate slugs
        return (self.order, self.slug, self.source.name)

    def to_dict(self, include_body: bool = False) -> dict[str, Any]:
        """Convert topic to dictionary using frontmatter key names."""
        result: dict[str, Any] = {
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "order": self.order,
            "category": self.category,
        }
        if self.tags is not None:
            result["tags"] = sorted(self.tags)
        if self.related_files is not None:
            result["relatedFiles"] = list(self.related_files)
        if include_body:
            result["body"] = self.body
        return result


def list_topic_files(
    topics_dir: Path, extensions: tuple[str, ...] = DEFAULT_TOPIC_EXTENSIONS
) -> list[Path]:
    """List the markdown files directly inside a topics directory.

    Args:
        topics_dir: Directory to scan (subdirectories are not searched)
        extensions: Recognized suffixes, matched case-insensitively

    Returns:
        Sorted list of topic file paths (empty if topics_dir doesn't exist)
    """
    if not topics_dir.is_dir():
        return []

    suffixes = {ext.lower() for ext in extensions}
    return sorted(
        (item for item in topics_dir.iterdir() if item.is_file() and item.suffix.lower() in suffixes),
        key=lambda p: p.name,
    )


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def decode_topic(path: Path) -> tuple[Topic | None, list[TopicSchemaError]]:
    """Parse one topic file and check its frontmatter.

    Args:
        path: Markdown file

    Returns:
        Tuple of (topic, errors). topic is None whenever errors is non-empty;
        every bad field of the file is reported, not just the first.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError) as e:
        return None, [TopicSchemaError(path, "frontmatter", f"cannot be read: {e}")]

    if not frontmatter.checks(text):
        return None, [TopicSchemaError(path, "frontmatter", "block is missing")]

    try:
        post = frontmatter.loads(text)
    except yaml.YAMLError as e:
        return None, [TopicSchemaError(path, "frontmatter", f"is not valid YAML: {e}")]

    meta = post.metadata
    errors: list[TopicSchemaError] = []

    for name in REQUIRED_STRING_FIELDS:
        value = meta.get(name)
        if name not in meta:
            errors.append(TopicSchemaError(path, name, "is required"))
        elif not isinstance(value, str):
            errors.append(TopicSchemaError(path, name, f"must be a string, got {type(value).__name__}"))
        elif not value.strip():
            errors.append(TopicSchemaError(path, name, "cannot be empty"))

    order = meta.get("order")
    if "order" not in meta:
        errors.append(TopicSchemaError(path, "order", "is required"))
    elif isinstance(order, bool) or not isinstance(order, int):
        errors.append(TopicSchemaError(path, "order", f"must be an integer, got {type(order).__name__}"))

    tags = meta.get("tags")
    if tags is not None and not _is_string_list(tags):
        errors.append(TopicSchemaError(path, "tags", "must be a list of strings"))

    related_files = meta.get("relatedFiles")
    if related_files is not None and not _is_string_list(related_files):
        errors.append(TopicSchemaError(path, "relatedFiles", "must be a list of strings"))

    if errors:
        return None, errors

    topic = Topic(
        title=meta["title"],
        slug=meta["slug"],
        description=meta["description"],
        order=order,
        category=meta["category"],
        body=post.content,
        source=path,
        tags=frozenset(tags) if tags is not None else None,
        related_files=tuple(related_files) if related_files is not None else None,
    )
    return topic, []


def sort_topics(topics: list[Topic]) -> list[Topic]:
    """Sort topics by order, then slug."""
    return sorted(topics, key=lambda t: t.sort_key)
