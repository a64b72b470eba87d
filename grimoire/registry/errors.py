"""Registry error taxonomy.

Locator errors are raised and abort the single operation. Validator findings
are ``RegistryViolation`` instances: the fatal ones (missing or unparseable
manifest) stop validation of an entry, the rest are accumulated so one pass
reports everything wrong with it.
"""

from pathlib import Path
from typing import Any

# ============================================================================
# Base classes
# ============================================================================


class GrimoireError(Exception):
    """Base exception for grimoire registry errors."""


class LocatorError(GrimoireError):
    """Identity <-> registry path mapping failures."""


class RegistryViolation(GrimoireError):
    """A problem found while validating one registry entry.

    Attributes:
        code: Stable machine-readable identifier (e.g. "manifest-missing")
        fatal: True when no Grimoire can be built after this violation
        path: File or directory the violation refers to
    """

    code = "violation"
    fatal = False

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def to_dict(self) -> dict[str, Any]:
        """Convert violation to a JSON-serialisable dictionary."""
        result: dict[str, Any] = {
            "code": self.code,
            "fatal": self.fatal,
            "message": self.message,
        }
        if self.path is not None:
            result["path"] = str(self.path)
        return result


# ============================================================================
# Locator
# ============================================================================


class InvalidIdentityError(LocatorError):
    """A package identity segment is empty, relative or not slug-safe."""

    def __init__(self, segment: str, reason: str):
        super().__init__(f"Invalid identity segment {segment!r}: {reason}")
        self.segment = segment
        self.reason = reason


class AmbiguousPathError(LocatorError):
    """A registry path cannot be split into owner/repo[/path...]."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Ambiguous registry path {path!r}: {reason}")
        self.path = path
        self.reason = reason


# ============================================================================
# Validator: fatal
# ============================================================================


class ManifestMissingError(RegistryViolation):
    """The entry directory has no grimoire.json."""

    code = "manifest-missing"
    fatal = True

    def __init__(self, path: Path):
        super().__init__(f"Required file missing: {path.name}", path)


class ManifestParseError(RegistryViolation):
    """grimoire.json cannot be decoded into a JSON object."""

    code = "manifest-parse"
    fatal = True

    def __init__(self, path: Path, detail: str):
        super().__init__(f"Cannot parse {path.name}: {detail}", path)
        self.detail = detail


# ============================================================================
# Validator: accumulated
# ============================================================================


class ManifestSchemaError(RegistryViolation):
    """A manifest field is missing or invalid."""

    code = "manifest-schema"

    def __init__(self, path: Path, field: str, reason: str):
        super().__init__(f"Manifest field '{field}' {reason}", path)
        self.field = field
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["field"] = self.field
        return result


class IdentityMismatchError(RegistryViolation):
    """Manifest claims a different identity than its registry location."""

    code = "identity-mismatch"

    def __init__(self, path: Path, field: str, expected: Any, actual: Any):
        super().__init__(f"Manifest field '{field}' is {actual!r}, expected {expected!r}", path)
        self.field = field
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result.update({"field": self.field, "expected": self.expected, "actual": self.actual})
        return result


class InsufficientTopicsError(RegistryViolation):
    """The topics directory holds fewer topic files than required."""

    code = "insufficient-topics"

    def __init__(self, path: Path, count: int, minimum: int):
        super().__init__(f"Found {count} topic file(s), at least {minimum} required", path)
        self.count = count
        self.minimum = minimum

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result.update({"count": self.count, "minimum": self.minimum})
        return result


class TopicSchemaError(RegistryViolation):
    """A topic file's frontmatter is missing or has a bad field."""

    code = "topic-schema"

    def __init__(self, path: Path, field: str, reason: str):
        super().__init__(f"{path.name}: '{field}' {reason}", path)
        self.field = field
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["field"] = self.field
        return result


class DuplicateSlugError(RegistryViolation):
    """Two or more topics in one entry share a slug."""

    code = "duplicate-slug"

    def __init__(self, slug: str, files: list[Path]):
        names = ", ".join(f.name for f in files)
        super().__init__(f"Slug {slug!r} is used by {len(files)} topics: {names}", files[0].parent)
        self.slug = slug
        self.files = files

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result.update({"slug": self.slug, "files": [str(f) for f in self.files]})
        return result


class GrimoireValidationError(GrimoireError):
    """Raised by strict loading when an entry has accumulated violations."""

    def __init__(self, violations: list[RegistryViolation]):
        lines = "\n".join(f"  - {v}" for v in violations)
        super().__init__(f"{len(violations)} validation error(s):\n{lines}")
        self.violations = violations
