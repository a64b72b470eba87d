"""Package identity data model.

A package identity is the GitHub ``owner/repo`` pair plus, for monorepo
sub-packages, an ordered tuple of sub-path segments.
"""

import re
from dataclasses import dataclass

from grimoire.registry.errors import InvalidIdentityError

SEPARATOR = "/"

_SLUG_PATTERN = re.compile(r"[A-Za-z0-9._-]+")


def check_segment(segment: str) -> None:
    """Check that a single identity segment is safe to use as a directory name.

    Args:
        segment: Owner, repo or sub-path segment

    Raises:
        InvalidIdentityError: If the segment is empty, "." or "..", contains a
            path separator, or has characters outside the GitHub slug set
    """
    if not isinstance(segment, str):
        raise InvalidIdentityError(repr(segment), "segment must be a string")
    if not segment:
        raise InvalidIdentityError(segment, "segment cannot be empty")
    if segment in (".", ".."):
        raise InvalidIdentityError(segment, "relative path segments are not allowed")
    if "/" in segment or "\\" in segment:
        raise InvalidIdentityError(segment, "segment cannot contain a path separator")
    if not _SLUG_PATTERN.fullmatch(segment):
        raise InvalidIdentityError(segment, "only letters, digits, '.', '_' and '-' are allowed")


def is_slug_safe(segment: str) -> bool:
    try:
        check_segment(segment)
    except InvalidIdentityError:
        return False
    return True


@dataclass(frozen=True)
class PackageIdentity:
    """Identity of one publishable grimoire.

    Attributes:
        owner: GitHub owner (e.g. "effect-ts")
        repo: GitHub repository (e.g. "effect")
        path: Sub-path segments for monorepo sub-packages (e.g. ("sql",))
    """

    owner: str
    repo: str
    path: tuple[str, ...] = ()

    def __post_init__(self):
        # Accept any sequence for path but store a tuple so identities hash
        object.__setattr__(self, "path", tuple(self.path))
        for segment in self.segments:
            check_segment(segment)

    @property
    def segments(self) -> tuple[str, ...]:
        return (self.owner, self.repo, *self.path)

    @property
    def github(self) -> str:
        """The ``owner/repo`` pair a manifest at this location must declare."""
        return f"{self.owner}{SEPARATOR}{self.repo}"

    @property
    def entry_path(self) -> str:
        return SEPARATOR.join(self.segments)

    @property
    def is_subpackage(self) -> bool:
        return bool(self.path)

    @classmethod
    def parse(cls, text: str) -> "PackageIdentity":
        """Parse an ``owner/repo[/path...]`` string.

        Raises:
            AmbiguousPathError: If fewer than two segments are given
            InvalidIdentityError: If any segment is not slug-safe
        """
        from grimoire.registry.locator import from_path

        return from_path(text)

    def __str__(self) -> str:
        return self.entry_path
