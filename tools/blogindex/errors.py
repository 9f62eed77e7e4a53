"""Errors raised while building a site.

Every error aborts the build. Errors that can be pinned to a single post carry
its ``source`` so the build report can name the file to fix.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence


class BuildError(Exception):
    """Base exception for all blogindex errors."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.message = message
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class ConfigError(BuildError):
    """Raised when ``site.yml`` or CLI overrides are invalid."""


class MalformedFrontMatter(BuildError):
    """Front matter is absent, unterminated, not a mapping or missing a field."""


class InvalidDate(BuildError):
    """The ``date`` field is not a calendar date with time."""


class DuplicatePermalink(BuildError):
    def __init__(self, permalink: str, source: str, existing: str):
        self.permalink = permalink
        self.existing = existing
        super().__init__(
            f"permalink {permalink} already taken by {existing}", source
        )


class NotFound(BuildError, KeyError):
    def __init__(self, permalink: str):
        self.permalink = permalink
        BuildError.__init__(self, f"no post at {permalink}")

    def __str__(self) -> str:
        return self.message


class UnreadableSource(BuildError):
    """A source file could not be read or converted to text."""


class RepositoryFrozen(BuildError):
    pass


class DanglingReference(BuildError):
    def __init__(self, target: str, source: str, reason: str = "no such post"):
        self.target = target
        super().__init__(f"next: {target!r} does not resolve ({reason})", source)


class MultiplePredecessors(BuildError):
    def __init__(self, target: str, sources: Sequence[str]):
        self.target = target
        self.sources = tuple(sources)
        super().__init__(
            f"{target} is the next post of more than one post: "
            + ", ".join(self.sources)
        )


class CyclicSeries(BuildError):
    def __init__(self, cycle: Sequence[str]):
        self.cycle = tuple(cycle)
        super().__init__(
            "series does not terminate: "
            + " -> ".join(self.cycle + self.cycle[:1])
        )


class BuildFailed(BuildError):
    """Aggregate of every error met by one build stage."""

    def __init__(self, errors: Iterable[BuildError]):
        self.errors: List[BuildError] = list(errors)
        lines = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"build failed with {len(self.errors)} error(s):\n{lines}")


def raise_collected(errors: Sequence[BuildError]) -> None:
    """Raise the only error as itself, several as one ``BuildFailed``."""
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise BuildFailed(errors)
