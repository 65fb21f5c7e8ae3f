"""The addressing primitive of the artifact tree."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ArtifactPath:
    """An immutable sequence of path segments.

    Two paths are equal when their segments are equal. :meth:`append`
    never validates the segment; names are validated by the types that
    produce them (see :class:`~apiops.artifacts.api.ApiName`).

    Example::

        root = ArtifactPath.from_root("/tmp/apim")
        assert root.append("apis").to_path() == Path("/tmp/apim/apis")
    """

    segments: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.segments:
            raise ValueError("An artifact path needs at least one segment.")

    @classmethod
    def from_root(cls, root: str | Path) -> ArtifactPath:
        """Build a path from a root folder on disk."""
        parts = Path(root).parts
        if not parts:
            raise ValueError(f"'{root}' is not a usable root folder.")
        return cls(tuple(parts))

    def append(self, segment: str) -> ArtifactPath:
        return ArtifactPath(self.segments + (segment,))

    @property
    def name(self) -> str:
        """The last segment."""
        return self.segments[-1]

    def to_path(self) -> Path:
        return Path(*self.segments)

    def __str__(self) -> str:
        return str(self.to_path())
