"""The root of the artifact tree."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from apiops.artifacts.path import ArtifactPath


@dataclass(frozen=True)
class ServiceDirectory:
    """Root folder holding the extracted configuration of one service."""

    path: ArtifactPath

    @classmethod
    def from_folder(cls, folder: str | Path) -> ServiceDirectory:
        """Create the service directory for *folder*, resolved to an absolute path."""
        return cls(ArtifactPath.from_root(Path(folder).expanduser().resolve()))
