"""Capabilities shared by every directory and file descriptor.

The extraction pipeline only needs to know that a descriptor *has a path*,
so any resource kind can be handled the same way: build the containing
directory, then the file within it.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from apiops.artifacts.path import ArtifactPath


@runtime_checkable
class ArtifactDirectory(Protocol):
    """A directory in the artifact tree."""

    @property
    def path(self) -> ArtifactPath: ...


@runtime_checkable
class ArtifactFile(Protocol):
    """A file in the artifact tree."""

    @property
    def path(self) -> ArtifactPath: ...
