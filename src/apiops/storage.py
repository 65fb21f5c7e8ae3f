"""Durable storage for the artifact tree.

:class:`Storage` is the capability the extractor writes through;
:class:`LocalStorage` implements it on the local file system. Writes
create intermediate directories and are atomic (temp file, then
``os.replace``), so a crashed run never leaves a half-written artifact
behind; files are simply overwritten on the next successful run.

:func:`write_document` and :func:`read_document` combine storage with the
canonical JSON text form of :mod:`apiops.codec.document`.
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from apiops.artifacts.base import ArtifactDirectory, ArtifactFile
from apiops.artifacts.path import ArtifactPath
from apiops.codec.document import Document, parse_document, serialize_document
from apiops.exceptions import StorageError


class Storage(ABC):
    """Byte-level access to artifact paths."""

    @abstractmethod
    def write(self, path: ArtifactPath, content: bytes) -> None:
        """Write *content* to *path*, creating parent directories as needed."""

    @abstractmethod
    def read(self, path: ArtifactPath) -> bytes:
        """Return the content of *path*."""

    @abstractmethod
    def exists(self, path: ArtifactPath) -> bool:
        """Return ``True`` if a file exists at *path*."""

    @abstractmethod
    def list_directories(self, path: ArtifactPath) -> list[str]:
        """Return the names of the sub-directories of *path*, sorted; empty if *path* is missing."""


class LocalStorage(Storage):
    """:class:`Storage` on the local file system.

    OS errors are re-raised as :class:`~apiops.exceptions.StorageError`.
    """

    def write(self, path: ArtifactPath, content: bytes) -> None:
        target = path.to_path()
        try:
            _atomic_write(target, content)
        except OSError as exc:
            raise StorageError(f"Cannot write {target}: {exc}") from exc

    def read(self, path: ArtifactPath) -> bytes:
        target = path.to_path()
        try:
            return target.read_bytes()
        except OSError as exc:
            raise StorageError(f"Cannot read {target}: {exc}") from exc

    def exists(self, path: ArtifactPath) -> bool:
        return path.to_path().is_file()

    def list_directories(self, path: ArtifactPath) -> list[str]:
        target = path.to_path()
        if not target.is_dir():
            return []
        try:
            return sorted(child.name for child in target.iterdir() if child.is_dir())
        except OSError as exc:
            raise StorageError(f"Cannot list {target}: {exc}") from exc


def _atomic_write(path: Path, data: bytes) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def write_document(storage: Storage, file: ArtifactFile, document: Document) -> None:
    """Write *document* to *file* in canonical JSON form."""
    storage.write(file.path, serialize_document(document))


def read_document(storage: Storage, file: ArtifactFile) -> Document:
    """Read and parse the JSON document stored in *file*.

    Raises:
        StorageError: If the file cannot be read.
        DecodeError: If the content is not a JSON object.
    """
    return parse_document(storage.read(file.path))


def list_child_names(storage: Storage, directory: ArtifactDirectory) -> list[str]:
    """Return the names of the sub-directories of *directory*."""
    return storage.list_directories(directory.path)
