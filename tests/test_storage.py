"""Tests for local artifact storage."""

from __future__ import annotations

from pathlib import Path

import pytest

from apiops.artifacts import ApiDirectory, ApiInformationFile, ApiName, ApisDirectory, ServiceDirectory
from apiops.exceptions import DecodeError, StorageError
from apiops.storage import LocalStorage, _atomic_write, list_child_names, read_document, write_document


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        _atomic_write(target, b"{}\n")
        assert target.read_bytes() == b"{}\n"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "apis" / "echo" / "apiInformation.json"
        _atomic_write(target, b"{}")
        assert target.exists()

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        target.write_bytes(b"old")
        _atomic_write(target, b"new")
        assert target.read_bytes() == b"new"

    def test_no_temp_files_left_on_success(self, tmp_path: Path) -> None:
        _atomic_write(tmp_path / "file.json", b"{}")
        assert [p.name for p in tmp_path.iterdir()] == ["file.json"]

    def test_no_temp_files_left_on_error(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def _fail(*args, **kwargs):  # noqa: ANN002, ANN003, ANN202
            raise OSError("disk full")

        monkeypatch.setattr("apiops.storage.os.replace", _fail)
        with pytest.raises(OSError):
            _atomic_write(tmp_path / "file.json", b"{}")
        assert list(tmp_path.iterdir()) == []


class TestLocalStorage:
    def test_write_and_read(self, storage: LocalStorage, service_directory: ServiceDirectory) -> None:
        path = service_directory.path.append("apis").append("echo").append("specification.yaml")
        storage.write(path, b"openapi: 3.0.1\n")
        assert storage.exists(path)
        assert storage.read(path) == b"openapi: 3.0.1\n"

    def test_read_missing_raises_storage_error(
        self, storage: LocalStorage, service_directory: ServiceDirectory
    ) -> None:
        with pytest.raises(StorageError, match="Cannot read"):
            storage.read(service_directory.path.append("missing.json"))

    def test_write_failure_raises_storage_error(self, storage: LocalStorage, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        path = ServiceDirectory.from_folder(blocker).path.append("apiInformation.json")
        with pytest.raises(StorageError, match="Cannot write"):
            storage.write(path, b"{}")

    def test_list_directories_sorted(self, storage: LocalStorage, service_folder: Path) -> None:
        for name in ("b-api", "a-api"):
            (service_folder / "apis" / name).mkdir(parents=True)
        (service_folder / "apis" / "README.md").write_text("not an api")
        apis = ApisDirectory(ServiceDirectory.from_folder(service_folder))
        assert list_child_names(storage, apis) == ["a-api", "b-api"]

    def test_list_missing_directory_is_empty(
        self, storage: LocalStorage, service_directory: ServiceDirectory
    ) -> None:
        assert list_child_names(storage, ApisDirectory(service_directory)) == []


class TestDocuments:
    def test_write_then_read_document(
        self, storage: LocalStorage, service_directory: ServiceDirectory
    ) -> None:
        file = ApiInformationFile(ApiDirectory.of(ApiName("echo"), service_directory))
        write_document(storage, file, {"displayName": "Echo", "path": "echo"})
        assert file.path.to_path().read_text(encoding="utf-8") == (
            '{\n    "displayName": "Echo",\n    "path": "echo"\n}\n'
        )
        assert read_document(storage, file) == {"displayName": "Echo", "path": "echo"}

    def test_read_invalid_document(
        self, storage: LocalStorage, service_directory: ServiceDirectory
    ) -> None:
        file = ApiInformationFile(ApiDirectory.of(ApiName("echo"), service_directory))
        storage.write(file.path, b"[]")
        with pytest.raises(DecodeError):
            read_document(storage, file)
