"""Shared test fixtures for apiops.

Provides an in-memory resource client, artifact-tree fixtures, isolated
configuration environments, output state management and a CLI runner.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from apiops.artifacts.service import ServiceDirectory
from apiops.artifacts.specification import ApiSpecification
from apiops.client.base import ResourceClient
from apiops.codec.api import decode_api_data
from apiops.config import CONFIGURATION_YAML_PATH, SETTINGS
from apiops.exceptions import NotFoundError
from apiops.extractor.cancellation import CancellationToken
from apiops.models import ApiData
from apiops.output import OutputFormat, OutputManager, reset_output, set_output
from apiops.storage import LocalStorage


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and library log handlers after every test.

    Both cache references to sys.stdout/sys.stderr at creation time. When
    Typer's CliRunner redirects those streams and the test finishes, the
    cached references become stale ("I/O operation on closed file").
    """
    yield
    reset_output()
    logger = logging.getLogger("apiops")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Provider resources
# ---------------------------------------------------------------------------


def _api_resource(name: str, **properties: Any) -> dict[str, Any]:
    """Build an API resource document in the Resource Manager shape."""
    return {
        "id": f"/subscriptions/sub/resourceGroups/rg/providers/Microsoft.ApiManagement/service/apim/apis/{name}",
        "name": name,
        "type": "Microsoft.ApiManagement/service/apis",
        "properties": {"displayName": name.title(), "path": name, **properties},
    }


class FakeResourceClient(ResourceClient):
    """In-memory :class:`ResourceClient` backed by resource documents.

    Args:
        resources: API resource documents keyed by name.
        specifications: Specification bodies keyed by API name.
        failures: Exceptions raised by :meth:`get_detail`, keyed by name.
        on_detail: Optional hook called with the name before each detail
            lookup (used to block or cancel from inside a worker).
    """

    def __init__(
        self,
        resources: dict[str, dict[str, Any]],
        specifications: Optional[dict[str, bytes]] = None,
        failures: Optional[dict[str, Exception]] = None,
        on_detail: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.resources = resources
        self.specifications = specifications or {}
        self.failures = failures or {}
        self.on_detail = on_detail
        self.detail_calls: list[str] = []
        self.specification_calls: list[tuple[str, ApiSpecification]] = []
        self._lock = threading.Lock()

    def list_names(
        self, kind: str, cancellation: Optional[CancellationToken] = None
    ) -> Iterator[str]:
        yield from self.resources

    def get_detail(
        self, kind: str, name: str, cancellation: Optional[CancellationToken] = None
    ) -> ApiData:
        with self._lock:
            self.detail_calls.append(name)
        if self.on_detail is not None:
            self.on_detail(name)
        if name in self.failures:
            raise self.failures[name]
        if name not in self.resources:
            raise NotFoundError(f"HTTP 404: API '{name}' was not found.")
        return decode_api_data(self.resources[name])

    def get_specification(
        self,
        name: str,
        specification: ApiSpecification,
        cancellation: Optional[CancellationToken] = None,
    ) -> Optional[bytes]:
        with self._lock:
            self.specification_calls.append((name, specification))
        return self.specifications.get(name)


@pytest.fixture
def api_resource() -> Callable[..., dict[str, Any]]:
    """Builder for provider API documents: ``api_resource("echo", protocols=["https"])``."""
    return _api_resource


@pytest.fixture
def fake_client() -> type[FakeResourceClient]:
    """The in-memory client class, for tests that configure their own instance."""
    return FakeResourceClient


# ---------------------------------------------------------------------------
# Artifact tree fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def service_folder(tmp_path: Path) -> Path:
    """Empty folder used as the root of an artifact tree."""
    folder = tmp_path / "apim"
    folder.mkdir()
    return folder


@pytest.fixture
def service_directory(service_folder: Path) -> ServiceDirectory:
    return ServiceDirectory.from_folder(service_folder)


@pytest.fixture
def storage() -> LocalStorage:
    return LocalStorage()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Clear every setting environment variable and chdir to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    for keys in SETTINGS.values():
        for key in keys:
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv(CONFIGURATION_YAML_PATH, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
