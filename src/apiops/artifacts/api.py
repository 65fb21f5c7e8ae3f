"""Descriptors for API artifacts.

Layout::

    <service>/apis/<api-name>/apiInformation.json
    <service>/apis/<api-name>/specification.<ext>

Each descriptor owns a reference to its parent and derives its path from
the parent's path plus a fixed segment, or the API name for
:class:`ApiDirectory`. Computing a path is a pure function of the inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from apiops.artifacts.path import ArtifactPath
from apiops.artifacts.service import ServiceDirectory
from apiops.exceptions import InvalidNameError


@dataclass(frozen=True)
class ApiName:
    """Validated API name, used as a path segment and as the provider lookup key.

    A name is a single path segment, so it may not contain ``/`` or ``\\``
    and may not be ``.`` or ``..``.

    Raises:
        InvalidNameError: If the value is ``None``, empty, whitespace-only,
            or not a single path segment.
    """

    value: str

    def __post_init__(self) -> None:
        if self.value is None or not isinstance(self.value, str) or not self.value.strip():
            raise InvalidNameError("API name cannot be null or whitespace.")
        if "/" in self.value or "\\" in self.value or self.value in (".", ".."):
            raise InvalidNameError(f"API name '{self.value}' is not a valid path segment.")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ApisDirectory:
    NAME: ClassVar[str] = "apis"

    service_directory: ServiceDirectory

    @property
    def path(self) -> ArtifactPath:
        return self.service_directory.path.append(self.NAME)


@dataclass(frozen=True)
class ApiDirectory:
    api_name: ApiName
    apis_directory: ApisDirectory

    @property
    def path(self) -> ArtifactPath:
        return self.apis_directory.path.append(str(self.api_name))

    @classmethod
    def of(cls, api_name: ApiName, service_directory: ServiceDirectory) -> ApiDirectory:
        """Shortcut for ``ApiDirectory(api_name, ApisDirectory(service_directory))``."""
        return cls(api_name, ApisDirectory(service_directory))


@dataclass(frozen=True)
class ApiInformationFile:
    NAME: ClassVar[str] = "apiInformation.json"

    api_directory: ApiDirectory

    @property
    def path(self) -> ArtifactPath:
        return self.api_directory.path.append(self.NAME)

    @property
    def api_name(self) -> ApiName:
        return self.api_directory.api_name
