"""Specification files that accompany an API, and the rules for choosing one.

An API directory holds at most one specification file next to its
``apiInformation.json``. Which one depends on the API type and, for HTTP
APIs, on the configured default specification format:

==========================  =========================
API kind / format           File name
==========================  =========================
OpenAPI, JSON               ``specification.json``
OpenAPI, YAML               ``specification.yaml``
GraphQL                     ``specification.graphql``
SOAP (WSDL)                 ``specification.wsdl``
WADL                        ``specification.wadl``
==========================  =========================

Unrecognised combinations raise
:class:`~apiops.exceptions.UnsupportedFormatError` instead of falling back
to a default.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from apiops.artifacts.api import ApiDirectory
from apiops.artifacts.path import ArtifactPath
from apiops.exceptions import UnsupportedFormatError
from apiops.models import ApiType


class OpenApiVersion(str, enum.Enum):
    V2 = "v2"
    V3 = "v3"


class OpenApiFormat(str, enum.Enum):
    JSON = "json"
    YAML = "yaml"


# --- Specification choices ---


@dataclass(frozen=True)
class OpenApiSpecification:
    version: OpenApiVersion
    format: OpenApiFormat


@dataclass(frozen=True)
class GraphQlSpecification:
    pass


@dataclass(frozen=True)
class WsdlSpecification:
    pass


@dataclass(frozen=True)
class WadlSpecification:
    pass


ApiSpecification = Union[
    OpenApiSpecification, GraphQlSpecification, WsdlSpecification, WadlSpecification
]

_CONFIGURED_FORMATS: dict[str, ApiSpecification] = {
    "json": OpenApiSpecification(OpenApiVersion.V3, OpenApiFormat.JSON),
    "yaml": OpenApiSpecification(OpenApiVersion.V3, OpenApiFormat.YAML),
    "openapiv2json": OpenApiSpecification(OpenApiVersion.V2, OpenApiFormat.JSON),
    "openapiv2yaml": OpenApiSpecification(OpenApiVersion.V2, OpenApiFormat.YAML),
    "openapiv3json": OpenApiSpecification(OpenApiVersion.V3, OpenApiFormat.JSON),
    "openapiv3yaml": OpenApiSpecification(OpenApiVersion.V3, OpenApiFormat.YAML),
    "wadl": WadlSpecification(),
}


def parse_specification_format(value: str) -> ApiSpecification:
    """Translate a configured format name (``OpenAPIV3YAML``, ``WADL``, ...).

    Matching is case-insensitive.

    Raises:
        UnsupportedFormatError: If *value* is not a known format name.
    """
    try:
        return _CONFIGURED_FORMATS[value.strip().lower()]
    except KeyError:
        raise UnsupportedFormatError(
            f"Unsupported specification format '{value}'. Valid values are "
            "JSON, YAML, OpenAPIV2JSON, OpenAPIV2YAML, OpenAPIV3JSON, OpenAPIV3YAML, WADL."
        ) from None


def select_specification(
    api_type: Optional[ApiType], default: ApiSpecification
) -> Optional[ApiSpecification]:
    """Choose the specification to export for an API.

    Called once the API's metadata is known and before any specification
    content is fetched.

    Args:
        api_type: Declared API type. ``None`` is treated as HTTP.
        default: Specification used for HTTP APIs.

    Returns:
        The specification to export, or ``None`` for WebSocket APIs, which
        have none.
    """
    if api_type is None or api_type == ApiType.HTTP:
        return default
    if api_type == ApiType.GRAPHQL:
        return GraphQlSpecification()
    if api_type == ApiType.SOAP:
        return WsdlSpecification()
    if api_type == ApiType.WEBSOCKET:
        return None
    raise UnsupportedFormatError(f"No specification is known for API type '{api_type}'.")


# --- Specification files ---


@dataclass(frozen=True)
class OpenApiSpecificationFile:
    version: OpenApiVersion
    format: OpenApiFormat
    api_directory: ApiDirectory

    def __post_init__(self) -> None:
        # Fail at construction, before any content is requested.
        _openapi_file_name(self.format)

    @property
    def path(self) -> ArtifactPath:
        return self.api_directory.path.append(_openapi_file_name(self.format))


def _openapi_file_name(format: OpenApiFormat) -> str:
    if format == OpenApiFormat.JSON:
        return "specification.json"
    if format == OpenApiFormat.YAML:
        return "specification.yaml"
    raise UnsupportedFormatError(f"Unsupported OpenAPI format '{format}'.")


@dataclass(frozen=True)
class GraphQlSpecificationFile:
    NAME: ClassVar[str] = "specification.graphql"

    api_directory: ApiDirectory

    @property
    def path(self) -> ArtifactPath:
        return self.api_directory.path.append(self.NAME)


@dataclass(frozen=True)
class WsdlSpecificationFile:
    NAME: ClassVar[str] = "specification.wsdl"

    api_directory: ApiDirectory

    @property
    def path(self) -> ArtifactPath:
        return self.api_directory.path.append(self.NAME)


@dataclass(frozen=True)
class WadlSpecificationFile:
    NAME: ClassVar[str] = "specification.wadl"

    api_directory: ApiDirectory

    @property
    def path(self) -> ArtifactPath:
        return self.api_directory.path.append(self.NAME)


ApiSpecificationFile = Union[
    OpenApiSpecificationFile, GraphQlSpecificationFile, WsdlSpecificationFile, WadlSpecificationFile
]


def specification_file(
    specification: ApiSpecification, api_directory: ApiDirectory
) -> ApiSpecificationFile:
    """Return the file descriptor a *specification* is written to.

    Raises:
        UnsupportedFormatError: For any specification without a naming rule.
    """
    if isinstance(specification, OpenApiSpecification):
        return OpenApiSpecificationFile(specification.version, specification.format, api_directory)
    if isinstance(specification, GraphQlSpecification):
        return GraphQlSpecificationFile(api_directory)
    if isinstance(specification, WsdlSpecification):
        return WsdlSpecificationFile(api_directory)
    if isinstance(specification, WadlSpecification):
        return WadlSpecificationFile(api_directory)
    raise UnsupportedFormatError(
        f"No specification file is known for {type(specification).__name__}."
    )
