"""Artifact-tree addressing -- paths and typed directory/file descriptors.

Every descriptor computes its :class:`ArtifactPath` from its parent plus a
fixed or name-derived segment, without touching the file system::

    from apiops.artifacts import ApiDirectory, ApiInformationFile, ApiName, ServiceDirectory

    service = ServiceDirectory.from_folder("./apim")
    info_file = ApiInformationFile(ApiDirectory.of(ApiName("echo-api"), service))
    info_file.path.to_path()   # .../apim/apis/echo-api/apiInformation.json

Sub-modules:

* :mod:`~apiops.artifacts.path` -- :class:`ArtifactPath`.
* :mod:`~apiops.artifacts.base` -- the shared directory/file capabilities.
* :mod:`~apiops.artifacts.service` -- the tree root.
* :mod:`~apiops.artifacts.api` -- API names, directories and information files.
* :mod:`~apiops.artifacts.specification` -- specification files and the
  selector that picks one per API.
"""

from apiops.artifacts.api import ApiDirectory, ApiInformationFile, ApiName, ApisDirectory
from apiops.artifacts.base import ArtifactDirectory, ArtifactFile
from apiops.artifacts.path import ArtifactPath
from apiops.artifacts.service import ServiceDirectory
from apiops.artifacts.specification import (
    ApiSpecification,
    ApiSpecificationFile,
    GraphQlSpecification,
    OpenApiFormat,
    OpenApiSpecification,
    OpenApiVersion,
    WadlSpecification,
    WsdlSpecification,
    parse_specification_format,
    select_specification,
    specification_file,
)

__all__ = [
    "ArtifactPath",
    "ArtifactDirectory",
    "ArtifactFile",
    "ServiceDirectory",
    "ApiName",
    "ApisDirectory",
    "ApiDirectory",
    "ApiInformationFile",
    "ApiSpecification",
    "ApiSpecificationFile",
    "OpenApiSpecification",
    "OpenApiVersion",
    "OpenApiFormat",
    "GraphQlSpecification",
    "WsdlSpecification",
    "WadlSpecification",
    "parse_specification_format",
    "select_specification",
    "specification_file",
]
