"""The extraction pipeline: provider resources in, artifact tree out.

For every API name the provider lists, :class:`ApiExtractor` fetches the
details, converts them to the create-or-update shape, writes
``apiInformation.json`` and then, when the API kind has one, the
specification file. Up to ``max_parallelism`` APIs are processed at once;
see :func:`~apiops.extractor.parallel.for_each_parallel` for the failure
and cancellation rules.

:class:`ServiceExtractor` is the run-level entry point that reports
progress and exports every supported resource kind in turn.
"""

from __future__ import annotations

from typing import Optional

from apiops.artifacts.api import ApiDirectory, ApiInformationFile, ApiName
from apiops.artifacts.service import ServiceDirectory
from apiops.artifacts.specification import (
    ApiSpecification,
    select_specification,
    specification_file,
)
from apiops.client.base import APIS, ResourceClient
from apiops.codec.api import encode_api_content, to_create_or_update_content
from apiops.exceptions import ApiopsError, ExtractionCancelled, ExtractionError
from apiops.extractor.cancellation import CancellationToken
from apiops.extractor.parallel import for_each_parallel
from apiops.output import get_output
from apiops.storage import Storage, write_document


class ApiExtractor:
    """Exports every API of a service into the artifact tree.

    Args:
        client: Source of API names, details and specifications.
        storage: Where artifacts are written.
        service_directory: Root of the artifact tree.
        default_specification: Specification exported for HTTP APIs.
        max_parallelism: Maximum number of APIs processed at once.
    """

    def __init__(
        self,
        client: ResourceClient,
        storage: Storage,
        service_directory: ServiceDirectory,
        default_specification: ApiSpecification,
        max_parallelism: int = 8,
    ) -> None:
        self._client = client
        self._storage = storage
        self._service_directory = service_directory
        self._default_specification = default_specification
        self._max_parallelism = max_parallelism

    def export_all(self, cancellation: Optional[CancellationToken] = None) -> None:
        """Export every API the provider lists.

        Raises:
            ExtractionError: For the first API that failed; sibling work
                is cancelled and the tree may be partially written.
            ExtractionCancelled: If *cancellation* fired.
        """
        cancellation = cancellation or CancellationToken()
        for_each_parallel(
            self._client.list_names(APIS, cancellation),
            self.export,
            self._max_parallelism,
            cancellation,
        )

    def export(self, name: str, cancellation: Optional[CancellationToken] = None) -> None:
        """Export a single API by name.

        Raises:
            ExtractionError: Wrapping whatever went wrong for this API.
            ExtractionCancelled: If *cancellation* fired before or during
                the export.
        """
        cancellation = cancellation or CancellationToken()
        try:
            self._export(name, cancellation)
        except ExtractionCancelled:
            raise
        except (ApiopsError, ValueError) as exc:
            raise ExtractionError("api", name, exc) from exc

    def _export(self, name: str, cancellation: CancellationToken) -> None:
        cancellation.raise_if_cancelled()
        api_directory = ApiDirectory.of(ApiName(name), self._service_directory)

        data = self._client.get_detail(APIS, name, cancellation)
        content = to_create_or_update_content(data)

        cancellation.raise_if_cancelled()
        information_file = ApiInformationFile(api_directory)
        get_output().debug(f"Writing API information file {information_file.path}...")
        write_document(self._storage, information_file, encode_api_content(content))

        specification = select_specification(content.api_type, self._default_specification)
        if specification is None:
            return
        file = specification_file(specification, api_directory)
        body = self._client.get_specification(name, specification, cancellation)
        if body is None:
            get_output().debug(f"API {name} has no specification to export.")
            return

        cancellation.raise_if_cancelled()
        get_output().debug(f"Writing API specification file {file.path}...")
        self._storage.write(file.path, body)


class ServiceExtractor:
    """Runs a full extraction of one API Management service."""

    def __init__(self, api_extractor: ApiExtractor) -> None:
        self._api_extractor = api_extractor

    def run(self, cancellation: Optional[CancellationToken] = None) -> None:
        output = get_output()
        output.info("Beginning execution...")

        output.info("Exporting apis...")
        self._api_extractor.export_all(cancellation)

        output.success("Execution complete.")
