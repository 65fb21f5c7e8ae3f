"""Azure Resource Manager implementation of :class:`~apiops.client.base.ResourceClient`.

:class:`ArmResourceClient` wraps :class:`httpx.Client` and layers on:

- **Bearer auth** -- a pre-acquired ARM token is sent on every management
  request.
- **Pagination** -- list operations follow ``nextLink`` until exhausted,
  one page at a time.
- **Error mapping** -- HTTP statuses become typed
  :class:`~apiops.exceptions.ProviderError` subclasses.
- **Specification export** -- the export endpoint returns a short-lived
  link which is downloaded through a second client that never carries
  the ``Authorization`` header.

No request is retried; throttling surfaces as
:class:`~apiops.exceptions.ServerError`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Optional

import httpx
import yaml

from apiops.artifacts.specification import (
    ApiSpecification,
    GraphQlSpecification,
    OpenApiFormat,
    OpenApiSpecification,
    OpenApiVersion,
    WadlSpecification,
    WsdlSpecification,
)
from apiops.client.base import ResourceClient
from apiops.codec.api import decode_api_data
from apiops.exceptions import (
    AuthError,
    ConnectionError_,
    DecodeError,
    NotFoundError,
    ServerError,
    UnsupportedFormatError,
)
from apiops.models import ApiData, ExtractorConfig

if TYPE_CHECKING:
    from apiops.extractor.cancellation import CancellationToken

logger = logging.getLogger(__name__)

GRAPHQL_SCHEMA_CONTENT_TYPE = "application/vnd.ms-azure-apim.graphql.schema"


class ArmResourceClient(ResourceClient):
    """Reads API Management resources through the ARM REST API.

    Must be used as a context manager so that the underlying transports
    are opened and closed.

    Args:
        config: Resolved extractor configuration (service coordinates,
            cloud, token, API version and timeout).
        transport: Optional httpx transport, shared by both internal
            clients. Tests pass an :class:`httpx.MockTransport`.

    Example::

        with ArmResourceClient(config) as client:
            for name in client.list_names("apis"):
                print(client.get_detail("apis", name).display_name)
    """

    def __init__(
        self,
        config: ExtractorConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._download_client: Optional[httpx.Client] = None

    @property
    def service_path(self) -> str:
        """ARM resource path of the configured service."""
        config = self._config
        return (
            f"/subscriptions/{config.subscription_id}"
            f"/resourceGroups/{config.resource_group}"
            f"/providers/Microsoft.ApiManagement/service/{config.service_name}"
        )

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ArmResourceClient:
        if not self._config.bearer_token:
            raise AuthError(
                "No bearer token configured. Set AZURE_BEARER_TOKEN to an ARM access token."
            )
        self._client = httpx.Client(
            base_url=self._config.cloud_environment.value,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {self._config.bearer_token}",
            },
            timeout=self._config.timeout,
            follow_redirects=True,
            transport=self._transport,
        )
        self._download_client = httpx.Client(
            timeout=self._config.timeout,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        for client in (self._client, self._download_client):
            if client is not None:
                client.close()
        self._client = None
        self._download_client = None

    # ------------------------------------------------------------------ #
    # ResourceClient
    # ------------------------------------------------------------------ #

    def list_names(
        self, kind: str, cancellation: Optional[CancellationToken] = None
    ) -> Iterator[str]:
        for item in self._list(f"{self.service_path}/{kind}", cancellation):
            name = item.get("name")
            if not isinstance(name, str):
                raise DecodeError("name", "missing from listed resource")
            yield name

    def get_detail(
        self, kind: str, name: str, cancellation: Optional[CancellationToken] = None
    ) -> ApiData:
        document = self._get_json(f"{self.service_path}/{kind}/{name}", cancellation)
        return decode_api_data(document, strict=self._config.strict_decoding)

    def get_specification(
        self,
        name: str,
        specification: ApiSpecification,
        cancellation: Optional[CancellationToken] = None,
    ) -> Optional[bytes]:
        if isinstance(specification, GraphQlSpecification):
            return self._get_graphql_schema(name, cancellation)

        content = self._export(name, _export_format(specification), cancellation)
        if content is None:
            return None
        if specification == OpenApiSpecification(OpenApiVersion.V2, OpenApiFormat.YAML):
            return _json_to_yaml(content)
        return content

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _get(
        self,
        url: str,
        cancellation: Optional[CancellationToken],
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send a management GET.

        ``api-version`` is added to relative URLs only; absolute URLs such
        as ``nextLink`` already carry their complete query and are sent
        as given.
        """
        assert self._client is not None, "Client not initialised -- use as context manager"
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        if not httpx.URL(url).is_absolute_url:
            params = {"api-version": self._config.api_version, **(params or {})}
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url, params=params)
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Request to {url} failed: {exc}") from exc
        _map_response_error(response)
        return response

    def _get_json(
        self,
        url: str,
        cancellation: Optional[CancellationToken],
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        response = self._get(url, cancellation, params)
        try:
            body = response.json()
        except json.JSONDecodeError as exc:
            raise DecodeError("", f"response from {url} is not JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise DecodeError("", f"response from {url} is not a JSON object")
        return body

    def _list(
        self, url: str, cancellation: Optional[CancellationToken]
    ) -> Iterator[dict[str, Any]]:
        """Yield the items of a collection, following ``nextLink`` page by page."""
        seen: set[str] = set()
        next_url: Optional[str] = url
        while next_url:
            if next_url in seen:
                raise ServerError(f"Listing {url} returned a nextLink it already returned: {next_url}")
            seen.add(next_url)
            page = self._get_json(next_url, cancellation)
            for item in page.get("value") or []:
                if isinstance(item, dict):
                    yield item
            next_url = page.get("nextLink")

    def _export(
        self, name: str, format: str, cancellation: Optional[CancellationToken]
    ) -> Optional[bytes]:
        url = f"{self.service_path}/apis/{name}"
        try:
            exported = self._get_json(
                url, cancellation, params={"export": "true", "format": format}
            )
        except NotFoundError:
            logger.debug("API %s has no %s export", name, format)
            return None

        value = exported.get("value")
        link = value.get("link") if isinstance(value, dict) else None
        if not isinstance(link, str):
            raise DecodeError("value.link", "missing from export response")
        return self._download(link, cancellation)

    def _download(self, link: str, cancellation: Optional[CancellationToken]) -> bytes:
        """Fetch an export link without ARM credentials."""
        assert self._download_client is not None, "Client not initialised -- use as context manager"
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        try:
            response = self._download_client.get(link)
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Download of exported specification failed: {exc}") from exc
        _map_response_error(response)
        return response.content

    def _get_graphql_schema(
        self, name: str, cancellation: Optional[CancellationToken]
    ) -> Optional[bytes]:
        for schema in self._list(f"{self.service_path}/apis/{name}/schemas", cancellation):
            properties = schema.get("properties") or {}
            if properties.get("contentType") != GRAPHQL_SCHEMA_CONTENT_TYPE:
                continue
            value = (properties.get("document") or {}).get("value")
            if isinstance(value, str):
                return value.encode("utf-8")
        return None


def _export_format(specification: ApiSpecification) -> str:
    """Return the export ``format`` query value for *specification*."""
    if isinstance(specification, OpenApiSpecification):
        if specification.version == OpenApiVersion.V2:
            return "swagger-link"
        if specification.format == OpenApiFormat.JSON:
            return "openapi+json-link"
        return "openapi-link"
    if isinstance(specification, WsdlSpecification):
        return "wsdl-link"
    if isinstance(specification, WadlSpecification):
        return "wadl-link"
    raise UnsupportedFormatError(
        f"No export format is known for {type(specification).__name__}."
    )


def _json_to_yaml(content: bytes) -> bytes:
    try:
        document = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError("", f"exported specification is not JSON: {exc}") from exc
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True).encode("utf-8")


def _map_response_error(response: httpx.Response) -> None:
    """Raise a typed exception for error HTTP status codes."""
    status = response.status_code
    if status < 400:
        return

    try:
        detail = response.json()
        error = detail.get("error") if isinstance(detail, dict) else None
        if isinstance(error, dict):
            msg = error.get("message") or error.get("code") or ""
        elif isinstance(detail, dict):
            msg = detail.get("message") or ""
        else:
            msg = str(detail)
    except ValueError:
        msg = response.text[:200] if response.text else ""

    prefix = f"HTTP {status}"
    full_msg = f"{prefix}: {msg}" if msg else prefix

    if status in (401, 403):
        raise AuthError(full_msg)
    if status == 404:
        raise NotFoundError(full_msg)
    # 429, 5xx and any other 4xx.
    raise ServerError(full_msg)
