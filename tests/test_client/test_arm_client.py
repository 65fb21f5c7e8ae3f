"""Tests for the Azure Resource Manager resource client."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
import yaml

from apiops.artifacts import (
    GraphQlSpecification,
    OpenApiFormat,
    OpenApiSpecification,
    OpenApiVersion,
    WadlSpecification,
    WsdlSpecification,
)
from apiops.client.arm_client import GRAPHQL_SCHEMA_CONTENT_TYPE, ArmResourceClient
from apiops.exceptions import (
    AuthError,
    ConnectionError_,
    DecodeError,
    ExtractionCancelled,
    NotFoundError,
    ServerError,
)
from apiops.extractor.cancellation import CancellationToken
from apiops.models import CloudEnvironment, ExtractorConfig, Protocol

SERVICE_PATH = (
    "/subscriptions/sub-1/resourceGroups/rg-1"
    "/providers/Microsoft.ApiManagement/service/contoso"
)
EXPORT_LINK = "https://exports.blob.core.windows.net/echo/specification?sig=abc"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_config(**overrides: Any) -> ExtractorConfig:
    values: dict[str, Any] = {
        "service_name": "contoso",
        "subscription_id": "sub-1",
        "resource_group": "rg-1",
        "output_folder": "/tmp/apim",
        "bearer_token": "token-123",
    }
    values.update(overrides)
    return ExtractorConfig(**values)


def _client(
    handler: Callable[[httpx.Request], httpx.Response], **overrides: Any
) -> ArmResourceClient:
    return ArmResourceClient(_make_config(**overrides), transport=httpx.MockTransport(handler))


def _json_response(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code=status_code, json=data)


class RecordingHandler:
    """MockTransport handler that serves canned responses by URL path."""

    def __init__(self, routes: dict[str, Callable[[httpx.Request], httpx.Response]]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return _json_response({"error": {"code": "NotFound", "message": "no route"}}, 404)
        return handler(request)


# ---------------------------------------------------------------------------
# Context manager
# ---------------------------------------------------------------------------


class TestContextManager:
    def test_enter_creates_clients(self) -> None:
        client = _client(lambda request: _json_response({}))
        with client:
            assert client._client is not None
            assert client._download_client is not None
        assert client._client is None
        assert client._download_client is None

    def test_missing_token_is_auth_error(self) -> None:
        client = _client(lambda request: _json_response({}), bearer_token=None)
        with pytest.raises(AuthError, match="AZURE_BEARER_TOKEN"):
            client.__enter__()

    def test_service_path(self) -> None:
        assert _client(lambda request: _json_response({})).service_path == SERVICE_PATH


# ---------------------------------------------------------------------------
# Listing and details
# ---------------------------------------------------------------------------


class PagedHandler:
    """Serves a listing page by page; fails the test instead of looping forever."""

    def __init__(self, pages: list[dict[str, Any]], max_requests: int = 5) -> None:
        self.pages = pages
        self.max_requests = max_requests
        self.urls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.urls.append(str(request.url))
        if len(self.urls) > self.max_requests:
            pytest.fail(f"too many requests: {self.urls}")
        index = int(request.url.params.get("$skiptoken", "0"))
        return _json_response(self.pages[index])


def _next_link(path: str, page: int) -> str:
    return f"https://management.azure.com{path}?api-version=2022-08-01&$skiptoken={page}"


class TestListNames:
    def test_follows_next_link(self) -> None:
        path = f"{SERVICE_PATH}/apis"
        handler = PagedHandler(
            [
                {"value": [{"name": "a"}, {"name": "b"}], "nextLink": _next_link(path, 1)},
                {"value": [{"name": "c"}]},
            ]
        )

        with _client(handler) as client:
            assert list(client.list_names("apis")) == ["a", "b", "c"]

        assert len(handler.urls) == 2
        assert handler.urls[0] == f"https://management.azure.com{path}?api-version=2022-08-01"
        assert httpx.URL(handler.urls[1]).params.get("$skiptoken") == "1"
        assert httpx.URL(handler.urls[1]).params.get("api-version") == "2022-08-01"

    def test_repeated_next_link_is_an_error(self) -> None:
        path = f"{SERVICE_PATH}/apis"
        handler = PagedHandler(
            [
                {"value": [{"name": "a"}], "nextLink": _next_link(path, 1)},
                {"value": [{"name": "b"}], "nextLink": _next_link(path, 1)},
            ]
        )

        with _client(handler) as client:
            with pytest.raises(ServerError, match="nextLink"):
                list(client.list_names("apis"))
        assert len(handler.urls) == 2

    def test_sends_token_and_api_version(self) -> None:
        handler = RecordingHandler({f"{SERVICE_PATH}/apis": lambda r: _json_response({"value": []})})
        with _client(handler) as client:
            assert list(client.list_names("apis")) == []

        request = handler.requests[0]
        assert request.url.host == "management.azure.com"
        assert request.url.params["api-version"] == "2022-08-01"
        assert request.headers["Authorization"] == "Bearer token-123"

    def test_sovereign_cloud_endpoint(self) -> None:
        handler = RecordingHandler({f"{SERVICE_PATH}/apis": lambda r: _json_response({"value": []})})
        with _client(handler, cloud_environment=CloudEnvironment.CHINA) as client:
            list(client.list_names("apis"))
        assert handler.requests[0].url.host == "management.chinacloudapi.cn"

    def test_is_lazy(self) -> None:
        handler = RecordingHandler({f"{SERVICE_PATH}/apis": lambda r: _json_response({"value": []})})
        with _client(handler) as client:
            client.list_names("apis")
            assert handler.requests == []

    def test_cancelled_token_stops_listing(self) -> None:
        token = CancellationToken()
        token.cancel()
        with _client(lambda request: _json_response({"value": []})) as client:
            with pytest.raises(ExtractionCancelled):
                list(client.list_names("apis", token))


class TestGetDetail:
    def test_decodes_api_data(self) -> None:
        resource = {
            "id": f"{SERVICE_PATH}/apis/echo",
            "name": "echo",
            "properties": {"displayName": "Echo API", "path": "echo", "protocols": ["https"]},
        }
        handler = RecordingHandler({f"{SERVICE_PATH}/apis/echo": lambda r: _json_response(resource)})
        with _client(handler) as client:
            data = client.get_detail("apis", "echo")
        assert data.name == "echo"
        assert data.display_name == "Echo API"
        assert data.protocols == [Protocol.HTTPS]

    def test_strict_decoding_rejects_unknown_property(self) -> None:
        resource = {"name": "echo", "properties": {"path": "echo", "brandNewSetting": 1}}
        handler = RecordingHandler({f"{SERVICE_PATH}/apis/echo": lambda r: _json_response(resource)})
        with _client(handler, strict_decoding=True) as client:
            with pytest.raises(DecodeError) as exc_info:
                client.get_detail("apis", "echo")
        assert exc_info.value.field == "properties.brandNewSetting"

    def test_non_json_body(self) -> None:
        handler = RecordingHandler(
            {f"{SERVICE_PATH}/apis/echo": lambda r: httpx.Response(200, text="<html/>")}
        )
        with _client(handler) as client:
            with pytest.raises(DecodeError, match="not JSON"):
                client.get_detail("apis", "echo")


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrorMapping:
    @pytest.mark.parametrize(
        ("status", "exc_type"),
        [
            (401, AuthError),
            (403, AuthError),
            (404, NotFoundError),
            (409, ServerError),
            (429, ServerError),
            (500, ServerError),
            (503, ServerError),
        ],
    )
    def test_status_codes(self, status: int, exc_type: type) -> None:
        body = {"error": {"code": "Oops", "message": "something happened"}}
        with _client(lambda request: _json_response(body, status)) as client:
            with pytest.raises(exc_type, match=f"HTTP {status}: something happened"):
                client.get_detail("apis", "echo")

    def test_plain_text_error_body(self) -> None:
        with _client(lambda request: httpx.Response(502, text="Bad gateway")) as client:
            with pytest.raises(ServerError, match="HTTP 502: Bad gateway"):
                client.get_detail("apis", "echo")

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with _client(handler) as client:
            with pytest.raises(ConnectionError_, match="connection refused"):
                client.get_detail("apis", "echo")

    def test_no_retry(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return _json_response({}, 503)

        with _client(handler) as client:
            with pytest.raises(ServerError):
                client.get_detail("apis", "echo")
        assert len(calls) == 1


# ---------------------------------------------------------------------------
# Specifications
# ---------------------------------------------------------------------------


def _export_handler(format_seen: list[str], body: bytes) -> RecordingHandler:
    def export(request: httpx.Request) -> httpx.Response:
        format_seen.append(request.url.params["format"])
        assert request.url.params["export"] == "true"
        return _json_response({"format": request.url.params["format"], "value": {"link": EXPORT_LINK}})

    return RecordingHandler(
        {
            f"{SERVICE_PATH}/apis/echo": export,
            "/echo/specification": lambda r: httpx.Response(200, content=body),
        }
    )


class TestGetSpecification:
    @pytest.mark.parametrize(
        ("specification", "export_format"),
        [
            (OpenApiSpecification(OpenApiVersion.V2, OpenApiFormat.JSON), "swagger-link"),
            (OpenApiSpecification(OpenApiVersion.V3, OpenApiFormat.JSON), "openapi+json-link"),
            (OpenApiSpecification(OpenApiVersion.V3, OpenApiFormat.YAML), "openapi-link"),
            (WsdlSpecification(), "wsdl-link"),
            (WadlSpecification(), "wadl-link"),
        ],
    )
    def test_export_formats(self, specification, export_format: str) -> None:  # noqa: ANN001
        seen: list[str] = []
        handler = _export_handler(seen, b"exported")
        with _client(handler) as client:
            assert client.get_specification("echo", specification) == b"exported"
        assert seen == [export_format]

    def test_download_is_not_authenticated(self) -> None:
        handler = _export_handler([], b"openapi: 3.0.1\n")
        with _client(handler) as client:
            client.get_specification("echo", OpenApiSpecification(OpenApiVersion.V3, OpenApiFormat.YAML))

        export_request, download_request = handler.requests
        assert "Authorization" in export_request.headers
        assert "Authorization" not in download_request.headers
        assert str(download_request.url) == EXPORT_LINK

    def test_openapi_v2_yaml_is_converted_from_swagger_json(self) -> None:
        swagger = {"swagger": "2.0", "info": {"title": "Echo", "version": "1.0"}, "paths": {}}
        seen: list[str] = []
        handler = _export_handler(seen, json.dumps(swagger).encode("utf-8"))
        with _client(handler) as client:
            body = client.get_specification(
                "echo", OpenApiSpecification(OpenApiVersion.V2, OpenApiFormat.YAML)
            )
        assert seen == ["swagger-link"]
        assert yaml.safe_load(body) == swagger
        assert body.decode("utf-8").startswith("swagger: '2.0'")

    def test_missing_export_returns_none(self) -> None:
        with _client(lambda request: _json_response({}, 404)) as client:
            assert client.get_specification("echo", WsdlSpecification()) is None

    def test_export_without_link(self) -> None:
        with _client(lambda request: _json_response({"value": {}})) as client:
            with pytest.raises(DecodeError) as exc_info:
                client.get_specification("echo", WadlSpecification())
        assert exc_info.value.field == "value.link"

    def test_graphql_schema(self) -> None:
        schemas = {
            "value": [
                {"name": "other", "properties": {"contentType": "application/json", "document": {"value": "{}"}}},
                {
                    "name": "graphql",
                    "properties": {
                        "contentType": GRAPHQL_SCHEMA_CONTENT_TYPE,
                        "document": {"value": "type Query { hello: String }"},
                    },
                },
            ]
        }
        handler = RecordingHandler({f"{SERVICE_PATH}/apis/books/schemas": lambda r: _json_response(schemas)})
        with _client(handler) as client:
            body = client.get_specification("books", GraphQlSpecification())
        assert body == b"type Query { hello: String }"

    def test_graphql_schema_on_second_page(self) -> None:
        path = f"{SERVICE_PATH}/apis/books/schemas"
        handler = PagedHandler(
            [
                {
                    "value": [{"name": "json", "properties": {"contentType": "application/json"}}],
                    "nextLink": _next_link(path, 1),
                },
                {
                    "value": [
                        {
                            "name": "graphql",
                            "properties": {
                                "contentType": GRAPHQL_SCHEMA_CONTENT_TYPE,
                                "document": {"value": "type Query { book: String }"},
                            },
                        }
                    ]
                },
            ]
        )

        with _client(handler) as client:
            body = client.get_specification("books", GraphQlSpecification())

        assert body == b"type Query { book: String }"
        assert len(handler.urls) == 2

    def test_graphql_without_schema(self) -> None:
        handler = RecordingHandler(
            {f"{SERVICE_PATH}/apis/books/schemas": lambda r: _json_response({"value": []})}
        )
        with _client(handler) as client:
            assert client.get_specification("books", GraphQlSpecification()) is None
