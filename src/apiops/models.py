"""Canonical Pydantic models shared across all apiops modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- resolved from CLI flags, environment variables
and an optional YAML file:
    :class:`CloudEnvironment` and :class:`ExtractorConfig`.

**API resource models** -- the in-memory form of an API Management API as
the provider returns it and as the artifact tree stores it:
    the closed enumerations (:class:`ApiType`, :class:`SoapApiType`,
    :class:`VersioningScheme`, :class:`ContentFormat`, :class:`Protocol`,
    :class:`BearerTokenSendingMethod`), the nested contracts, and the two
    top-level shapes :class:`ApiCreateOrUpdateContent` and :class:`ApiData`.

Every resource field is optional and defaults to ``None``. ``None`` means
*absent*: the codec in :mod:`apiops.codec.api` never writes it to disk.
"""

from __future__ import annotations

import enum
from typing import Annotated, Optional

from pydantic import AfterValidator, AnyUrl, BaseModel, Field


# --- Configuration ---


class CloudEnvironment(str, enum.Enum):
    """Azure clouds the extractor can talk to.

    The value is the Resource Manager endpoint of that cloud.
    """

    PUBLIC = "https://management.azure.com"
    CHINA = "https://management.chinacloudapi.cn"
    US_GOVERNMENT = "https://management.usgovcloudapi.net"
    GERMANY = "https://management.microsoftazure.de"


class ExtractorConfig(BaseModel):
    """Effective configuration of one extraction run.

    Built by :func:`~apiops.config.resolve_config` from (high to low
    precedence) CLI flags, environment variables, a YAML file and the
    defaults declared here.
    """

    service_name: str = Field(description="API Management service name")
    subscription_id: str = Field(description="Azure subscription ID")
    resource_group: str = Field(description="Resource group holding the service")
    output_folder: str = Field(description="Root of the artifact tree")
    cloud_environment: CloudEnvironment = CloudEnvironment.PUBLIC
    bearer_token: Optional[str] = Field(
        default=None, description="Pre-acquired ARM bearer token"
    )
    api_version: str = Field(default="2022-08-01", description="ARM REST API version")
    max_parallelism: int = Field(
        default=8, ge=1, description="Resources processed concurrently per kind"
    )
    specification_format: str = Field(
        default="OpenAPIV3YAML",
        description="Default specification for HTTP APIs: JSON, YAML, OpenAPIV2JSON, "
        "OpenAPIV2YAML, OpenAPIV3JSON, OpenAPIV3YAML, WADL",
    )
    strict_decoding: bool = Field(
        default=False, description="Treat unknown document keys as decode errors"
    )
    timeout: int = Field(default=60, description="HTTP timeout in seconds")


# --- Closed enumerations ---


class ApiType(str, enum.Enum):
    """Kind of API (``type`` on the wire)."""

    HTTP = "http"
    SOAP = "soap"
    WEBSOCKET = "websocket"
    GRAPHQL = "graphql"


class SoapApiType(str, enum.Enum):
    """How an API is created from a WSDL (``apiType`` on the wire)."""

    SOAP_TO_REST = "http"
    SOAP_PASS_THROUGH = "soap"
    WEBSOCKET = "websocket"
    GRAPHQL = "graphql"


class VersioningScheme(str, enum.Enum):
    """Where the API version is carried in a request."""

    SEGMENT = "Segment"
    QUERY = "Query"
    HEADER = "Header"


class ContentFormat(str, enum.Enum):
    """Format of the ``value`` used when importing an API."""

    WADL_XML = "wadl-xml"
    WADL_LINK_JSON = "wadl-link-json"
    SWAGGER_JSON = "swagger-json"
    SWAGGER_LINK_JSON = "swagger-link-json"
    WSDL = "wsdl"
    WSDL_LINK = "wsdl-link"
    OPENAPI = "openapi"
    OPENAPI_JSON = "openapi+json"
    OPENAPI_LINK = "openapi-link"
    OPENAPI_JSON_LINK = "openapi+json-link"
    GRAPHQL_LINK = "graphql-link"


class Protocol(str, enum.Enum):
    """Protocols over which API operations can be invoked."""

    HTTP = "http"
    HTTPS = "https"
    WS = "ws"
    WSS = "wss"


class BearerTokenSendingMethod(str, enum.Enum):
    """How an OpenID bearer token is sent to the backend."""

    AUTHORIZATION_HEADER = "authorizationHeader"
    QUERY = "query"


# --- Resource identifiers ---


def normalize_resource_identifier(value: str) -> str:
    """Validate an ARM resource ID and return its canonical string form.

    Raises:
        ValueError: If *value* is blank or not rooted at ``/``.
    """
    if not value or not value.strip():
        raise ValueError("resource identifier cannot be blank")
    if not value.startswith("/"):
        raise ValueError(f"'{value}' is not a resource identifier (must start with '/')")
    canonical = value.rstrip("/")
    if not canonical:
        raise ValueError(f"'{value}' is not a resource identifier")
    return canonical


ResourceIdentifier = Annotated[str, AfterValidator(normalize_resource_identifier)]
"""An ARM resource ID such as ``/subscriptions/.../apiVersionSets/v1``."""


# --- Nested contracts ---


class ApiVersionSetContractDetails(BaseModel):
    """Inline version-set details attached to an API."""

    description: Optional[str] = None
    id: Optional[str] = None
    name: Optional[str] = None
    version_header_name: Optional[str] = None
    versioning_scheme: Optional[VersioningScheme] = None
    version_query_name: Optional[str] = None


class OAuth2AuthenticationSettings(BaseModel):
    authorization_server_id: Optional[str] = None
    scope: Optional[str] = None


class OpenIdAuthenticationSettings(BaseModel):
    openid_provider_id: Optional[str] = None
    bearer_token_sending_methods: Optional[list[BearerTokenSendingMethod]] = None


class AuthenticationSettingsContract(BaseModel):
    """OAuth2 / OpenID settings the gateway applies to an API."""

    oauth2: Optional[OAuth2AuthenticationSettings] = None
    openid: Optional[OpenIdAuthenticationSettings] = None


class ApiContactInformation(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    url: Optional[AnyUrl] = None


class ApiLicenseInformation(BaseModel):
    name: Optional[str] = None
    url: Optional[AnyUrl] = None


class WsdlSelector(BaseModel):
    """Limits a WSDL import to a single service and endpoint."""

    wsdl_endpoint_name: Optional[str] = None
    wsdl_service_name: Optional[str] = None


class SubscriptionKeyParameterNamesContract(BaseModel):
    header: Optional[str] = None
    query: Optional[str] = None


# --- API resources ---


class ApiContractProperties(BaseModel):
    """Properties shared by what the provider returns and what is written to disk."""

    api_revision: Optional[str] = None
    api_revision_description: Optional[str] = None
    api_type: Optional[ApiType] = None
    api_version: Optional[str] = None
    api_version_description: Optional[str] = None
    api_version_set: Optional[ApiVersionSetContractDetails] = None
    api_version_set_id: Optional[ResourceIdentifier] = None
    authentication_settings: Optional[AuthenticationSettingsContract] = None
    contact: Optional[ApiContactInformation] = None
    description: Optional[str] = None
    display_name: Optional[str] = None
    is_current: Optional[bool] = None
    is_subscription_required: Optional[bool] = None
    license: Optional[ApiLicenseInformation] = None
    path: Optional[str] = None
    service_url: Optional[AnyUrl] = None
    source_api_id: Optional[ResourceIdentifier] = None
    subscription_key_parameter_names: Optional[SubscriptionKeyParameterNamesContract] = None
    terms_of_service_url: Optional[AnyUrl] = None
    protocols: Optional[list[Protocol]] = None


class ApiCreateOrUpdateContent(ApiContractProperties):
    """The document stored in ``apiInformation.json``.

    Adds the create-only import fields (``format``, ``value``,
    ``wsdl_selector``, ``soap_api_type``) on top of the shared properties.
    ``protocols`` distinguishes ``None`` (no key on disk) from ``[]``
    (an empty array on disk).
    """

    format: Optional[ContentFormat] = None
    value: Optional[str] = None
    wsdl_selector: Optional[WsdlSelector] = None
    soap_api_type: Optional[SoapApiType] = None


class ApiData(ApiContractProperties):
    """An API as returned by the provider.

    Carries the resource ``name`` and ``id`` plus read-only state that is
    not exported. Convert with
    :func:`~apiops.codec.api.to_create_or_update_content` before encoding.
    """

    name: str
    id: Optional[str] = None
    is_online: Optional[bool] = None
