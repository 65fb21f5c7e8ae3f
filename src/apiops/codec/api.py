"""Codec for API resources.

Maps :class:`~apiops.models.ApiCreateOrUpdateContent` (and every nested
contract) to and from the document stored in ``apiInformation.json``:

* :func:`encode_api_content` -- model to document. Absent fields are
  omitted, enums are written as their canonical string, URIs as their
  absolute string, resource identifiers as their canonical string.
* :func:`decode_api_content` -- document to model. Missing keys become
  ``None``; malformed present values raise
  :class:`~apiops.exceptions.DecodeError`. Unknown keys are ignored unless
  ``strict=True``.

Provider responses are read with :func:`decode_api_data` and converted
with :func:`to_create_or_update_content` before encoding.
"""

from __future__ import annotations

from functools import partial
from typing import Any, Callable, Optional, TypeVar

from apiops.codec.document import (
    Document,
    check_known_keys,
    decode_string,
    get_array,
    get_bool,
    get_field,
    get_object,
    get_string,
    get_uri,
    put,
)
from apiops.codec.enums import encode_enum, enum_decoder
from apiops.exceptions import DecodeError
from apiops.models import (
    ApiContactInformation,
    ApiContractProperties,
    ApiCreateOrUpdateContent,
    ApiData,
    ApiLicenseInformation,
    ApiType,
    ApiVersionSetContractDetails,
    AuthenticationSettingsContract,
    BearerTokenSendingMethod,
    ContentFormat,
    OAuth2AuthenticationSettings,
    OpenIdAuthenticationSettings,
    Protocol,
    SoapApiType,
    SubscriptionKeyParameterNamesContract,
    VersioningScheme,
    WsdlSelector,
    normalize_resource_identifier,
)

T = TypeVar("T")
R = TypeVar("R")


def _map(value: Optional[T], encode: Callable[[T], R]) -> Optional[R]:
    return None if value is None else encode(value)


def decode_resource_identifier(value: Any) -> str:
    text = decode_string(value)
    try:
        return normalize_resource_identifier(text)
    except ValueError as exc:
        raise DecodeError("", str(exc)) from None


# ------------------------------------------------------------------ #
# ApiCreateOrUpdateContent
# ------------------------------------------------------------------ #

_CONTRACT_KEYS = (
    "apiRevision",
    "apiRevisionDescription",
    "apiVersion",
    "apiVersionDescription",
    "apiVersionSet",
    "apiVersionSetId",
    "authenticationSettings",
    "contact",
    "description",
    "displayName",
    "isCurrent",
    "license",
    "path",
    "protocols",
    "serviceUrl",
    "sourceApiId",
    "subscriptionKeyParameterNames",
    "subscriptionRequired",
    "termsOfServiceUrl",
    "type",
)

_CONTENT_KEYS = _CONTRACT_KEYS + ("apiType", "format", "value", "wsdlSelector")

# Read-only or create-only properties the provider returns and the export drops.
_PROVIDER_KEYS = _CONTRACT_KEYS + ("apiType", "isOnline", "provisioningState")


def encode_api_content(content: ApiCreateOrUpdateContent) -> Document:
    """Encode *content* into the ``apiInformation.json`` document."""
    document: Document = {}
    put(document, "apiRevision", content.api_revision)
    put(document, "apiRevisionDescription", content.api_revision_description)
    put(document, "apiType", _map(content.soap_api_type, encode_enum))
    put(document, "apiVersion", content.api_version)
    put(document, "apiVersionDescription", content.api_version_description)
    put(document, "apiVersionSet", _map(content.api_version_set, encode_version_set_details))
    put(document, "apiVersionSetId", content.api_version_set_id)
    put(
        document,
        "authenticationSettings",
        _map(content.authentication_settings, encode_authentication_settings),
    )
    put(document, "contact", _map(content.contact, encode_contact))
    put(document, "description", content.description)
    put(document, "displayName", content.display_name)
    put(document, "format", _map(content.format, encode_enum))
    put(document, "isCurrent", content.is_current)
    put(document, "license", _map(content.license, encode_license))
    put(document, "path", content.path)
    put(document, "serviceUrl", _map(content.service_url, str))
    put(document, "sourceApiId", content.source_api_id)
    put(
        document,
        "subscriptionKeyParameterNames",
        _map(content.subscription_key_parameter_names, encode_subscription_key_parameter_names),
    )
    put(document, "subscriptionRequired", content.is_subscription_required)
    put(document, "termsOfServiceUrl", _map(content.terms_of_service_url, str))
    put(document, "type", _map(content.api_type, encode_enum))
    put(document, "value", content.value)
    put(document, "wsdlSelector", _map(content.wsdl_selector, encode_wsdl_selector))
    if content.protocols is not None:
        document["protocols"] = [encode_enum(protocol) for protocol in content.protocols]
    return document


def decode_api_content(document: Document, *, strict: bool = False) -> ApiCreateOrUpdateContent:
    """Decode an ``apiInformation.json`` document.

    Args:
        document: The parsed document.
        strict: Reject keys that map to no field instead of ignoring them.

    Raises:
        DecodeError: If a present field is malformed.
    """
    check_known_keys(document, _CONTENT_KEYS, strict)
    return ApiCreateOrUpdateContent(
        **_decode_contract_properties(document, strict),
        format=get_field(document, "format", enum_decoder(ContentFormat)),
        value=get_string(document, "value"),
        wsdl_selector=get_object(
            document, "wsdlSelector", partial(decode_wsdl_selector, strict=strict)
        ),
        soap_api_type=get_field(document, "apiType", enum_decoder(SoapApiType)),
    )


def _decode_contract_properties(document: Document, strict: bool) -> dict[str, Any]:
    return {
        "api_revision": get_string(document, "apiRevision"),
        "api_revision_description": get_string(document, "apiRevisionDescription"),
        "api_type": get_field(document, "type", enum_decoder(ApiType)),
        "api_version": get_string(document, "apiVersion"),
        "api_version_description": get_string(document, "apiVersionDescription"),
        "api_version_set": get_object(
            document, "apiVersionSet", partial(decode_version_set_details, strict=strict)
        ),
        "api_version_set_id": get_field(document, "apiVersionSetId", decode_resource_identifier),
        "authentication_settings": get_object(
            document,
            "authenticationSettings",
            partial(decode_authentication_settings, strict=strict),
        ),
        "contact": get_object(document, "contact", partial(decode_contact, strict=strict)),
        "description": get_string(document, "description"),
        "display_name": get_string(document, "displayName"),
        "is_current": get_bool(document, "isCurrent"),
        "is_subscription_required": get_bool(document, "subscriptionRequired"),
        "license": get_object(document, "license", partial(decode_license, strict=strict)),
        "path": get_string(document, "path"),
        "service_url": get_uri(document, "serviceUrl"),
        "source_api_id": get_field(document, "sourceApiId", decode_resource_identifier),
        "subscription_key_parameter_names": get_object(
            document,
            "subscriptionKeyParameterNames",
            partial(decode_subscription_key_parameter_names, strict=strict),
        ),
        "terms_of_service_url": get_uri(document, "termsOfServiceUrl"),
        "protocols": get_array(document, "protocols", enum_decoder(Protocol)),
    }


# ------------------------------------------------------------------ #
# Provider shape
# ------------------------------------------------------------------ #


def decode_api_data(resource: Document, *, strict: bool = False) -> ApiData:
    """Decode an API resource as returned by the Resource Manager REST API.

    Top-level resource keys other than ``name``, ``id`` and ``properties``
    are always ignored. With *strict*, unknown keys inside ``properties``
    and its nested contracts are errors.

    Raises:
        DecodeError: If ``name`` is missing or a known property is malformed.
    """
    name = get_string(resource, "name")
    if name is None:
        raise DecodeError("name", "missing")
    properties = get_object(resource, "properties", lambda document: document) or {}
    try:
        check_known_keys(properties, _PROVIDER_KEYS, strict)
        fields = _decode_contract_properties(properties, strict)
        is_online = get_bool(properties, "isOnline")
    except DecodeError as exc:
        raise exc.within("properties") from None
    return ApiData(name=name, id=get_string(resource, "id"), is_online=is_online, **fields)


def to_create_or_update_content(data: ApiData) -> ApiCreateOrUpdateContent:
    """Copy the exportable properties of *data*.

    Create-only fields (``format``, ``value``, ``wsdl_selector``,
    ``soap_api_type``) stay absent.
    """
    shared = {name: getattr(data, name) for name in ApiContractProperties.model_fields}
    if data.protocols is not None:
        shared["protocols"] = list(data.protocols)
    return ApiCreateOrUpdateContent(**shared)


# ------------------------------------------------------------------ #
# Nested contracts
# ------------------------------------------------------------------ #


def encode_version_set_details(details: ApiVersionSetContractDetails) -> Document:
    document: Document = {}
    put(document, "description", details.description)
    put(document, "id", details.id)
    put(document, "name", details.name)
    put(document, "versionHeaderName", details.version_header_name)
    put(document, "versioningScheme", _map(details.versioning_scheme, encode_enum))
    put(document, "versionQueryName", details.version_query_name)
    return document


def decode_version_set_details(
    document: Document, *, strict: bool = False
) -> ApiVersionSetContractDetails:
    check_known_keys(
        document,
        ("description", "id", "name", "versionHeaderName", "versioningScheme", "versionQueryName"),
        strict,
    )
    return ApiVersionSetContractDetails(
        description=get_string(document, "description"),
        id=get_string(document, "id"),
        name=get_string(document, "name"),
        version_header_name=get_string(document, "versionHeaderName"),
        versioning_scheme=get_field(document, "versioningScheme", enum_decoder(VersioningScheme)),
        version_query_name=get_string(document, "versionQueryName"),
    )


def encode_authentication_settings(settings: AuthenticationSettingsContract) -> Document:
    document: Document = {}
    put(document, "oAuth2", _map(settings.oauth2, encode_oauth2_settings))
    put(document, "openid", _map(settings.openid, encode_openid_settings))
    return document


def decode_authentication_settings(
    document: Document, *, strict: bool = False
) -> AuthenticationSettingsContract:
    check_known_keys(document, ("oAuth2", "openid"), strict)
    return AuthenticationSettingsContract(
        oauth2=get_object(document, "oAuth2", partial(decode_oauth2_settings, strict=strict)),
        openid=get_object(document, "openid", partial(decode_openid_settings, strict=strict)),
    )


def encode_oauth2_settings(settings: OAuth2AuthenticationSettings) -> Document:
    document: Document = {}
    put(document, "authorizationServerId", settings.authorization_server_id)
    put(document, "scope", settings.scope)
    return document


def decode_oauth2_settings(
    document: Document, *, strict: bool = False
) -> OAuth2AuthenticationSettings:
    check_known_keys(document, ("authorizationServerId", "scope"), strict)
    return OAuth2AuthenticationSettings(
        authorization_server_id=get_string(document, "authorizationServerId"),
        scope=get_string(document, "scope"),
    )


def encode_openid_settings(settings: OpenIdAuthenticationSettings) -> Document:
    document: Document = {}
    put(document, "openidProviderId", settings.openid_provider_id)
    if settings.bearer_token_sending_methods is not None:
        document["bearerTokenSendingMethods"] = [
            encode_enum(method) for method in settings.bearer_token_sending_methods
        ]
    return document


def decode_openid_settings(
    document: Document, *, strict: bool = False
) -> OpenIdAuthenticationSettings:
    check_known_keys(document, ("openidProviderId", "bearerTokenSendingMethods"), strict)
    return OpenIdAuthenticationSettings(
        openid_provider_id=get_string(document, "openidProviderId"),
        bearer_token_sending_methods=get_array(
            document, "bearerTokenSendingMethods", enum_decoder(BearerTokenSendingMethod)
        ),
    )


def encode_contact(contact: ApiContactInformation) -> Document:
    document: Document = {}
    put(document, "email", contact.email)
    put(document, "name", contact.name)
    put(document, "url", _map(contact.url, str))
    return document


def decode_contact(document: Document, *, strict: bool = False) -> ApiContactInformation:
    check_known_keys(document, ("email", "name", "url"), strict)
    return ApiContactInformation(
        email=get_string(document, "email"),
        name=get_string(document, "name"),
        url=get_uri(document, "url"),
    )


def encode_license(license: ApiLicenseInformation) -> Document:
    document: Document = {}
    put(document, "name", license.name)
    put(document, "url", _map(license.url, str))
    return document


def decode_license(document: Document, *, strict: bool = False) -> ApiLicenseInformation:
    check_known_keys(document, ("name", "url"), strict)
    return ApiLicenseInformation(
        name=get_string(document, "name"),
        url=get_uri(document, "url"),
    )


def encode_wsdl_selector(selector: WsdlSelector) -> Document:
    document: Document = {}
    put(document, "wsdlEndpointName", selector.wsdl_endpoint_name)
    put(document, "wsdlServiceName", selector.wsdl_service_name)
    return document


def decode_wsdl_selector(document: Document, *, strict: bool = False) -> WsdlSelector:
    check_known_keys(document, ("wsdlEndpointName", "wsdlServiceName"), strict)
    return WsdlSelector(
        wsdl_endpoint_name=get_string(document, "wsdlEndpointName"),
        wsdl_service_name=get_string(document, "wsdlServiceName"),
    )


def encode_subscription_key_parameter_names(
    names: SubscriptionKeyParameterNamesContract,
) -> Document:
    document: Document = {}
    put(document, "header", names.header)
    put(document, "query", names.query)
    return document


def decode_subscription_key_parameter_names(
    document: Document, *, strict: bool = False
) -> SubscriptionKeyParameterNamesContract:
    check_known_keys(document, ("header", "query"), strict)
    return SubscriptionKeyParameterNamesContract(
        header=get_string(document, "header"),
        query=get_string(document, "query"),
    )
