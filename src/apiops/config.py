"""Configuration resolution for an extraction run.

The effective :class:`~apiops.models.ExtractorConfig` is merged from four
layers (high to low precedence):

1. CLI flags passed to ``apiops extract``.
2. Environment variables (see :data:`SETTINGS`).
3. A YAML file named by ``--config`` or ``CONFIGURATION_YAML_PATH``, a
   flat mapping that uses the same keys as the environment variables.
4. The defaults declared on :class:`~apiops.models.ExtractorConfig`.

Missing required values, unreadable or malformed YAML, and values that
fail validation all raise :class:`~apiops.exceptions.ConfigError`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from apiops.exceptions import ConfigError
from apiops.models import CloudEnvironment, ExtractorConfig

CONFIGURATION_YAML_PATH = "CONFIGURATION_YAML_PATH"

SETTINGS: dict[str, tuple[str, ...]] = {
    "service_name": ("API_MANAGEMENT_SERVICE_NAME", "apimServiceName"),
    "subscription_id": ("AZURE_SUBSCRIPTION_ID",),
    "resource_group": ("AZURE_RESOURCE_GROUP_NAME",),
    "output_folder": ("API_MANAGEMENT_SERVICE_OUTPUT_FOLDER_PATH",),
    "cloud_environment": ("AZURE_CLOUD_ENVIRONMENT",),
    "bearer_token": ("AZURE_BEARER_TOKEN",),
    "specification_format": ("API_SPECIFICATION_FORMAT",),
    "max_parallelism": ("EXTRACTOR_MAX_PARALLELISM",),
}
"""Config field -> setting keys, first match wins."""

_REQUIRED = ("service_name", "subscription_id", "resource_group", "output_folder")

_CLOUD_ENVIRONMENTS: dict[str, CloudEnvironment] = {
    "azurepubliccloud": CloudEnvironment.PUBLIC,
    "azureglobalcloud": CloudEnvironment.PUBLIC,
    "azurechinacloud": CloudEnvironment.CHINA,
    "azurechina": CloudEnvironment.CHINA,
    "azureusgovernment": CloudEnvironment.US_GOVERNMENT,
    "azuregovernment": CloudEnvironment.US_GOVERNMENT,
    "azuregermancloud": CloudEnvironment.GERMANY,
    "azuregermany": CloudEnvironment.GERMANY,
}


def parse_cloud_environment(value: str) -> CloudEnvironment:
    """Map an Azure cloud name (``AzureChinaCloud``, ``AzureGovernment``, ...) to its endpoint.

    Raises:
        ConfigError: If the name is not a known cloud.
    """
    try:
        return _CLOUD_ENVIRONMENTS[value.strip().lower()]
    except KeyError:
        raise ConfigError(
            f"Unknown cloud environment '{value}'. Valid values are AzurePublicCloud, "
            "AzureChinaCloud, AzureUSGovernment, AzureGermanCloud."
        ) from None


def load_yaml_settings(path: str | Path) -> dict[str, Any]:
    """Read a flat YAML mapping of setting keys.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or is
            not a mapping.
    """
    path = Path(path).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in configuration file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping of settings.")
    return {str(key): value for key, value in data.items()}


def _lookup(source: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = source.get(key)
        if value is not None and value != "":
            return value
    return None


def resolve_config(
    *,
    service_name: Optional[str] = None,
    subscription_id: Optional[str] = None,
    resource_group: Optional[str] = None,
    output_folder: Optional[str] = None,
    config_path: Optional[str] = None,
    max_parallelism: Optional[int] = None,
    specification_format: Optional[str] = None,
    strict_decoding: Optional[bool] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ExtractorConfig:
    """Resolve the effective extractor configuration.

    Args:
        service_name: ``--service-name`` override.
        subscription_id: ``--subscription-id`` override.
        resource_group: ``--resource-group`` override.
        output_folder: ``--output-folder`` override.
        config_path: ``--config`` path; falls back to
            ``CONFIGURATION_YAML_PATH``.
        max_parallelism: ``--max-parallelism`` override.
        specification_format: ``--specification-format`` override.
        strict_decoding: ``--strict`` override.
        environ: Environment to read; defaults to :data:`os.environ`.

    Returns:
        The validated :class:`~apiops.models.ExtractorConfig`.

    Raises:
        ConfigError: On a missing required value or an invalid one.
    """
    env = os.environ if environ is None else environ

    # 3. YAML file
    yaml_path = config_path or env.get(CONFIGURATION_YAML_PATH)
    file_settings = load_yaml_settings(yaml_path) if yaml_path else {}

    values: dict[str, Any] = {}
    for field, keys in SETTINGS.items():
        value = _lookup(env, keys)  # 2. environment
        if value is None:
            value = _lookup(file_settings, keys)
        if value is not None:
            # YAML may hand back numbers for IDs and names.
            values[field] = value if field == "max_parallelism" else str(value)

    # 1. CLI flags (highest precedence)
    cli = {
        "service_name": service_name,
        "subscription_id": subscription_id,
        "resource_group": resource_group,
        "output_folder": output_folder,
        "max_parallelism": max_parallelism,
        "specification_format": specification_format,
        "strict_decoding": strict_decoding,
    }
    values.update({field: value for field, value in cli.items() if value is not None})

    for field in _REQUIRED:
        if field not in values:
            raise ConfigError(f"Could not find '{SETTINGS[field][0]}' in configuration.")

    if "cloud_environment" in values:
        values["cloud_environment"] = parse_cloud_environment(str(values["cloud_environment"]))

    try:
        return ExtractorConfig(**values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from exc
