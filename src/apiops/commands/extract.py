"""Extract command -- export a live API Management service to disk.

Resolves the effective configuration, opens an
:class:`~apiops.client.arm_client.ArmResourceClient` and runs a
:class:`~apiops.extractor.pipeline.ServiceExtractor` over it. A Ctrl-C
during the run cancels the run's token instead of killing the process,
so in-flight writes finish and the command exits with code 130.
"""

from __future__ import annotations

from typing import Optional

import typer

from apiops.client.base import ResourceClient
from apiops.exceptions import ApiopsError
from apiops.extractor.cancellation import CancellationToken
from apiops.models import ExtractorConfig
from apiops.output import debug, error

_active_token: Optional[CancellationToken] = None


def create_client(config: ExtractorConfig) -> ResourceClient:
    """Build the resource client for *config*. Replaced in tests."""
    from apiops.client.arm_client import ArmResourceClient

    return ArmResourceClient(config)


def cancel_active_run() -> bool:
    """Cancel the running extraction, if any. Returns ``True`` if one was cancelled."""
    token = _active_token
    if token is None or token.is_cancelled:
        return False
    token.cancel()
    return True


def extract_command(
    output_folder: Optional[str] = typer.Option(
        None, "--output-folder", help="Root of the artifact tree to write."
    ),
    service_name: Optional[str] = typer.Option(
        None, "--service-name", help="API Management service name."
    ),
    subscription_id: Optional[str] = typer.Option(
        None, "--subscription-id", help="Azure subscription ID."
    ),
    resource_group: Optional[str] = typer.Option(
        None, "--resource-group", help="Resource group holding the service."
    ),
    config_path: Optional[str] = typer.Option(
        None, "--config", help="YAML configuration file."
    ),
    max_parallelism: Optional[int] = typer.Option(
        None, "--max-parallelism", min=1, help="Maximum APIs exported at once."
    ),
    specification_format: Optional[str] = typer.Option(
        None,
        "--specification-format",
        help="Specification for HTTP APIs (JSON, YAML, OpenAPIV2JSON, OpenAPIV2YAML, "
        "OpenAPIV3JSON, OpenAPIV3YAML, WADL).",
    ),
    strict: Optional[bool] = typer.Option(
        None, "--strict", help="Treat unknown document keys as errors."
    ),
) -> None:
    """Export every API of a service into an artifact tree.

    Settings not given as options are read from the environment, then
    from the YAML file named by ``--config`` or ``CONFIGURATION_YAML_PATH``.

    Example::

        apiops extract --output-folder ./apim --service-name contoso-apim
    """
    global _active_token

    from apiops.artifacts.service import ServiceDirectory
    from apiops.artifacts.specification import parse_specification_format
    from apiops.config import resolve_config
    from apiops.extractor.pipeline import ApiExtractor, ServiceExtractor
    from apiops.storage import LocalStorage

    try:
        config = resolve_config(
            service_name=service_name,
            subscription_id=subscription_id,
            resource_group=resource_group,
            output_folder=output_folder,
            config_path=config_path,
            max_parallelism=max_parallelism,
            specification_format=specification_format,
            strict_decoding=strict,
        )
        default_specification = parse_specification_format(config.specification_format)
        service_directory = ServiceDirectory.from_folder(config.output_folder)
        debug(f"Service {config.service_name} -> {service_directory.path}")

        _active_token = CancellationToken()
        with create_client(config) as client:
            extractor = ApiExtractor(
                client,
                LocalStorage(),
                service_directory,
                default_specification,
                max_parallelism=config.max_parallelism,
            )
            ServiceExtractor(extractor).run(_active_token)
    except ApiopsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    finally:
        _active_token = None
