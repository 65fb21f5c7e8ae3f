"""apiops -- Extract Azure API Management configuration into an artifact tree.

This package lists the resources of an API Management service, encodes each
one into a minimal JSON document and writes it to a deterministic location
under an output folder. The resulting *artifact tree* can be diffed, kept
in version control, and decoded back into equivalent resource models.

Typical workflow::

    apiops extract --output-folder ./apim --service-name contoso-apim
    apiops check ./apim

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for configuration and API resources.
    artifacts: Artifact paths and directory/file descriptors.
    codec: Resource <-> JSON document encoding and decoding.
    extractor: Bounded-parallel extraction pipeline.
    client: Resource client capability and the ARM REST implementation.
    storage: Storage capability and the local file-system implementation.
    config: Configuration resolution (CLI flags, environment, YAML file).
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stderr diagnostics with Rich support.
"""

__version__ = "0.1.0"
