"""Check command -- read an artifact tree back through the codec.

Decodes every ``apis/<name>/apiInformation.json`` under a service folder
and prints one row per API. The first file that does not decode stops
the check with that error's exit code.
"""

from __future__ import annotations

import typer

from apiops.exceptions import ApiopsError
from apiops.output import error, info, print_table, success, warning


def check_command(
    folder: str = typer.Argument(help="Service folder written by 'apiops extract'."),
    strict: bool = typer.Option(
        False, "--strict", help="Treat unknown document keys as errors."
    ),
) -> None:
    """Decode every API information file in an artifact tree.

    Example::

        apiops check ./apim --strict
    """
    from apiops.artifacts.api import ApiDirectory, ApiInformationFile, ApiName, ApisDirectory
    from apiops.artifacts.service import ServiceDirectory
    from apiops.codec.api import decode_api_content
    from apiops.storage import LocalStorage, list_child_names, read_document

    storage = LocalStorage()
    service_directory = ServiceDirectory.from_folder(folder)
    apis_directory = ApisDirectory(service_directory)
    rows: list[list[str]] = []

    try:
        names = list_child_names(storage, apis_directory)
        if not names:
            info(f"No APIs found under {apis_directory.path}.")
            return

        for name in names:
            information_file = ApiInformationFile(ApiDirectory(ApiName(name), apis_directory))
            if not storage.exists(information_file.path):
                warning(f"API '{name}' has no {ApiInformationFile.NAME}; skipping.")
                continue
            try:
                content = decode_api_content(
                    read_document(storage, information_file), strict=strict
                )
            except ApiopsError as exc:
                rows.append([name, "", "", "error"])
                print_table(["Name", "Display name", "Type", "Status"], rows)
                error(f"{information_file.path}: {exc}")
                raise typer.Exit(code=exc.exit_code) from None
            api_type = content.api_type.value if content.api_type is not None else ""
            rows.append([name, content.display_name or "", api_type, "ok"])
    except ApiopsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    print_table(["Name", "Display name", "Type", "Status"], rows)
    success(f"{len(rows)} API(s) decoded.")
