"""The resource-provider capability the extraction pipeline reads through.

:class:`ResourceClient` is deliberately small: list the names of one kind
of resource, fetch one resource's details, and fetch an API's
specification document. The pipeline never sees HTTP; tests substitute an
in-memory implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import TYPE_CHECKING, Optional

from apiops.artifacts.specification import ApiSpecification
from apiops.models import ApiData

if TYPE_CHECKING:
    from apiops.extractor.cancellation import CancellationToken

APIS = "apis"
"""Resource kind of API Management APIs."""


class ResourceClient(ABC):
    """Read-only access to the resources of one API Management service."""

    def __enter__(self) -> ResourceClient:
        return self

    def __exit__(self, *args: object) -> None:
        return None

    @abstractmethod
    def list_names(
        self, kind: str, cancellation: Optional[CancellationToken] = None
    ) -> Iterator[str]:
        """Yield the names of every resource of *kind*.

        Implementations may page lazily; callers should not assume the
        whole listing is fetched up front.
        """

    @abstractmethod
    def get_detail(
        self, kind: str, name: str, cancellation: Optional[CancellationToken] = None
    ) -> ApiData:
        """Return the details of the resource *name* of *kind*."""

    @abstractmethod
    def get_specification(
        self,
        name: str,
        specification: ApiSpecification,
        cancellation: Optional[CancellationToken] = None,
    ) -> Optional[bytes]:
        """Return the specification document of API *name*, or ``None`` if it has none."""
