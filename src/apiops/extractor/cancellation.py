"""Cooperative cancellation shared by every fetch and write of a run."""

from __future__ import annotations

import threading
from typing import Optional

from apiops.exceptions import ExtractionCancelled


class CancellationToken:
    """A cancellation signal that work checks at its own checkpoints.

    A token created with a *parent* is cancelled when either it or the
    parent is cancelled. :func:`~apiops.extractor.parallel.for_each_parallel`
    uses this to stop sibling work after the first failure without marking
    the caller's token as cancelled.

    Example::

        token = CancellationToken()
        token.cancel()
        token.raise_if_cancelled()   # raises ExtractionCancelled
    """

    def __init__(self, parent: Optional[CancellationToken] = None) -> None:
        self._event = threading.Event()
        self._parent = parent

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.is_cancelled

    def raise_if_cancelled(self) -> None:
        """Raise :class:`~apiops.exceptions.ExtractionCancelled` if the token is cancelled."""
        if self.is_cancelled:
            raise ExtractionCancelled()

    def linked(self) -> CancellationToken:
        """Return a child token that also observes this one."""
        return CancellationToken(parent=self)
