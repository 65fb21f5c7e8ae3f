"""Bounded-parallel fan-out over a lazily listed sequence of items.

Items are pulled from the iterable only when a worker slot is free, so a
paginated listing is consumed at the pace of the work. The first failure
cancels a token linked to the caller's, which stops new submissions and
lets in-flight work abort at its next checkpoint; that failure is then
re-raised once every submitted item has finished.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from apiops.exceptions import ExtractionCancelled
from apiops.extractor.cancellation import CancellationToken

T = TypeVar("T")


def for_each_parallel(
    items: Iterable[T],
    action: Callable[[T, CancellationToken], None],
    max_parallelism: int,
    cancellation: Optional[CancellationToken] = None,
) -> None:
    """Run ``action(item, token)`` for every item, at most *max_parallelism* at a time.

    No ordering is guaranteed between items.

    Args:
        items: The items to process. Iterated on the calling thread.
        action: Work for one item. Receives the run's token and should
            check it between its own steps.
        max_parallelism: Maximum number of items in flight.
        cancellation: Caller's cancellation token.

    Raises:
        ExtractionCancelled: If *cancellation* was cancelled.
        Exception: The first failure raised by *action* or by *items*.
    """
    if max_parallelism < 1:
        raise ValueError("max_parallelism must be at least 1")

    cancellation = cancellation or CancellationToken()
    token = cancellation.linked()
    slots = threading.BoundedSemaphore(max_parallelism)
    lock = threading.Lock()
    failures: list[Exception] = []
    futures: list[Future[None]] = []

    def _run(item: T) -> None:
        try:
            token.raise_if_cancelled()
            action(item, token)
        except ExtractionCancelled:
            raise
        except Exception as exc:
            with lock:
                failures.append(exc)
            token.cancel()
            raise
        finally:
            slots.release()

    iterator = iter(items)
    with ThreadPoolExecutor(max_workers=max_parallelism) as executor:
        try:
            while True:
                slots.acquire()
                if token.is_cancelled:
                    slots.release()
                    break
                try:
                    item = next(iterator)
                except StopIteration:
                    slots.release()
                    break
                except BaseException:
                    slots.release()
                    raise
                futures.append(executor.submit(_run, item))
        except BaseException:
            token.cancel()
            raise

    cancellation.raise_if_cancelled()
    if failures:
        raise failures[0]
    for future in futures:
        future.result()
