"""Extraction of a live service into the artifact tree.

* :mod:`~apiops.extractor.cancellation` -- :class:`CancellationToken`.
* :mod:`~apiops.extractor.parallel` -- bounded-parallel fan-out.
* :mod:`~apiops.extractor.pipeline` -- :class:`ApiExtractor` and
  :class:`ServiceExtractor`.
"""

from apiops.extractor.cancellation import CancellationToken
from apiops.extractor.parallel import for_each_parallel
from apiops.extractor.pipeline import ApiExtractor, ServiceExtractor

__all__ = ["ApiExtractor", "CancellationToken", "ServiceExtractor", "for_each_parallel"]
