"""Resource <-> JSON document codecs.

Sub-modules:

* :mod:`~apiops.codec.document` -- the generic document model, typed
  accessors and the canonical JSON text form.
* :mod:`~apiops.codec.enums` -- closed-set enum encode/decode.
* :mod:`~apiops.codec.api` -- the API resource codec.
"""

from apiops.codec.api import (
    decode_api_content,
    decode_api_data,
    encode_api_content,
    to_create_or_update_content,
)
from apiops.codec.document import Document, parse_document, serialize_document

__all__ = [
    "Document",
    "parse_document",
    "serialize_document",
    "encode_api_content",
    "decode_api_content",
    "decode_api_data",
    "to_create_or_update_content",
]
