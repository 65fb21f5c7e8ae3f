"""The generic document model and its typed accessors.

A *document* is the parsed form of a JSON artifact: a ``dict`` of field
name to value, where values are strings, booleans, numbers, nested
documents or arrays. The accessors here implement the two rules every
codec follows:

* **Omit if absent** -- :func:`put` only adds a key when the value is not
  ``None``, so files never contain ``null``.
* **Fail on malformed-present** -- the ``get_*`` accessors return ``None``
  for a missing key (or an explicit ``null``) and raise
  :class:`~apiops.exceptions.DecodeError` naming the field when a present
  value has the wrong shape.

Nested failures are re-raised with the parent key prefixed, so an error
deep inside a document reports a path such as ``contact.url`` or
``protocols[2]``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any, Callable, Optional, TypeVar

from pydantic import AnyUrl, TypeAdapter, ValidationError

from apiops.exceptions import DecodeError

logger = logging.getLogger(__name__)

Document = dict[str, Any]
"""A decoded JSON object."""

T = TypeVar("T")

_URL_ADAPTER: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


# --- Writing ---


def put(document: Document, key: str, value: Any) -> Document:
    """Set *key* to *value* unless *value* is ``None``. Returns *document* for chaining."""
    if value is not None:
        document[key] = value
    return document


# --- Reading ---


def get_field(document: Document, key: str, decode: Callable[[Any], T]) -> Optional[T]:
    """Decode ``document[key]`` with *decode*, or return ``None`` when the key is absent.

    An explicit ``null`` counts as absent.

    Raises:
        DecodeError: If *decode* rejects the value. The field path is
            prefixed with *key*.
    """
    value = document.get(key)
    if value is None:
        return None
    try:
        return decode(value)
    except DecodeError as exc:
        raise exc.within(key) from None


def get_string(document: Document, key: str) -> Optional[str]:
    return get_field(document, key, decode_string)


def get_bool(document: Document, key: str) -> Optional[bool]:
    return get_field(document, key, decode_bool)


def get_uri(document: Document, key: str) -> Optional[AnyUrl]:
    return get_field(document, key, decode_uri)


def get_object(
    document: Document, key: str, decode: Callable[[Document], T]
) -> Optional[T]:
    """Decode a nested document with *decode*."""
    return get_field(document, key, decode_object(decode))


def get_array(
    document: Document, key: str, decode_item: Callable[[Any], T]
) -> Optional[list[T]]:
    """Decode an array, item by item. A single bad item fails the whole array."""
    return get_field(document, key, decode_array(decode_item))


def check_known_keys(document: Document, known: Iterable[str], strict: bool) -> None:
    """Reject or log keys that no field maps to.

    Args:
        document: The document being decoded.
        known: Keys the codec understands.
        strict: When ``True`` the first unknown key raises; otherwise
            unknown keys are ignored.

    Raises:
        DecodeError: In strict mode, naming the first unknown key.
    """
    unknown = [key for key in document if key not in known]
    if not unknown:
        return
    if strict:
        raise DecodeError(unknown[0], "unknown key")
    logger.debug("Ignoring unknown keys: %s", ", ".join(unknown))


# --- Value decoders ---


def decode_string(value: Any) -> str:
    if not isinstance(value, str):
        raise DecodeError("", f"expected a string, got {json_type(value)}")
    return value


def decode_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise DecodeError("", f"expected a boolean, got {json_type(value)}")
    return value


def decode_uri(value: Any) -> AnyUrl:
    """Decode an absolute URI."""
    text = decode_string(value)
    try:
        return _URL_ADAPTER.validate_python(text)
    except ValidationError:
        raise DecodeError("", f"'{text}' is not an absolute URI") from None


def decode_object(decode: Callable[[Document], T]) -> Callable[[Any], T]:
    """Wrap a document decoder so it first checks that the value is an object."""

    def _decode(value: Any) -> T:
        if not isinstance(value, dict):
            raise DecodeError("", f"expected an object, got {json_type(value)}")
        return decode(value)

    return _decode


def decode_array(decode_item: Callable[[Any], T]) -> Callable[[Any], list[T]]:
    """Wrap an item decoder into an array decoder.

    ``null`` items are malformed like any other bad item.
    """

    def _decode(value: Any) -> list[T]:
        if not isinstance(value, list):
            raise DecodeError("", f"expected an array, got {json_type(value)}")
        items: list[T] = []
        for index, item in enumerate(value):
            try:
                if item is None:
                    raise DecodeError("", "null is not a valid item")
                items.append(decode_item(item))
            except DecodeError as exc:
                raise exc.within(f"[{index}]") from None
        return items

    return _decode


def json_type(value: Any) -> str:
    """Name the JSON type of *value* for error messages."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    if value is None:
        return "null"
    return type(value).__name__


# --- Text form ---


def parse_document(content: bytes | str) -> Document:
    """Parse JSON text into a document.

    Raises:
        DecodeError: If the text is not valid JSON or not a JSON object.
    """
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError("", f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError("", f"expected a JSON object, got {json_type(data)}")
    return data


def serialize_document(document: Document) -> bytes:
    """Serialise *document* as canonical artifact text (UTF-8, 4-space indent, trailing newline)."""
    return (json.dumps(document, indent=4, ensure_ascii=False) + "\n").encode("utf-8")
