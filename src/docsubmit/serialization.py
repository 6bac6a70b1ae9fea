"""JSON encoding of submitted documents."""

from __future__ import annotations

import dataclasses
import json
import numbers
import types
from collections.abc import Mapping, Sequence, Set
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator

from .errors import SerializationError


class DocumentEncoder(json.JSONEncoder):
    """
    JSON encoder that understands the value shapes documents are built from.

    Beyond what :mod:`json` handles natively, it encodes:

    - objects with a ``to_document()`` method, via that method's result
    - dataclasses, field by field in declaration order
    - enum members, by name (also as mapping keys)
    - ``Decimal`` and other numbers, as JSON numbers
    - mappings of any kind, with every key converted to a string
    - other sequences, and sets sorted so the output is deterministic
    - dates and times, in ISO 8601
    - plain objects, by their public instance attributes

    The value is first rebuilt into plain dicts, lists and scalars, so
    keys of ordinary dicts get the same treatment as those of other mappings.
    """

    def iterencode(self, o: Any, _one_shot: bool = False) -> Iterator[str]:
        return super().iterencode(self._normalize(o, set()), _one_shot)

    def default(self, o: Any) -> Any:
        to_document = getattr(o, "to_document", None)
        if callable(to_document) and not isinstance(o, type):
            return to_document()
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            return {field.name: getattr(o, field.name) for field in dataclasses.fields(o)}
        if isinstance(o, Mapping):
            return dict(o.items())
        if isinstance(o, Set):
            return sorted(o, key=_set_sort_key)
        if isinstance(o, Sequence) and not isinstance(o, (bytes, bytearray)):
            return list(o)
        if isinstance(o, Decimal):
            if not o.is_finite():
                raise ValueError(f"Out of range decimal value: {o}")
            return int(o) if o == o.to_integral_value() else float(o)
        if isinstance(o, numbers.Number):
            return float(o)
        if isinstance(o, (datetime, date, time)):
            return o.isoformat()
        attributes = _public_attributes(o)
        if attributes is not None:
            return attributes
        return super().default(o)

    def _normalize(self, o: Any, markers: set[int]) -> Any:
        if isinstance(o, Enum):
            return o.name
        if o is None or isinstance(o, (str, int, float)):
            return o

        marker = id(o)
        if marker in markers:
            raise ValueError("Circular reference detected")
        markers.add(marker)
        try:
            if isinstance(o, dict):
                return {
                    _key(key): self._normalize(value, markers) for key, value in o.items()
                }
            if isinstance(o, (list, tuple)):
                return [self._normalize(item, markers) for item in o]
            return self._normalize(self.default(o), markers)
        finally:
            markers.discard(marker)


def _key(key: Any) -> str:
    if isinstance(key, Enum):
        return key.name
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


def _set_sort_key(item: Any) -> tuple[str, str]:
    return type(item).__name__, repr(item)


def _public_attributes(o: Any) -> dict[str, Any] | None:
    """Return the public instance attributes of a plain object, or ``None``."""

    if callable(o) or isinstance(o, types.ModuleType):
        return None
    try:
        attributes = vars(o)
    except TypeError:
        attributes = {}
        for klass in type(o).__mro__:
            for name in getattr(klass, "__slots__", ()):
                if name not in attributes and hasattr(o, name):
                    attributes[name] = getattr(o, name)
        if not attributes:
            return None
    return {name: value for name, value in attributes.items() if not name.startswith("_")}


def to_json(value: Any) -> str:
    """
    Encode ``value`` as compact JSON text.

    Args:
        value: Document to encode

    Returns:
        JSON text without insignificant whitespace; non-ASCII characters are
        kept as-is

    Raises:
        SerializationError: If the value (or anything nested in it) cannot be
            encoded, contains a circular reference, or holds a non-finite float
    """
    try:
        return json.dumps(
            value,
            cls=DocumentEncoder,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationError(f"Could not serialize document: {exc}") from exc


def serialize(value: Any) -> bytes:
    """Encode ``value`` as UTF-8 JSON bytes suitable for a request body."""
    return to_json(value).encode("utf-8")
