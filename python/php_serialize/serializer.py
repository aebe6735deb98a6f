"""Python value -> PHP serialized bytes."""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Mapping
from typing import Any, Iterable

from php_serialize.errors import (
    InvalidSessionKey,
    NotAssociative,
    UnsupportedSessionRoot,
    UnsupportedType,
)
from php_serialize.state import DEFAULT_ENCODING, DEFAULT_MAX_DEPTH, SerializationState


def serialize(value: Any, assoc: bool = False, *, encoding: str = DEFAULT_ENCODING,
              max_depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    """
    Serialize a Python value to PHP serialize() format.

    Supported values are None, bool, int, float, str, bytes, lists and tuples,
    mappings, dataclass instances and objects providing ``to_assoc()``.
    An object reached twice is written once and then as an ``r:`` reference.

    Args:
        value: The value to serialize
        assoc: Treat a list whose first element is a 2-item list/tuple as a
            list of (key, value) pairs, producing a PHP associative array
        encoding: Encoding used for str values
        max_depth: Maximum container nesting before DepthExceeded is raised

    Returns:
        The serialized bytes

    Raises:
        UnsupportedType: If a value has no PHP representation
        DepthExceeded: If nesting is deeper than max_depth

    Example:
        >>> serialize({"name": "Alice", "age": 30})
        b'a:2:{s:4:"name";s:5:"Alice";s:3:"age";i:30;}'
    """
    state = SerializationState(assoc=assoc, encoding=encoding, max_depth=max_depth)
    out = bytearray()
    _serialize(value, state, out)
    return bytes(out)


def serialize_session(value: Any, assoc: bool = False, *,
                      encoding: str = DEFAULT_ENCODING,
                      max_depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    """
    Serialize named top-level values in PHP session format (``name|value``...).

    ``value`` must be a mapping or a list of (name, value) pairs.

    Raises:
        InvalidSessionKey: If a name contains ``|``
        NotAssociative: If a list element is not a (name, value) pair
        UnsupportedSessionRoot: If value is any other type
        DepthExceeded: If a value nests deeper than max_depth
    """
    if isinstance(value, Mapping):
        entries: Iterable[Any] = value.items()
    elif isinstance(value, (list, tuple)):
        entries = value
        for entry in entries:
            if not _is_pair(entry):
                raise NotAssociative(f"Session entry is not a (name, value) pair: {entry!r}")
    else:
        raise UnsupportedSessionRoot(
            "Unable to serialize sessions with top level types other than "
            f"mappings and lists of pairs, got {type(value).__name__}"
        )

    out = bytearray()
    for key, item in entries:
        name = str(key)
        if "|" in name:
            raise InvalidSessionKey(name)
        out += name.encode(encoding)
        out += b"|"
        out += serialize(item, assoc, encoding=encoding, max_depth=max_depth)
    return bytes(out)


def _is_pair(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and len(value) == 2


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    return repr(value)


def _has_to_assoc(value: Any) -> bool:
    return callable(getattr(type(value), "to_assoc", None))


def _serialize(value: Any, state: SerializationState, out: bytearray) -> None:
    index = state.next_index()

    # bool before int, bool is an int subclass
    if value is None:
        out += b"N;"
    elif isinstance(value, bool):
        out += b"b:1;" if value else b"b:0;"
    elif isinstance(value, int):
        out += b"i:%d;" % value
    elif isinstance(value, float):
        out += b"d:" + _format_float(value).encode("ascii") + b";"
    elif isinstance(value, str):
        _write_string(value.encode(state.encoding), out)
    elif isinstance(value, (bytes, bytearray, memoryview)):
        _write_string(bytes(value), out)
    elif isinstance(value, (list, tuple)):
        with state.nested():
            if state.assoc and value and _is_pair(value[0]):
                _write_array(value, state, out)
            else:
                _write_array(enumerate(value), state, out, len(value))
    elif isinstance(value, Mapping):
        with state.nested():
            _write_array(value.items(), state, out, len(value))
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        if not _write_reference(value, index, state, out):
            fields = [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]
            _write_object(type(value).__name__.lower(), fields, state, out)
    elif _has_to_assoc(value):
        if not _write_reference(value, index, state, out):
            classname = getattr(value, "php_classname", None)
            if classname is None:
                classname = type(value).__name__.lower()
            fields = [(str(k), v) for k, v in value.to_assoc()]
            _write_object(classname, fields, state, out)
    else:
        raise UnsupportedType(type(value))


def _write_string(raw: bytes, out: bytearray) -> None:
    out += b's:%d:"' % len(raw)
    out += raw
    out += b'";'


def _write_array(pairs: Iterable[Any], state: SerializationState, out: bytearray,
                 count: int | None = None) -> None:
    if count is None:
        pairs = list(pairs)
        count = len(pairs)
    out += b"a:%d:{" % count
    for key, item in pairs:
        # PHP array keys are integers or strings
        if isinstance(key, bool) or not isinstance(key, (int, str, bytes)):
            raise UnsupportedType(type(key))
        _serialize(key, state, out)
        _serialize(item, state, out)
    out += b"}"


def _write_reference(obj: Any, index: int, state: SerializationState, out: bytearray) -> bool:
    """Emit ``r:<index>;`` if ``obj`` was already written, else claim ``index`` for it."""
    seen = state.object_indexes.get(id(obj))
    if seen is not None:
        out += b"r:%d;" % seen[0]
        return True
    state.object_indexes[id(obj)] = (index, obj)
    return False


def _write_object(classname: str, fields: list[tuple[str, Any]],
                  state: SerializationState, out: bytearray) -> None:
    name = classname.encode(state.encoding)
    with state.nested():
        out += b'O:%d:"' % len(name)
        out += name
        out += b'":%d:{' % len(fields)
        for field, item in fields:
            _serialize(field, state, out)
            _serialize(item, state, out)
        out += b"}"
