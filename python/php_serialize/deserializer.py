"""PHP serialized bytes -> Python values."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable, Literal, Union

from php_serialize.errors import InvalidReference, MalformedData, UnknownType
from php_serialize.objects import PhpObject, assign_field, instantiate, lookup_class
from php_serialize.reader import Reader
from php_serialize.state import DEFAULT_ENCODING, DEFAULT_MAX_DEPTH, UNSET, UnserializationState

logger = logging.getLogger("php_serialize.deserializer")

Data = Union[bytes, bytearray, memoryview, str]
ErrorMode = Literal["strict", "replace", "bytes"]

_ERROR_MODES = ("strict", "replace", "bytes")
_SESSION_FRAME = re.compile(rb"(\w+)\|")
_INTEGER = re.compile(rb"[+-]?\d+")
_LOOKS_SERIALIZED = re.compile(
    rb'N;|b:[01];|[id]:[^;:]+;|[Rr]:\d+;|s:\d+:"|a:\d+:\{|O:\d+:"|\w+\|'
)


def unserialize(
    data: Data,
    classmap: dict[str, type] | None = None,
    assoc: bool = False,
    *,
    encoding: str = DEFAULT_ENCODING,
    errors: ErrorMode = "strict",
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Any:
    """
    Deserialize PHP serialized data to a Python object.

    Arrays with keys 0..n-1 in order become lists, other arrays become dicts.
    Objects are built from ``classmap`` (keyed by the capitalized PHP class
    name), then from classes registered with :func:`php_serialize.register_class`,
    and otherwise returned as :class:`php_serialize.PhpObject`.

    Data in PHP session format (``name|value...``) is returned as a dict of
    names to values.

    Args:
        data: Bytes (or str, encoded with ``encoding``) containing PHP serialized data
        classmap: Mapping of capitalized PHP class names to zero-argument classes
        assoc: Return every array as a list of (key, value) tuples, keeping
            order and never collapsing to a list or dict
        encoding: Text encoding of the serialized strings
        errors: Handling of strings that do not decode with ``encoding``:
            - "strict": Raise MalformedData (default)
            - "replace": Replace invalid bytes with the replacement character
            - "bytes": Return bytes instead of str for such strings
        max_depth: Maximum nesting before DepthExceeded is raised

    Returns:
        The deserialized Python object

    Raises:
        UnknownType: On an unrecognized type tag
        InvalidReference: On an R/r reference to a value not yet decoded
        NoSuchField: When an object field cannot be set on the mapped class
        DepthExceeded: When nesting is deeper than max_depth
        MalformedData: On truncated or ill-formed input
    """
    if errors not in _ERROR_MODES:
        raise ValueError(f"errors must be one of {_ERROR_MODES}, got {errors!r}")
    if isinstance(data, str):
        data = data.encode(encoding)

    state = UnserializationState(
        assoc=assoc, classmap=classmap, encoding=encoding, errors=errors, max_depth=max_depth,
    )
    reader = Reader(bytes(data))

    session: dict[str, Any] | None = None
    while True:
        frame = reader.match(_SESSION_FRAME)
        if frame is None:
            break
        if session is None:
            session = {}
        name = frame.group(1).decode("ascii")
        logger.debug("Decoding session frame %r at offset %d", name, frame.start())
        session[name] = _unserialize(reader, state)

    if session is not None:
        return session
    return _unserialize(reader, state)


loads = unserialize


def loads_json(
    data: Data,
    classmap: dict[str, type] | None = None,
    assoc: bool = False,
    *,
    encoding: str = DEFAULT_ENCODING,
    errors: ErrorMode = "strict",
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """
    Deserialize PHP serialized data directly to a JSON string.

    Objects are rendered as JSON objects with a ``"__class__"`` entry holding
    the PHP class name. Takes the same arguments as :func:`unserialize`.

    Raises:
        ValueError: If the decoded data contains a cycle
    """
    value = unserialize(
        data, classmap, assoc, encoding=encoding, errors=errors, max_depth=max_depth,
    )
    _decode_bytes_keys(value, set())
    return json.dumps(value, default=_json_default, ensure_ascii=False, separators=(",", ":"))


def _decode_bytes_keys(value: Any, seen: set[int]) -> None:
    """Rewrite bytes dict keys as latin-1 text in place; json only calls ``default`` for values."""
    if id(value) in seen:
        return
    if isinstance(value, dict):
        seen.add(id(value))
        if any(isinstance(key, bytes) for key in value):
            items = list(value.items())
            value.clear()
            for key, item in items:
                if isinstance(key, bytes):
                    key = key.decode("latin-1")
                value[key] = item
        children: Iterable[Any] = list(value.values())
    elif isinstance(value, (list, tuple)):
        seen.add(id(value))
        children = value
    elif isinstance(value, PhpObject):
        seen.add(id(value))
        children = [item for _, item in value.to_assoc()]
    elif hasattr(value, "__dict__") and not isinstance(value, type):
        seen.add(id(value))
        children = list(vars(value).values())
    else:
        return
    for child in children:
        _decode_bytes_keys(child, seen)


def _json_default(value: Any) -> Any:
    if isinstance(value, PhpObject):
        return {"__class__": value.php_classname, **dict(value.to_assoc())}
    if isinstance(value, bytes):
        return value.decode("latin-1")
    if hasattr(type(value), "to_assoc"):
        return dict(value.to_assoc())
    if hasattr(value, "__dict__"):
        return {"__class__": type(value).__name__, **vars(value)}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def is_serialized(data: Data) -> bool:
    """
    Check if data looks like PHP serialized format.

    Only the leading token is inspected; the rest of the payload may still
    fail to decode.
    """
    if isinstance(data, str):
        data = data.encode(DEFAULT_ENCODING, "replace")
    return _LOOKS_SERIALIZED.match(bytes(data)) is not None


def preprocess(data: bytes) -> bytes:
    """
    Undo CSV/database export escaping of a serialized payload.

    ``"a:1:{s:3:""key"";...}"`` becomes ``a:1:{s:3:"key";...}``. Data that
    is not wrapped in quotes is returned unchanged.
    """
    if len(data) >= 2 and data[:1] == b'"' and data[-1:] == b'"' and b'""' in data:
        return data[1:-1].replace(b'""', b'"')
    return data


def _parse_int(raw: bytes, position: int) -> int:
    if _INTEGER.fullmatch(raw) is None:
        raise MalformedData(f"Invalid integer {raw[:32]!r}", position)
    try:
        return int(raw)
    except ValueError:
        # longer than sys.get_int_max_str_digits()
        raise MalformedData("Integer too long", position) from None


def _read_int(reader: Reader, delim: bytes) -> int:
    position = reader.pos
    return _parse_int(reader.read_until(delim), position)


def _decode_text(raw: bytes, state: UnserializationState) -> str | bytes:
    if state.errors == "bytes":
        try:
            return raw.decode(state.encoding)
        except UnicodeDecodeError:
            return raw
    try:
        return raw.decode(state.encoding, state.errors)
    except UnicodeDecodeError as exc:
        raise MalformedData(f"String is not valid {state.encoding}: {exc.reason}") from exc


def _resolve_class(classname: str, state: UnserializationState) -> type | None:
    key = classname.capitalize()
    cls = state.classmap.get(key)
    if cls is None:
        cls = lookup_class(key)
        if cls is not None:
            state.classmap[key] = cls
    if cls is None:
        logger.debug("No class mapped for PHP class %r, using PhpObject", classname)
    return cls


def _check_key(key: Any, position: int) -> Any:
    if isinstance(key, bool) or not isinstance(key, (int, str, bytes)):
        raise MalformedData("Array key must be an integer or string", position)
    return key


def _collapse(keys: list[Any], table: dict[Any, Any]) -> Any:
    if all(type(key) is int and key == i for i, key in enumerate(keys)):
        return list(table.values())
    return table


def _unserialize(reader: Reader, state: UnserializationState) -> Any:
    index = state.reserve()
    start = reader.pos
    prefix = reader.read(2)
    tag = prefix[:1]

    if tag == b"N":
        if prefix != b"N;":
            raise MalformedData("Expected 'N;'", start)
        value = None
        state.store(index, value)
        return value
    if tag not in b"aOsidbRr":
        raise UnknownType(tag.decode("latin-1"), start)
    if prefix[1:] != b":":
        raise MalformedData(f"Expected ':' after {tag!r}", start + 1)

    if tag == b"a":
        count = _read_int(reader, b":")
        if count < 0:
            raise MalformedData(f"Negative array size {count}", start)
        reader.expect(b"{")
        # filled in place so an element may refer back to this array
        if state.assoc:
            pairs: list[tuple[Any, Any]] = []
            value = pairs
        else:
            keys: list[Any] = []
            table: dict[Any, Any] = {}
            value = table
        state.store(index, value)
        with state.nested():
            for _ in range(count):
                key_pos = reader.pos
                key = _check_key(_unserialize(reader, state), key_pos)
                item = _unserialize(reader, state)
                if state.assoc:
                    pairs.append((key, item))
                else:
                    keys.append(key)
                    table[key] = item
        reader.expect(b"}")
        # a back-referenced array keeps its identity as a dict
        if not state.assoc and index not in state.referenced:
            value = _collapse(keys, table)

    elif tag == b"O":
        value = _unserialize_object(reader, state, index)

    elif tag == b"s":
        length = _read_int(reader, b":")
        reader.expect(b'"')
        raw = reader.read(length)
        reader.expect(b'";')
        value = _decode_text(raw, state)

    elif tag == b"i":
        value = _read_int(reader, b";")

    elif tag == b"d":
        position = reader.pos
        raw = reader.read_until(b";")
        try:
            value = float(raw)
        except ValueError:
            raise MalformedData(f"Invalid float {raw[:32]!r}", position) from None

    elif tag == b"b":
        flag = reader.read(1)
        reader.expect(b";")
        if flag not in (b"0", b"1"):
            raise MalformedData(f"Invalid boolean {flag!r}", start + 2)
        value = flag == b"1"

    else:  # R / r
        ref = _read_int(reader, b";")
        if not 0 <= ref < index or state.values[ref] is UNSET:
            raise InvalidReference(ref)
        state.referenced.add(ref)
        value = state.values[ref]

    state.store(index, value)
    return value


def _unserialize_object(reader: Reader, state: UnserializationState, index: int) -> Any:
    start = reader.pos
    length = _read_int(reader, b":")
    reader.expect(b'"')
    raw_name = reader.read(length)
    reader.expect(b'":')
    classname = _decode_name(raw_name, state, start)
    count = _read_int(reader, b":")
    if count < 0:
        raise MalformedData(f"Negative property count {count}", start)
    reader.expect(b"{")

    cls = _resolve_class(classname, state)
    obj = PhpObject(classname) if cls is None else instantiate(cls)
    # registered before the fields so they can refer back to it
    state.store(index, obj)

    with state.nested():
        for _ in range(count):
            field_pos = reader.pos
            field = _check_key(_unserialize(reader, state), field_pos)
            name = _decode_name(field, state, field_pos) if isinstance(field, bytes) else str(field)
            assign_field(obj, name, _unserialize(reader, state))
    reader.expect(b"}")
    return obj


def _decode_name(raw: bytes, state: UnserializationState, position: int) -> str:
    try:
        return raw.decode(state.encoding)
    except UnicodeDecodeError:
        if state.errors == "strict":
            raise MalformedData(f"Name is not valid {state.encoding}", position) from None
        return raw.decode(state.encoding, "replace")
