"""
PHP serialize/unserialize codec.

This module converts between Python values and the PHP ``serialize()`` wire
format, including objects, back-references and the PHP session format.

Features:
    - Byte-length strings, so multibyte text round-trips correctly
    - Shared and self-referencing objects survive a round trip
    - Objects map onto registered Python classes or a generic PhpObject
    - PHP session encoding (``name|value...``)

Example:
    >>> from php_serialize import loads, serialize
    >>> loads(b'a:2:{s:4:"name";s:5:"Alice";s:3:"age";i:30;}')
    {'name': 'Alice', 'age': 30}

    >>> serialize(["x", "y"])
    b'a:2:{i:0;s:1:"x";i:1;s:1:"y";}'

    >>> from php_serialize import loads_json
    >>> loads_json(b'a:2:{s:4:"name";s:5:"Alice";s:3:"age";i:30;}')
    '{"name":"Alice","age":30}'
"""

from php_serialize.deserializer import (
    is_serialized,
    loads,
    loads_json,
    preprocess,
    unserialize,
)
from php_serialize.errors import (
    DepthExceeded,
    InvalidReference,
    InvalidSessionKey,
    MalformedData,
    NoSuchField,
    NotAssociative,
    PhpSerializeError,
    UnknownType,
    UnsupportedSessionRoot,
    UnsupportedType,
)
from php_serialize.objects import PhpObject, php_class, register_class, unregister_class
from php_serialize.serializer import serialize, serialize_session
from php_serialize.state import DEFAULT_ENCODING, DEFAULT_MAX_DEPTH

__version__ = "0.1.0"

dumps = serialize


def version() -> str:
    """Get the version of the library."""
    return __version__


__all__ = [
    "DEFAULT_ENCODING",
    "DEFAULT_MAX_DEPTH",
    "DepthExceeded",
    "InvalidReference",
    "InvalidSessionKey",
    "MalformedData",
    "NoSuchField",
    "NotAssociative",
    "PhpObject",
    "PhpSerializeError",
    "UnknownType",
    "UnsupportedSessionRoot",
    "UnsupportedType",
    "dumps",
    "is_serialized",
    "loads",
    "loads_json",
    "php_class",
    "preprocess",
    "register_class",
    "serialize",
    "serialize_session",
    "unregister_class",
    "unserialize",
    "version",
    "__version__",
]
