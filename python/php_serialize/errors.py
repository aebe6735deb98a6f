"""Exceptions raised by php_serialize.

Every error derives from :class:`PhpSerializeError` and from the closest
builtin exception, so ``except ValueError`` style handlers keep working.
"""


class PhpSerializeError(Exception):
    """Base class for all serialize/unserialize failures."""


class UnsupportedType(PhpSerializeError, TypeError):
    """Exception raised when a value has no PHP wire representation."""

    def __init__(self, value_type: type):
        self.value_type = value_type
        super().__init__(f"Unable to serialize type {value_type.__name__}")


class InvalidSessionKey(PhpSerializeError, ValueError):
    """Exception raised when a session name contains a pipe character."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Top level names may not contain pipes: {key!r}")


class NotAssociative(PhpSerializeError, TypeError):
    """Exception raised when a session list element is not a (name, value) pair."""


class UnsupportedSessionRoot(PhpSerializeError, TypeError):
    """Exception raised when a session root is neither a mapping nor a list of pairs."""


class UnknownType(PhpSerializeError, ValueError):
    """Exception raised when an unrecognized type tag is found."""

    def __init__(self, tag: str, position: int):
        self.tag = tag
        self.position = position
        super().__init__(f"Unable to unserialize type {tag!r} at offset {position}")


class InvalidReference(PhpSerializeError, ValueError):
    """Exception raised when an R/r token points outside the decoded values."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Data part of R/r (reference) refers to invalid index: {index}")


class NoSuchField(PhpSerializeError, AttributeError):
    """Exception raised when a decoded field cannot be assigned on its target."""

    def __init__(self, target: type, field: str):
        self.target = target
        self.field = field
        super().__init__(f"{target.__name__} has no settable attribute {field!r}")


class DepthExceeded(PhpSerializeError, ValueError):
    """Exception raised when nesting goes deeper than the configured limit."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Maximum nesting depth of {max_depth} exceeded")


class MalformedData(PhpSerializeError, ValueError):
    """Exception raised for truncated or ill-formed serialized data."""

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        if position is not None:
            message = f"{message} at offset {position}"
        super().__init__(message)
