"""Per-call mutable state for serialize and unserialize.

A fresh state object is built for every top-level call and dropped when the
call returns, so concurrent calls never share anything.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from php_serialize.errors import DepthExceeded

DEFAULT_MAX_DEPTH = 256
DEFAULT_ENCODING = "utf-8"

# Placeholder for a value index that was reserved but not filled yet.
UNSET: Any = object()


class _BaseState:
    def __init__(self, assoc: bool, max_depth: int):
        self.assoc = assoc
        self.max_depth = max_depth
        self.depth = 0
        self.last_value_index = -1

    def next_index(self) -> int:
        self.last_value_index += 1
        return self.last_value_index

    @contextmanager
    def nested(self) -> Iterator[None]:
        """Track one level of container nesting."""
        if self.depth >= self.max_depth:
            raise DepthExceeded(self.max_depth)
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1


class SerializationState(_BaseState):
    """Value counter plus the ``id() -> value index`` map for emitted objects."""

    def __init__(self, assoc: bool = False, encoding: str = DEFAULT_ENCODING,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        super().__init__(assoc, max_depth)
        self.encoding = encoding
        # the object is kept alongside its index so its id() stays unique
        self.object_indexes: dict[int, tuple[int, Any]] = {}


class UnserializationState(_BaseState):
    """Classmap, text encoding and the table of values decoded so far."""

    def __init__(self, assoc: bool = False, classmap: dict[str, type] | None = None,
                 encoding: str = DEFAULT_ENCODING, errors: str = "strict",
                 max_depth: int = DEFAULT_MAX_DEPTH):
        super().__init__(assoc, max_depth)
        # copied, resolved classes are cached here for the rest of the call
        self.classmap: dict[str, type] = dict(classmap or {})
        self.encoding = encoding
        self.errors = errors
        self.values: list[Any] = []
        # indexes that an R/r token has pointed at
        self.referenced: set[int] = set()

    def reserve(self) -> int:
        index = self.next_index()
        self.values.append(UNSET)
        return index

    def store(self, index: int, value: Any) -> None:
        self.values[index] = value
