"""Byte cursor used by the decoder."""

from __future__ import annotations

import re

from php_serialize.errors import MalformedData


class Reader:
    """Forward-only cursor over an immutable byte buffer."""

    __slots__ = ("_data", "pos")

    def __init__(self, data: bytes):
        self._data = data
        self.pos = 0

    def __len__(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        return len(self._data) - self.pos

    def peek(self, n: int = 1) -> bytes:
        return self._data[self.pos:self.pos + n]

    def read(self, n: int) -> bytes:
        """Read exactly ``n`` bytes, raising MalformedData on short input."""
        if n < 0 or self.pos + n > len(self._data):
            raise MalformedData(f"Unexpected end of data reading {n} bytes", self.pos)
        chunk = self._data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def read_until(self, delim: bytes) -> bytes:
        """Read up to and including ``delim``; the delimiter is not returned."""
        idx = self._data.find(delim, self.pos)
        if idx == -1:
            raise MalformedData(f"Expected {delim!r}", self.pos)
        chunk = self._data[self.pos:idx]
        self.pos = idx + len(delim)
        return chunk

    def expect(self, literal: bytes) -> None:
        actual = self.peek(len(literal))
        if actual != literal:
            raise MalformedData(f"Expected {literal!r}, got {actual!r}", self.pos)
        self.pos += len(literal)

    def match(self, pattern: re.Pattern[bytes]) -> re.Match[bytes] | None:
        """Match ``pattern`` at the cursor and advance past it on success."""
        m = pattern.match(self._data, self.pos)
        if m is not None:
            self.pos = m.end()
        return m
