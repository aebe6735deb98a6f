"""Tests for the byte cursor."""

import re

import pytest


class TestReader:

    def test_read_and_peek(self):
        from php_serialize.reader import Reader

        reader = Reader(b"abcdef")
        assert reader.peek(2) == b"ab"
        assert reader.read(3) == b"abc"
        assert reader.pos == 3
        assert reader.remaining == 3
        assert len(reader) == 6

    def test_short_read(self):
        from php_serialize import MalformedData
        from php_serialize.reader import Reader

        reader = Reader(b"ab")
        with pytest.raises(MalformedData, match="offset 0"):
            reader.read(3)
        assert reader.pos == 0

    def test_read_until(self):
        from php_serialize.reader import Reader

        reader = Reader(b"12:{x")
        assert reader.read_until(b":") == b"12"
        assert reader.peek() == b"{"

    def test_read_until_missing(self):
        from php_serialize import MalformedData
        from php_serialize.reader import Reader

        with pytest.raises(MalformedData):
            Reader(b"123").read_until(b";")

    def test_expect(self):
        from php_serialize import MalformedData
        from php_serialize.reader import Reader

        reader = Reader(b'"x')
        reader.expect(b'"')
        with pytest.raises(MalformedData, match="offset 1"):
            reader.expect(b'"')

    def test_match(self):
        from php_serialize.reader import Reader

        pattern = re.compile(rb"(\w+)\|")
        reader = Reader(b"name|i:1;")
        m = reader.match(pattern)
        assert m.group(1) == b"name"
        assert reader.pos == 5
        assert reader.match(pattern) is None
        assert reader.pos == 5
