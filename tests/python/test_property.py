"""Property-based tests using Hypothesis.

These tests generate random inputs to find edge cases that manual tests might miss.
Run with: pytest tests/python/test_property.py -m hypothesis
"""

import math

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

# Mark all tests in this module as hypothesis tests
pytestmark = pytest.mark.hypothesis

i64 = st.integers(min_value=-(2**63), max_value=2**63 - 1)
scalars = st.one_of(
    st.none(),
    st.booleans(),
    i64,
    st.floats(allow_nan=False),
    st.text(max_size=50),
)
nested = st.recursive(
    scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=5),
        # empty dicts come back as empty lists
        st.dictionaries(st.text(min_size=1, max_size=10), children, min_size=1, max_size=5),
    ),
    max_leaves=30,
)


class TestNeverCrashes:
    """Decoder should never crash on any input - only raise PhpSerializeError."""

    @given(st.binary(max_size=10000))
    @settings(max_examples=500, suppress_health_check=[HealthCheck.too_slow])
    def test_random_bytes_never_crash(self, data: bytes):
        """Any random bytes should either parse or raise PhpSerializeError."""
        from php_serialize import PhpSerializeError, loads

        try:
            loads(data)
        except PhpSerializeError:
            pass  # Expected for invalid input
        except Exception as e:
            pytest.fail(f"Unexpected exception type: {type(e).__name__}: {e}")

    @given(st.text(max_size=10000))
    @settings(max_examples=500, suppress_health_check=[HealthCheck.too_slow])
    def test_random_text_never_crash(self, text: str):
        """Any random text (encoded as UTF-8) should never crash."""
        from php_serialize import PhpSerializeError, loads

        try:
            loads(text.encode("utf-8"))
        except PhpSerializeError:
            pass
        except Exception as e:
            pytest.fail(f"Unexpected exception type: {type(e).__name__}: {e}")

    @given(st.binary(max_size=2000))
    @settings(max_examples=300, suppress_health_check=[HealthCheck.too_slow])
    def test_bytes_mode_never_crash(self, data: bytes):
        """Bytes mode must not leak UnicodeDecodeError either."""
        from php_serialize import PhpSerializeError, loads

        try:
            loads(data, errors="bytes")
        except PhpSerializeError:
            pass


class TestScalarRoundtrip:
    """Scalars should survive serialize->unserialize."""

    @given(i64)
    @settings(max_examples=1000)
    def test_integer_roundtrip(self, n: int):
        from php_serialize import loads, serialize

        assert serialize(n) == f"i:{n};".encode()
        assert loads(serialize(n)) == n

    @given(st.floats(allow_nan=False))
    @settings(max_examples=500)
    def test_float_roundtrip(self, f: float):
        from php_serialize import loads, serialize

        result = loads(serialize(f))
        assert result == f
        assert math.copysign(1.0, result) == math.copysign(1.0, f)

    @given(st.booleans())
    @settings(max_examples=100)
    def test_boolean_roundtrip(self, b: bool):
        from php_serialize import loads, serialize

        assert loads(serialize(b)) is b

    @given(st.text(max_size=1000))
    @settings(max_examples=500, suppress_health_check=[HealthCheck.too_slow])
    def test_utf8_string_roundtrip(self, s: str):
        from php_serialize import loads, serialize

        encoded = s.encode("utf-8")
        assert serialize(s) == f's:{len(encoded)}:"'.encode() + encoded + b'";'
        assert loads(serialize(s)) == s

    @given(st.binary(max_size=1000))
    @settings(max_examples=500, suppress_health_check=[HealthCheck.too_slow])
    def test_binary_string_with_bytes_mode(self, b: bytes):
        """Binary data should be preserved in bytes mode."""
        from php_serialize import loads, serialize

        result = loads(serialize(b), errors="bytes")
        # Result is str if valid UTF-8, bytes otherwise
        if isinstance(result, str):
            assert result.encode("utf-8") == b
        else:
            assert result == b

    @given(st.text(max_size=200))
    @settings(max_examples=200)
    def test_decoding_from_str(self, s: str):
        from php_serialize import loads, serialize

        assert loads(serialize(s).decode("utf-8")) == s


class TestStructureRoundtrip:
    """Nested arrays should survive serialize->unserialize."""

    @given(nested)
    @settings(max_examples=300, suppress_health_check=[HealthCheck.too_slow])
    def test_nested_roundtrip(self, value):
        from php_serialize import loads, serialize

        assert loads(serialize(value)) == value

    @given(st.lists(st.tuples(st.one_of(i64, st.text(max_size=10)), scalars), min_size=1, max_size=20))
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_assoc_pairs_roundtrip(self, pairs):
        """Ordered pairs, including duplicate keys, survive in assoc mode."""
        from php_serialize import loads, serialize

        assert loads(serialize(pairs, assoc=True), assoc=True) == pairs

    @given(st.lists(scalars, max_size=20))
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_list_as_pairs(self, items):
        from php_serialize import loads, serialize

        assert loads(serialize(items), assoc=True) == list(enumerate(items))

    @given(
        st.dictionaries(
            keys=st.text(min_size=1, max_size=20, alphabet=st.characters(whitelist_categories=("L", "N"))),
            values=st.integers(min_value=-1000, max_value=1000),
            min_size=1,  # Avoid empty dict (becomes empty list in PHP)
            max_size=20,
        )
    )
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_dict_keeps_order(self, d: dict):
        from php_serialize import loads, serialize

        result = loads(serialize(d))
        assert list(result.items()) == list(d.items())


class TestSessionRoundtrip:
    """Session payloads should survive serialize_session->unserialize."""

    @given(
        st.dictionaries(
            keys=st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,15}", fullmatch=True),
            values=nested,
            min_size=1,
            max_size=5,
        )
    )
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_session_roundtrip(self, session: dict):
        from php_serialize import loads, serialize_session

        assert loads(serialize_session(session)) == session


class TestReferenceRoundtrip:
    """Shared objects should decode to a single object."""

    @given(st.integers(min_value=1, max_value=10), st.integers(min_value=0, max_value=5))
    @settings(max_examples=100)
    def test_shared_object(self, copies: int, padding: int):
        from php_serialize import PhpObject, loads, serialize

        shared = PhpObject("Shared", value=1)
        value = ["pad"] * padding + [shared] * copies
        result = loads(serialize(value))
        assert len(result) == padding + copies
        objs = result[padding:]
        assert all(obj is objs[0] for obj in objs)
        assert objs[0] == shared


class TestNestedStructures:
    """Nested structures should be handled correctly."""

    @given(st.integers(min_value=1, max_value=30))
    @settings(max_examples=50)
    def test_nested_depth(self, depth: int):
        from php_serialize import loads

        data = b's:4:"leaf";'
        for _ in range(depth):
            data = b"a:1:{i:0;" + data + b"}"

        current = loads(data)
        for _ in range(depth):
            assert isinstance(current, list), f"Expected list, got {type(current)}"
            current = current[0]
        assert current == "leaf"

    @given(st.integers(min_value=1, max_value=100))
    @settings(max_examples=50)
    def test_wide_arrays(self, width: int):
        from php_serialize import loads

        parts = [f"i:{i};i:{i * 2};" for i in range(width)]
        data = f"a:{width}:{{{''.join(parts)}}}".encode()

        result = loads(data)
        assert len(result) == width
        assert result[width - 1] == (width - 1) * 2


class TestEdgeCaseStrings:
    """Edge cases for string parsing."""

    @given(st.integers(min_value=0, max_value=100), st.sampled_from(['"', ";", "{}", "|", ":"]))
    @settings(max_examples=200)
    def test_repeated_delimiters(self, n: int, chunk: str):
        """Strings made of wire delimiters should parse correctly."""
        from php_serialize import loads

        s = chunk * n
        data = f's:{len(s)}:"{s}";'.encode()
        assert loads(data) == s


class TestKoreanAndMultibyte:
    """Korean and multibyte character handling."""

    @given(st.text(alphabet="가나다라마바사아자차카타파하한글테스트あいうえお日本語中文字符🎉🤖", max_size=100))
    @settings(max_examples=200)
    def test_multibyte_strings(self, s: str):
        """Multibyte strings should use byte length."""
        from php_serialize import loads, serialize

        encoded = s.encode("utf-8")
        data = f's:{len(encoded)}:"{s}";'.encode("utf-8")
        assert serialize(s) == data
        assert loads(data) == s


class TestJsonOutput:
    """JSON output mode tests."""

    @given(st.dictionaries(st.text(min_size=1, max_size=10), i64, min_size=1, max_size=10))
    @settings(max_examples=100, suppress_health_check=[HealthCheck.too_slow])
    def test_json_output_dict(self, d: dict):
        import json

        from php_serialize import loads_json, serialize

        assert json.loads(loads_json(serialize(d))) == d

    @given(st.lists(i64, max_size=20))
    @settings(max_examples=100)
    def test_json_output_list(self, items: list):
        import json

        from php_serialize import loads_json, serialize

        assert json.loads(loads_json(serialize(items))) == items
