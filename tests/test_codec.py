"""Tests for the fixed-width base-N codec."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from Chronoid.codec import DEFAULT_ALPHABET, BaseNCodec, normalize_alphabet
from Chronoid.errors import ConfigurationError, DecodeError


class TestNormalizeAlphabet:
    def test_sorted_by_codepoint(self):
        assert normalize_alphabet("cab") == "abc"
        assert normalize_alphabet(DEFAULT_ALPHABET) == (
            "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
        )

    def test_non_ascii_symbols_sorted(self):
        assert normalize_alphabet("ωαβ") == "αβω"

    @pytest.mark.parametrize("raw", ["", "a"])
    def test_too_short(self, raw):
        with pytest.raises(ConfigurationError, match="at least 2"):
            normalize_alphabet(raw)

    def test_too_long(self):
        raw = "".join(chr(0x100 + i) for i in range(256))
        with pytest.raises(ConfigurationError, match="no more than 255"):
            normalize_alphabet(raw)

    def test_max_size_accepted(self):
        raw = "".join(chr(0x100 + i) for i in range(255))
        assert len(normalize_alphabet(raw)) == 255

    def test_duplicates(self):
        with pytest.raises(ConfigurationError, match="unique") as exc_info:
            normalize_alphabet("aabbc")
        assert exc_info.value.context["duplicates"] == "ab"


class TestEncode:
    def test_zero_pads_with_min_symbol(self):
        codec = BaseNCodec("0123456789")
        assert codec.encode(0, 5) == "00000"

    def test_big_endian_and_left_padded(self):
        codec = BaseNCodec("0123456789")
        assert codec.encode(42, 5) == "00042"
        hexc = BaseNCodec("0123456789abcdef")
        assert hexc.encode(255, 4) == "00ff"

    def test_binary(self):
        codec = BaseNCodec("10")
        assert codec.encode(5, 4) == "0101"

    def test_full_width_fits(self):
        codec = BaseNCodec("01")
        assert codec.encode(15, 4) == "1111"

    def test_overflow_rejected(self):
        codec = BaseNCodec("01")
        with pytest.raises(ValueError):
            codec.encode(16, 4)

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            BaseNCodec("01").encode(-1, 4)

    def test_arbitrarily_wide_values(self):
        codec = BaseNCodec(DEFAULT_ALPHABET)
        value = 64**40 - 1
        encoded = codec.encode(value, 40)
        assert encoded == "z" * 40
        assert codec.decode(encoded) == value


class TestDecode:
    def test_inverse(self):
        codec = BaseNCodec("0123456789abcdef")
        assert codec.decode("00ff") == 255
        assert codec.decode("00ff", 4) == 255

    def test_width_mismatch(self):
        with pytest.raises(DecodeError, match="Expected 5"):
            BaseNCodec("0123456789").decode("0042", 5)

    def test_foreign_symbol(self):
        with pytest.raises(DecodeError, match="not part of the alphabet"):
            BaseNCodec("0123456789").decode("00x2")


class TestSizing:
    def test_capacity(self):
        assert BaseNCodec("01").capacity(8) == 256

    @pytest.mark.parametrize(
        "count,width",
        [(0, 1), (1, 1), (63, 1), (64, 2), (100, 2), (4095, 2), (4096, 3)],
    )
    def test_min_width_exceeding_base64(self, count, width):
        codec = BaseNCodec(DEFAULT_ALPHABET)
        assert codec.min_width_exceeding(count) == width

    def test_min_width_for_fraction(self):
        from fractions import Fraction

        assert BaseNCodec("01").min_width_exceeding(Fraction(1, 10)) == 1
        assert BaseNCodec("01").min_width_exceeding(Fraction(5, 2)) == 2


@given(
    st.integers(min_value=0, max_value=64**8 - 1),
    st.integers(min_value=0, max_value=64**8 - 1),
)
def test_string_order_matches_numeric_order(a, b):
    codec = BaseNCodec(DEFAULT_ALPHABET)
    ea, eb = codec.encode(a, 8), codec.encode(b, 8)
    assert (ea < eb) == (a < b)
    assert (ea == eb) == (a == b)
