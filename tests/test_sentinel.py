import pytest

from mobistruct.sentinel import (
    ALL_ONES,
    decode_optional,
    encode_optional,
    decode_nonzero,
    encode_nonzero,
)


def test_all_ones_convention():
    assert decode_optional(ALL_ONES) is None
    assert encode_optional(None) == ALL_ONES

    assert decode_optional(0) == 0
    assert encode_optional(0) == 0


def test_zero_convention():
    assert decode_nonzero(0) is None
    assert encode_nonzero(None) == 0

    assert decode_nonzero(ALL_ONES) == ALL_ONES


@pytest.mark.parametrize('value', [None, 0, 1, 0x1234, 0xfffffffe])
def test_optional_roundtrip(value):
    assert decode_optional(encode_optional(value)) == value


@pytest.mark.parametrize('value', [None, 1, 0x1234, 0xfffffffe, ALL_ONES])
def test_nonzero_roundtrip(value):
    assert decode_nonzero(encode_nonzero(value)) == value
