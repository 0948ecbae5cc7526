#!/usr/bin/env python3
"""
Tests for the big-endian numeric codec behind the typed wrt/set instructions.
"""

import math
import os
import sys
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import numpy as np
import pytest

from trng.numeric import (
    F32, F64, I8, I16, I32, I64, NUMERIC_TYPES, U8, U16, U32, U64,
)


def test_widths():
    widths = {name: t.width for name, t in NUMERIC_TYPES.items()}
    assert widths == {
        'i8': 1, 'i16': 2, 'i32': 4, 'i64': 8,
        'u8': 1, 'u16': 2, 'u32': 4, 'u64': 8,
        'f32': 4, 'f64': 8,
    }


def test_encoding_is_big_endian():
    assert I16.encode(-2) == b'\xff\xfe'
    assert U32.encode(0x01020304) == b'\x01\x02\x03\x04'
    assert U64.encode(1) == b'\x00' * 7 + b'\x01'
    assert F32.encode(1.0) == b'\x3f\x80\x00\x00'
    assert F64.encode(-2.0) == b'\xc0' + b'\x00' * 7


@pytest.mark.parametrize("num,value", [
    (I8, -128), (I8, 127),
    (I16, -32768), (I32, -123456), (I64, -2 ** 63), (I64, 2 ** 63 - 1),
    (U8, 255), (U16, 65535), (U32, 4294967295), (U64, 2 ** 64 - 1),
    (F32, 1.5), (F64, -0.1), (F64, math.inf),
])
def test_decode_inverts_encode(num, value):
    assert num.decode(num.encode(value)) == value


def test_nan_survives_codec():
    assert math.isnan(F32.decode(F32.encode(math.nan)))


def test_encode_rejects_out_of_range_integers():
    with pytest.raises(ValueError):
        U8.encode(256)
    with pytest.raises(ValueError):
        I8.encode(-129)
    with pytest.raises(ValueError):
        U16.encode(-1)


def test_decode_checks_length():
    with pytest.raises(ValueError):
        I32.decode(b'\x00\x01')


def test_parse_integers():
    assert U8.parse("255") == 255
    assert U8.parse("+7") == 7
    assert I16.parse("-300") == -300
    assert U64.parse("18446744073709551615") == 2 ** 64 - 1


@pytest.mark.parametrize("num,text,reason", [
    (U8, "", "cannot parse integer from empty string"),
    (U8, "256", "number too large to fit in target type"),
    (I8, "-129", "number too small to fit in target type"),
    (U8, "-1", "invalid digit found in string"),
    (I32, "12a", "invalid digit found in string"),
    (U64, "1.0", "invalid digit found in string"),
    (F64, "one", "invalid float literal"),
    (F32, "", "invalid float literal"),
])
def test_parse_errors(num, text, reason):
    with pytest.raises(ValueError) as exc:
        num.parse(text)
    assert str(exc.value) == reason


def test_parse_floats():
    assert F64.parse("1.5") == 1.5
    assert F64.parse("-2e3") == -2000.0
    assert F64.parse(".25") == 0.25
    assert F64.parse("inf") == math.inf
    assert math.isnan(F64.parse("NaN"))
    # Rounded to the nearest f32.
    assert F32.parse("0.1") == float(F32.decode(F32.encode(0.1)))


def test_parse_float_out_of_range_becomes_infinity():
    assert F32.parse("1e39") == math.inf
    assert F32.parse("-1e39") == -math.inf


@pytest.mark.parametrize("num,value,text", [
    (I8, -1, "-1"),
    (U64, 2 ** 64 - 1, "18446744073709551615"),
    (F64, 1.0, "1"),
    (F64, 1.5, "1.5"),
    (F64, 0.1, "0.1"),
    (F64, -0.0, "-0"),
    (F64, math.inf, "inf"),
    (F64, -math.inf, "-inf"),
    (F64, math.nan, "NaN"),
    (F32, 0.1, "0.1"),
])
def test_format(num, value, text):
    assert num.format(value) == text


def test_format_of_decoded_f32_uses_shortest_text():
    raw = F32.encode(0.1)
    assert F32.format(F32.decode(raw)) == "0.1"


@pytest.mark.parametrize("text,expected", [
    # just above the halfway point between 1 and the next f32
    ("1.0000000596046447753906251", 1 + 2 ** -23),
    # exactly halfway: ties to the even neighbour
    ("1.000000059604644775390625", 1.0),
    ("1.0000000596046447753906249", 1.0),
    ("-1.0000000596046447753906251", -(1 + 2 ** -23)),
    ("3.4028235e38", float(np.finfo(np.float32).max)),
    ("-1e-50", -0.0),
])
def test_f32_literals_round_once(text, expected):
    assert F32.parse(text) == expected


def test_f32_tiny_literal_keeps_sign():
    assert math.copysign(1.0, F32.parse("-1e-50")) == -1.0
