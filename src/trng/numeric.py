"""Big-endian numeric codec shared by the typed ``wrt*`` and ``set*`` instructions.

Every supported type is one ``TapeNum`` instance wrapping a big-endian numpy
dtype. Encoding, decoding, parsing and text formatting all go through the
same code path; the instances differ only in their dtype.
"""
from __future__ import annotations

import math
import re

from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, Union

import numpy as np

Number = Union[int, float]

_INT_RE = re.compile(r'^[+-]?[0-9]+$')
_UINT_RE = re.compile(r'^\+?[0-9]+$')
_FLOAT_RE = re.compile(
    r'^[+-]?(?:[0-9]+\.?[0-9]*(?:[eE][+-]?[0-9]+)?|\.[0-9]+(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)$',
    re.IGNORECASE,
)


_F32_OVERFLOW = Fraction(2) ** 128


def _nearest_f32(text: str) -> float:
    """Round a decimal literal to the nearest f32 once, ties to even.

    The f64 value is only a starting guess; the exact decimal value picks
    between that guess and its two f32 neighbours.
    """
    approx = float(text)
    with np.errstate(over='ignore', under='ignore'):
        guess = np.float32(approx)
    # Zero, inf and nan are already exact in f32.
    if approx == 0.0 or not math.isfinite(approx):
        return float(guess)

    exact = Fraction(text)
    sign = 1 if approx > 0 else -1

    def value_of(c):
        # Rounding past the largest finite f32 gives inf; 2**128 stands in for it.
        return sign * _F32_OVERFLOW if np.isinf(c) else Fraction(float(c))

    def odd(c):
        return not np.isinf(c) and bool(int(np.array(c, dtype=np.float32).view(np.uint32)) & 1)

    if np.isinf(guess):
        candidates = [np.float32(sign * np.finfo(np.float32).max), guess]
    else:
        candidates = [
            guess,
            np.nextafter(guess, np.float32(-np.inf)),
            np.nextafter(guess, np.float32(np.inf)),
        ]
    best = min(candidates, key=lambda c: (abs(exact - value_of(c)), odd(c)))
    return float(best)


@dataclass(frozen=True)
class TapeNum:
    name: str
    dtype: np.dtype

    @property
    def width(self) -> int:
        return self.dtype.itemsize

    @property
    def is_float(self) -> bool:
        return self.dtype.kind == 'f'

    @property
    def is_signed(self) -> bool:
        return self.dtype.kind in 'if'

    def parse(self, text: str) -> Number:
        """Parse a numeric literal into a value of this type.

        Raises ValueError with a short reason when the text is not a valid
        literal or the value does not fit.
        """
        if self.is_float:
            if not _FLOAT_RE.match(text):
                raise ValueError('invalid float literal')
            if self.width == 4:
                return _nearest_f32(text)
            return float(text)

        if not text:
            raise ValueError('cannot parse integer from empty string')
        pattern = _INT_RE if self.is_signed else _UINT_RE
        if not pattern.match(text):
            raise ValueError('invalid digit found in string')
        value = int(text)
        info = np.iinfo(self.dtype)
        if value > info.max:
            raise ValueError('number too large to fit in target type')
        if value < info.min:
            raise ValueError('number too small to fit in target type')
        return value

    def encode(self, value: Number) -> bytes:
        if not self.is_float:
            info = np.iinfo(self.dtype)
            if not info.min <= int(value) <= info.max:
                raise ValueError(f"{value} does not fit in {self.name}")
        with np.errstate(over='ignore'):
            return np.array(value, dtype=self.dtype).tobytes()

    def decode(self, data: bytes) -> Number:
        if len(data) != self.width:
            raise ValueError(f"{self.name} needs {self.width} byte(s), got {len(data)}")
        scalar = np.frombuffer(data, dtype=self.dtype)[0]
        if self.is_float:
            return float(scalar)
        return int(scalar)

    def format(self, value: Number) -> str:
        if not self.is_float:
            return str(int(value))
        if np.isnan(value):
            return 'NaN'
        if np.isinf(value):
            return 'inf' if value > 0 else '-inf'
        return np.format_float_positional(self.dtype.type(value), unique=True, trim='-')


I8 = TapeNum('i8', np.dtype('>i1'))
I16 = TapeNum('i16', np.dtype('>i2'))
I32 = TapeNum('i32', np.dtype('>i4'))
I64 = TapeNum('i64', np.dtype('>i8'))
U8 = TapeNum('u8', np.dtype('>u1'))
U16 = TapeNum('u16', np.dtype('>u2'))
U32 = TapeNum('u32', np.dtype('>u4'))
U64 = TapeNum('u64', np.dtype('>u8'))
F32 = TapeNum('f32', np.dtype('>f4'))
F64 = TapeNum('f64', np.dtype('>f8'))

NUMERIC_TYPES: Dict[str, TapeNum] = {
    t.name: t for t in (I8, I16, I32, I64, U8, U16, U32, U64, F32, F64)
}
