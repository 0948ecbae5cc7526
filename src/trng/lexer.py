from __future__ import annotations

import string

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Union


class TokenKind(Enum):
    PFW = 'pfw'
    PBW = 'pbw'
    INC = 'inc'
    DEC = 'dec'
    NUM = 'num'
    LOP = 'lop'
    POL = 'pol'
    RDI = 'rdi'
    RDA = 'rda'
    WRT = 'wrt'
    WRTI8 = 'wrti8'
    WRTI16 = 'wrti16'
    WRTI32 = 'wrti32'
    WRTI64 = 'wrti64'
    WRTU8 = 'wrtu8'
    WRTU16 = 'wrtu16'
    WRTU32 = 'wrtu32'
    WRTU64 = 'wrtu64'
    WRTF32 = 'wrtf32'
    WRTF64 = 'wrtf64'
    SET = 'set'
    SETI8 = 'seti8'
    SETI16 = 'seti16'
    SETI32 = 'seti32'
    SETI64 = 'seti64'
    SETU8 = 'setu8'
    SETU16 = 'setu16'
    SETU32 = 'setu32'
    SETU64 = 'setu64'
    SETF32 = 'setf32'
    SETF64 = 'setf64'
    WRA = 'wra'
    CLR = 'clr'
    UNKNOWN = 'unknown'


# Spelling -> kind for every instruction mnemonic.
MNEMONICS: Dict[str, TokenKind] = {
    k.value: k for k in TokenKind if k not in (TokenKind.NUM, TokenKind.UNKNOWN)
}

# Bytes whose Latin-1 character is Unicode whitespace.
WHITESPACE = frozenset(b'\t\n\x0b\x0c\r \x85\xa0')

_PUNCTUATION = frozenset(string.punctuation)


@dataclass(frozen=True)
class Token:
    value: str
    line: int
    column: int
    kind: TokenKind


Source = Union[bytes, bytearray, str, object]


def read_source(source: Source) -> bytes:
    """Return the raw bytes of a program.

    Accepts bytes, a str (encoded as UTF-8) or any object with ``read()``
    such as an open binary file, ``io.BytesIO`` or ``sys.stdin.buffer``.
    Errors raised while reading propagate unchanged.
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, str):
        return source.encode('utf-8')
    read = getattr(source, 'read', None)
    if read is None:
        raise TypeError(f"Cannot read TRNG source from {type(source).__name__}")
    data = read()
    if isinstance(data, str):
        return data.encode('utf-8')
    return bytes(data)


def _classify(buf: bytearray) -> TokenKind:
    first = chr(buf[0])
    if first.isalpha():
        return MNEMONICS.get(buf.decode('latin-1'), TokenKind.UNKNOWN)
    if first.isnumeric() or first in _PUNCTUATION:
        return TokenKind.NUM
    return TokenKind.UNKNOWN


def tokenize(source: Source) -> List[Token]:
    data = read_source(source)
    tokens: List[Token] = []
    buf = bytearray()
    line = 1
    column = 1
    start_column = 1

    def flush():
        if buf:
            tokens.append(Token(
                value=bytes(buf).decode('utf-8', errors='surrogateescape'),
                line=line,
                column=start_column,
                kind=_classify(buf),
            ))
            buf.clear()

    for byte in data:
        if byte in WHITESPACE:
            flush()
            if byte == 10:
                line += 1
                column = 1
            else:
                column += 1
            continue

        if not buf:
            start_column = column
        buf.append(byte)
        column += 1

    flush()
    return tokens
