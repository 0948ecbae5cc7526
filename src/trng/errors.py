from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class TapeErrorKind(Enum):
    INDEX = 'Index error'
    OVERFLOW = 'Overflow error'
    IO = 'IO error'


class InterpreterErrorKind(Enum):
    INDEX = 'index'
    OVERFLOW = 'overflow'
    IO = 'io'
    UNKNOWN_TOKEN = 'unknown token'
    MALFORMED_OPERAND = 'malformed operand'
    LOOP_STACK_UNDERFLOW = 'loop stack underflow'


class TranslatorErrorKind(Enum):
    NOT_SUPPORTED = 'Not supported'
    MALFORMED_OPERAND = 'Malformed operand'
    LOOP_STACK_UNDERFLOW = 'Loop stack underflow'
    IO = 'IO error'


_TAPE_TO_INTERPRETER = {
    TapeErrorKind.INDEX: InterpreterErrorKind.INDEX,
    TapeErrorKind.OVERFLOW: InterpreterErrorKind.OVERFLOW,
    TapeErrorKind.IO: InterpreterErrorKind.IO,
}


def _build_context(lines: List[str], line_no_1: int, *, context: int = 2) -> str:
    if not lines:
        return ''
    idx = min(max(1, line_no_1), len(lines))
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
    return "\n".join(out)


def _hint_for(kind: InterpreterErrorKind) -> Optional[str]:
    if kind is InterpreterErrorKind.UNKNOWN_TOKEN:
        return 'Mnemonics are case-sensitive (pfw, pbw, inc, dec, wrt, set, lop, pol, ...). Check the spelling.'
    if kind is InterpreterErrorKind.MALFORMED_OPERAND:
        return 'pfw, pbw, inc, dec and the typed set instructions need a numeric operand. Example: inc 72'
    if kind is InterpreterErrorKind.LOOP_STACK_UNDERFLOW:
        return "Every 'pol' needs an earlier 'lop'."
    if kind is InterpreterErrorKind.OVERFLOW:
        return 'Cells hold values 0..255 and never wrap around.'
    if kind is InterpreterErrorKind.INDEX:
        return 'The pointer must stay on the tape. Check pfw/pbw distances, multi-byte widths and the tape size.'
    return None


@dataclass
class TRNGError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class TapeError(TRNGError):
    kind: TapeErrorKind

    def __str__(self) -> str:
        return f"Tape Error [{self.kind.value}]: {self.message}"


@dataclass
class InterpreterError(TRNGError):
    kind: InterpreterErrorKind
    description: str
    line: Optional[int] = None
    column: Optional[int] = None
    context: str = ''


@dataclass
class TranslatorError(TRNGError):
    kind: TranslatorErrorKind
    line: Optional[int] = None
    column: Optional[int] = None


def make_interpreter_error(
    *,
    kind: InterpreterErrorKind,
    description: str,
    source: Optional[str] = None,
    line: Optional[int] = None,
    column: Optional[int] = None,
) -> InterpreterError:
    position = f" - ln: {line}, col: {column}" if line is not None else ""
    ctx = ''
    if source is not None and line is not None:
        ctx = _build_context(source.split('\n'), line)
    hint = _hint_for(kind)
    ctx_block = f"\n{ctx}" if ctx else ""
    hint_block = f"\nHint: {hint}" if hint else ""
    return InterpreterError(
        message=f"Interpreter Error: {description}{position}{ctx_block}{hint_block}",
        kind=kind,
        description=description,
        line=line,
        column=column,
        context=ctx,
    )


def interpreter_error_from_tape(
    err: TapeError,
    *,
    source: Optional[str] = None,
    line: Optional[int] = None,
    column: Optional[int] = None,
) -> InterpreterError:
    return make_interpreter_error(
        kind=_TAPE_TO_INTERPRETER[err.kind],
        description=str(err),
        source=source,
        line=line,
        column=column,
    )


def make_translator_error(
    *,
    kind: TranslatorErrorKind,
    description: str,
    line: Optional[int] = None,
    column: Optional[int] = None,
) -> TranslatorError:
    position = f" - ln: {line}, col: {column}" if line is not None else ""
    return TranslatorError(
        message=f"Translator Error [{kind.value}]: {description}{position}",
        kind=kind,
        line=line,
        column=column,
    )
