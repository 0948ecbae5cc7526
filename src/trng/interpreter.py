from __future__ import annotations

import logging

from functools import partial
from typing import BinaryIO, Callable, Dict, List, Optional, Tuple

import numpy as np

from .errors import (
    InterpreterError,
    InterpreterErrorKind,
    TapeError,
    interpreter_error_from_tape,
    make_interpreter_error,
)
from .lexer import Source, Token, TokenKind, read_source, tokenize
from .numeric import NUMERIC_TYPES, U8, U64, Number, TapeNum
from .state import InterpreterState
from .tape import DEFAULT_TAPE_SIZE, Tape

logger = logging.getLogger("trng.interpreter")
logger.addHandler(logging.NullHandler())

Handler = Callable[[List[Token], int], int]


class Interpreter:
    """
    TRNG interpreter.

    Execution:
    - The whole source is tokenized before the first instruction runs
    - Tokens are walked with an explicit index so 'pol' can jump backwards
    - Loops are post-tested: 'lop' pushes its own index, 'pol' jumps back
      to just after it while the current cell is non-zero

    The first fault stops the run with an InterpreterError; the tape keeps
    whatever state it reached so it can be inspected afterwards.
    """

    def __init__(
        self,
        tape_size: int = DEFAULT_TAPE_SIZE,
        *,
        input_stream: Optional[BinaryIO] = None,
        output_stream: Optional[BinaryIO] = None,
    ):
        self.tape = Tape(tape_size, input_stream=input_stream, output_stream=output_stream)
        self.state = InterpreterState()
        self.tokens: List[Token] = []
        self._source = ''

        self._handlers: Dict[TokenKind, Handler] = {
            TokenKind.PFW: self._op_move_forward,
            TokenKind.PBW: self._op_move_backward,
            TokenKind.INC: self._op_increment,
            TokenKind.DEC: self._op_decrement,
            TokenKind.NUM: self._op_stray_number,
            TokenKind.LOP: self._op_loop_open,
            TokenKind.POL: self._op_loop_close,
            TokenKind.RDI: self._op_read_byte,
            TokenKind.RDA: self._op_read_line,
            TokenKind.WRT: self._op_write_cell,
            TokenKind.SET: self._op_set_string,
            TokenKind.WRA: self._op_write_run,
            TokenKind.CLR: self._op_clear_run,
            TokenKind.UNKNOWN: self._op_unknown,
        }
        for name, num in NUMERIC_TYPES.items():
            self._handlers[TokenKind('wrt' + name)] = partial(self._op_write_as, num)
            self._handlers[TokenKind('set' + name)] = partial(self._op_set_as, num)

    # ===== Public interface =====

    @property
    def instruction_index(self) -> int:
        return self.state.instruction_index

    @property
    def loop_stack(self) -> Tuple[int, ...]:
        return tuple(self.state.loop_stack)

    def get_data(self) -> np.ndarray:
        """Read-only view of the tape cells."""
        return self.tape.data

    def reset(self) -> None:
        """Zero the tape and forget all execution state. The tape is reused, not reallocated."""
        self.tape.reset()
        self.state.reset()
        self.tokens = []

    def run(self, source: Source) -> None:
        """
        Tokenize and execute a TRNG program.

        Args:
            source: bytes, str, or a readable stream holding TRNG code

        Raises:
            InterpreterError: on the first fault; nothing is retried
        """
        try:
            data = read_source(source)
        except OSError as e:
            raise make_interpreter_error(kind=InterpreterErrorKind.IO, description=str(e)) from e

        self._source = data.decode('utf-8', errors='replace')
        self.tokens = tokenize(data)
        self.state.reset()
        logger.debug("Running %d token(s) on a tape of %d cells", len(self.tokens), len(self.tape))

        try:
            self._execute(self.tokens)
        finally:
            self._flush()

        logger.debug("Run finished; %d loop(s) left open", self.state.depth)

    # ===== Dispatch =====

    def _execute(self, tokens: List[Token]) -> None:
        i = 0
        while i < len(tokens):
            token = tokens[i]
            self.state.instruction_index = i
            try:
                i = self._handlers[token.kind](tokens, i)
            except TapeError as e:
                raise interpreter_error_from_tape(
                    e, source=self._source, line=token.line, column=token.column
                ) from e

    def _flush(self) -> None:
        try:
            self.tape.flush()
        except TapeError as e:
            raise interpreter_error_from_tape(e) from e

    def _error(self, kind: InterpreterErrorKind, description: str, token: Token) -> InterpreterError:
        return make_interpreter_error(
            kind=kind,
            description=description,
            source=self._source,
            line=token.line,
            column=token.column,
        )

    def _expect_num(self, tokens: List[Token], i: int, num: TapeNum) -> Number:
        if i + 1 >= len(tokens):
            raise self._error(
                InterpreterErrorKind.MALFORMED_OPERAND,
                f"Expected 'num' after '{tokens[i].value}'. Found nothing instead.",
                tokens[i],
            )
        operand = tokens[i + 1]
        if operand.kind is not TokenKind.NUM:
            raise self._error(
                InterpreterErrorKind.MALFORMED_OPERAND,
                f"Expected 'num'. Found '{operand.value}'.",
                operand,
            )
        try:
            return num.parse(operand.value)
        except ValueError as e:
            raise self._error(
                InterpreterErrorKind.MALFORMED_OPERAND,
                f"Invalid {num.name} operand '{operand.value}': {e}",
                operand,
            ) from e

    # ===== Instructions =====
    # Each handler gets the token list and the index of its own token and
    # returns the index of the next instruction.

    def _op_move_forward(self, tokens, i):
        self.tape.move_forward(self._expect_num(tokens, i, U64))
        return i + 2

    def _op_move_backward(self, tokens, i):
        self.tape.move_backward(self._expect_num(tokens, i, U64))
        return i + 2

    def _op_increment(self, tokens, i):
        self.tape.increment(self._expect_num(tokens, i, U8))
        return i + 2

    def _op_decrement(self, tokens, i):
        self.tape.decrement(self._expect_num(tokens, i, U8))
        return i + 2

    def _op_loop_open(self, tokens, i):
        self.state.loop_stack.append(i)
        logger.debug("Loop opened at token %d (depth %d)", i, self.state.depth)
        return i + 1

    def _op_loop_close(self, tokens, i):
        if not self.state.loop_stack:
            raise self._error(
                InterpreterErrorKind.LOOP_STACK_UNDERFLOW,
                "Expected an index on the loop stack. Found nothing.",
                tokens[i],
            )
        if self.tape.get_current_value() == 0:
            self.state.loop_stack.pop()
            logger.debug("Loop closed at token %d (depth %d)", i, self.state.depth)
            return i + 1
        # The 'lop' stays on the stack; resume just after it.
        return self.state.loop_stack[-1] + 1

    def _op_read_byte(self, tokens, i):
        self.tape.read_byte_from_input()
        return i + 1

    def _op_read_line(self, tokens, i):
        self.tape.read_line_into_tape()
        return i + 1

    def _op_write_cell(self, tokens, i):
        self.tape.write_cell()
        return i + 1

    def _op_write_as(self, num: TapeNum, tokens, i):
        self.tape.write_as(num)
        return i + 1

    def _op_set_string(self, tokens, i):
        if i + 1 >= len(tokens):
            raise self._error(
                InterpreterErrorKind.MALFORMED_OPERAND,
                "Expected a value after 'set'. Found nothing.",
                tokens[i],
            )
        self.tape.set_string(tokens[i + 1].value)
        return i + 2

    def _op_set_as(self, num: TapeNum, tokens, i):
        self.tape.set_as(num, self._expect_num(tokens, i, num))
        return i + 2

    def _op_write_run(self, tokens, i):
        self.tape.write_run_until_null()
        return i + 1

    def _op_clear_run(self, tokens, i):
        self.tape.clear_run_until_null()
        return i + 1

    def _op_stray_number(self, tokens, i):
        raise self._error(
            InterpreterErrorKind.MALFORMED_OPERAND,
            f"Found numeric literal '{tokens[i].value}' without an instruction.",
            tokens[i],
        )

    def _op_unknown(self, tokens, i):
        raise self._error(
            InterpreterErrorKind.UNKNOWN_TOKEN,
            f"Found unknown token '{tokens[i].value}'.",
            tokens[i],
        )
