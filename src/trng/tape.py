from __future__ import annotations

import logging
import sys

from typing import BinaryIO, Optional, Union

import numpy as np

from .errors import TapeError, TapeErrorKind
from .numeric import Number, TapeNum

DEFAULT_TAPE_SIZE = 30000

logger = logging.getLogger("trng.tape")
logger.addHandler(logging.NullHandler())


class Tape:
    """
    Fixed-size byte tape with a movable read/write head.

    Every operation is checked: moving off the tape, reading past its end and
    cell arithmetic outside 0..255 raise TapeError instead of wrapping.

    The pointer may rest one past the last cell after an instruction that
    advances over a run of cells (set, rda, wra, clr). Touching a cell from
    there raises an Index error.
    """

    def __init__(
        self,
        size: int = DEFAULT_TAPE_SIZE,
        *,
        input_stream: Optional[BinaryIO] = None,
        output_stream: Optional[BinaryIO] = None,
    ):
        if size <= 0:
            raise ValueError(f"Tape size must be positive, got {size}")
        self.cells = np.zeros(size, dtype=np.uint8)
        self.pointer = 0
        self.input_stream = input_stream
        self.output_stream = output_stream

    def __len__(self) -> int:
        return len(self.cells)

    @property
    def data(self) -> np.ndarray:
        """Read-only view of all cells."""
        view = self.cells.view()
        view.flags.writeable = False
        return view

    def reset(self) -> None:
        self.cells.fill(0)
        self.pointer = 0
        logger.debug("Tape reset (%d cells)", len(self.cells))

    # ===== Cell access =====

    def get_current_value(self) -> int:
        if not 0 <= self.pointer < len(self.cells):
            raise TapeError(
                f"Getting the current value at pointer index {self.pointer} is invalid.",
                TapeErrorKind.INDEX,
            )
        return int(self.cells[self.pointer])

    def _store(self, byte: int) -> None:
        if not 0 <= self.pointer < len(self.cells):
            raise TapeError(
                f"Storing a value at pointer index {self.pointer} is invalid.",
                TapeErrorKind.INDEX,
            )
        self.cells[self.pointer] = byte

    def _step_forward(self) -> None:
        if self.pointer >= len(self.cells):
            raise TapeError(
                "Moving the pointer 1 step forward would result in overshooting the tape.",
                TapeErrorKind.INDEX,
            )
        self.pointer += 1

    def _require_width(self, width: int) -> None:
        if self.pointer + width > len(self.cells):
            raise TapeError(
                f"Accessing {width} cell(s) from pointer index {self.pointer} would overshoot the tape "
                f"({len(self.cells)} cells).",
                TapeErrorKind.INDEX,
            )

    # ===== Pointer movement =====

    def move_forward(self, steps: int) -> None:
        if self.pointer + steps >= len(self.cells):
            raise TapeError(
                f"Moving the pointer {steps} step(s) forward would result in overshooting the tape.",
                TapeErrorKind.INDEX,
            )
        self.pointer += steps

    def move_backward(self, steps: int) -> None:
        if steps > self.pointer:
            raise TapeError(
                f"Moving the pointer {steps} step(s) backward would result in overshooting the tape.",
                TapeErrorKind.INDEX,
            )
        self.pointer -= steps

    # ===== Cell arithmetic =====

    def increment(self, by: int) -> None:
        value = self.get_current_value() + by
        if value > 255:
            raise TapeError(
                f"Adding {by} to the current cell value would result in an overflow.",
                TapeErrorKind.OVERFLOW,
            )
        self.cells[self.pointer] = value

    def decrement(self, by: int) -> None:
        value = self.get_current_value() - by
        if value < 0:
            raise TapeError(
                f"Subtracting {by} from the current cell value would result in an overflow.",
                TapeErrorKind.OVERFLOW,
            )
        self.cells[self.pointer] = value

    # ===== Output =====

    def _output(self) -> BinaryIO:
        return self.output_stream if self.output_stream is not None else sys.stdout.buffer

    def _input(self) -> BinaryIO:
        return self.input_stream if self.input_stream is not None else sys.stdin.buffer

    def _emit(self, data: bytes) -> None:
        try:
            self._output().write(data)
        except OSError as e:
            raise TapeError(str(e), TapeErrorKind.IO) from e

    def flush(self) -> None:
        try:
            self._output().flush()
        except OSError as e:
            raise TapeError(str(e), TapeErrorKind.IO) from e

    def write_cell(self) -> None:
        self._emit(bytes([self.get_current_value()]))

    def write_as(self, num: TapeNum) -> None:
        """Emit the decimal text of the ``num.width`` cells at the pointer.

        The pointer does not move.
        """
        self.get_current_value()
        self._require_width(num.width)
        raw = self.cells[self.pointer:self.pointer + num.width].tobytes()
        self._emit(num.format(num.decode(raw)).encode('ascii'))

    def write_run_until_null(self) -> None:
        while True:
            b = self.get_current_value()
            if b == 0:
                break
            self._emit(bytes([b]))
            self._step_forward()

    # ===== Writing values =====

    def set_string(self, text: Union[str, bytes]) -> None:
        data = text.encode('utf-8', errors='surrogateescape') if isinstance(text, str) else text
        for b in data:
            self._store(b)
            self._step_forward()

    def set_as(self, num: TapeNum, value: Number) -> None:
        self.get_current_value()
        self._require_width(num.width)
        for b in num.encode(value):
            self._store(b)
            self._step_forward()

    def clear_run_until_null(self) -> None:
        self._store(0)
        while True:
            self._step_forward()
            if self.get_current_value() == 0:
                break
            self._store(0)

    # ===== Input =====

    def _read_byte(self) -> Optional[int]:
        try:
            chunk = self._input().read(1)
        except OSError as e:
            raise TapeError(str(e), TapeErrorKind.IO) from e
        if not chunk:
            return None
        return chunk[0]

    def read_byte_from_input(self) -> None:
        b = self._read_byte()
        if b is not None:
            self._store(b)

    def read_line_into_tape(self) -> None:
        while True:
            b = self._read_byte()
            if b is None or b == 10:
                break
            self._store(b)
            self._step_forward()
