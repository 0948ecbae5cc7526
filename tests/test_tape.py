#!/usr/bin/env python3
"""
Tape tests: checked movement and arithmetic, byte runs, typed values and I/O.
"""

import io
import os
import sys
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from trng.errors import TapeError, TapeErrorKind
from trng.numeric import F64, I16, U32, U64
from trng.tape import DEFAULT_TAPE_SIZE, Tape


def make_tape(size=16, stdin=b''):
    out = io.BytesIO()
    tape = Tape(size, input_stream=io.BytesIO(stdin), output_stream=out)
    return tape, out


def test_fresh_tape_is_zeroed():
    tape = Tape()
    assert len(tape) == DEFAULT_TAPE_SIZE
    assert tape.pointer == 0
    assert not tape.data.any()


def test_size_must_be_positive():
    with pytest.raises(ValueError):
        Tape(0)


def test_data_view_is_read_only():
    tape, _ = make_tape()
    with pytest.raises(ValueError):
        tape.data[0] = 1


def test_move_forward_and_back():
    tape, _ = make_tape(10)
    tape.move_forward(9)
    assert tape.pointer == 9
    tape.move_backward(4)
    assert tape.pointer == 5
    tape.move_backward(5)
    assert tape.pointer == 0


def test_move_forward_off_the_tape_keeps_pointer():
    tape, _ = make_tape(10)
    tape.move_forward(3)
    with pytest.raises(TapeError) as exc:
        tape.move_forward(7)
    assert exc.value.kind is TapeErrorKind.INDEX
    assert tape.pointer == 3


def test_move_backward_below_zero_keeps_pointer():
    tape, _ = make_tape(10)
    tape.move_forward(2)
    with pytest.raises(TapeError) as exc:
        tape.move_backward(3)
    assert exc.value.kind is TapeErrorKind.INDEX
    assert tape.pointer == 2


def test_increment_then_decrement_restores_cell():
    tape, _ = make_tape()
    tape.increment(200)
    tape.increment(55)
    assert tape.get_current_value() == 255
    tape.decrement(55)
    tape.decrement(200)
    assert tape.get_current_value() == 0


def test_arithmetic_does_not_wrap():
    tape, _ = make_tape()
    tape.increment(250)
    with pytest.raises(TapeError) as exc:
        tape.increment(6)
    assert exc.value.kind is TapeErrorKind.OVERFLOW
    assert tape.get_current_value() == 250

    tape.pointer = 1
    with pytest.raises(TapeError) as exc:
        tape.decrement(1)
    assert exc.value.kind is TapeErrorKind.OVERFLOW
    assert tape.get_current_value() == 0


def test_tape_error_message():
    tape, _ = make_tape()
    with pytest.raises(TapeError) as exc:
        tape.move_backward(1)
    assert str(exc.value).startswith("Tape Error [Index error]: ")


def test_set_string_then_write_run():
    tape, out = make_tape()
    tape.set_string("Hello")
    assert tape.pointer == 5
    assert bytes(tape.data[:6]) == b"Hello\x00"

    tape.move_backward(5)
    tape.write_run_until_null()
    assert out.getvalue() == b"Hello"
    assert tape.pointer == 5


def test_set_string_stores_utf8_bytes():
    tape, _ = make_tape()
    tape.set_string("é")
    assert bytes(tape.data[:2]) == b"\xc3\xa9"
    assert tape.pointer == 2


def test_set_string_can_end_one_past_the_tape():
    tape, _ = make_tape(3)
    tape.set_string("abc")
    assert tape.pointer == 3
    with pytest.raises(TapeError):
        tape.get_current_value()


def test_set_string_overflowing_the_tape():
    tape, _ = make_tape(3)
    with pytest.raises(TapeError) as exc:
        tape.set_string("abcd")
    assert exc.value.kind is TapeErrorKind.INDEX
    assert bytes(tape.data) == b"abc"


def test_write_run_on_zero_cell_writes_nothing():
    tape, out = make_tape()
    tape.write_run_until_null()
    assert out.getvalue() == b""
    assert tape.pointer == 0


def test_clear_run_until_null():
    tape, _ = make_tape()
    tape.set_string("Hi")
    tape.move_backward(2)
    tape.clear_run_until_null()
    assert not tape.data.any()
    assert tape.pointer == 2


def test_clear_run_on_zero_cell_still_steps():
    tape, _ = make_tape()
    tape.clear_run_until_null()
    assert tape.pointer == 1


def test_write_cell():
    tape, out = make_tape()
    tape.increment(65)
    tape.write_cell()
    tape.write_cell()
    assert out.getvalue() == b"AA"


def test_typed_set_then_write():
    tape, out = make_tape()
    tape.set_as(U32, 4294967295)
    assert tape.pointer == 4
    tape.move_backward(4)
    tape.write_as(U32)
    assert out.getvalue() == b"4294967295"
    assert tape.pointer == 0


def test_typed_write_reads_big_endian():
    tape, out = make_tape()
    tape.set_string(b"\xff\xfe")
    tape.move_backward(2)
    tape.write_as(I16)
    assert out.getvalue() == b"-2"


def test_typed_float_write():
    tape, out = make_tape()
    tape.set_as(F64, 1.5)
    tape.move_backward(8)
    tape.write_as(F64)
    assert out.getvalue() == b"1.5"


def test_typed_access_past_the_end_is_rejected_up_front():
    tape, out = make_tape(8)
    tape.move_forward(4)
    with pytest.raises(TapeError) as exc:
        tape.set_as(U64, 1)
    assert exc.value.kind is TapeErrorKind.INDEX
    assert not tape.data.any()
    assert tape.pointer == 4

    with pytest.raises(TapeError):
        tape.write_as(U64)
    assert out.getvalue() == b""


def test_read_byte():
    tape, _ = make_tape(stdin=b"AB")
    tape.read_byte_from_input()
    assert tape.get_current_value() == 65
    assert tape.pointer == 0
    tape.read_byte_from_input()
    assert tape.get_current_value() == 66


def test_read_byte_at_eof_leaves_cell():
    tape, _ = make_tape(stdin=b"")
    tape.increment(9)
    tape.read_byte_from_input()
    assert tape.get_current_value() == 9


def test_read_line_stops_at_newline():
    tape, _ = make_tape(stdin=b"hi\nrest")
    tape.read_line_into_tape()
    assert bytes(tape.data[:3]) == b"hi\x00"
    assert tape.pointer == 2
    tape.read_line_into_tape()
    assert bytes(tape.data[2:6]) == b"rest"
    assert tape.pointer == 6


def test_read_line_longer_than_tape():
    tape, _ = make_tape(2, stdin=b"abc\n")
    with pytest.raises(TapeError) as exc:
        tape.read_line_into_tape()
    assert exc.value.kind is TapeErrorKind.INDEX


def test_write_failure_is_io_error():
    class Closed(io.BytesIO):
        def write(self, data):
            raise OSError("broken pipe")

    tape = Tape(4, output_stream=Closed())
    tape.increment(1)
    with pytest.raises(TapeError) as exc:
        tape.write_cell()
    assert exc.value.kind is TapeErrorKind.IO


def test_reset():
    tape, _ = make_tape()
    tape.set_string("abc")
    tape.reset()
    assert tape.pointer == 0
    assert not tape.data.any()
