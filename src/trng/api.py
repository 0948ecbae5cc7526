from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import InterpreterErrorKind, make_interpreter_error
from .interpreter import Interpreter
from .lexer import Source
from .tape import DEFAULT_TAPE_SIZE


@dataclass(frozen=True)
class RunOptions:
    tape_size: int = DEFAULT_TAPE_SIZE

    def __post_init__(self) -> None:
        if self.tape_size <= 0:
            raise ValueError(f"tape_size must be positive, got {self.tape_size}")


@dataclass(frozen=True)
class RunResult:
    tape: bytes
    pointer: int


def run_string(
    source: Source,
    *,
    options: Optional[RunOptions] = None,
    input_stream: Optional[BinaryIO] = None,
    output_stream: Optional[BinaryIO] = None,
) -> RunResult:
    opts = RunOptions() if options is None else options
    interpreter = Interpreter(opts.tape_size, input_stream=input_stream, output_stream=output_stream)
    interpreter.run(source)
    return RunResult(tape=interpreter.get_data().tobytes(), pointer=int(interpreter.tape.pointer))


def run_file(
    path: str | Path,
    *,
    options: Optional[RunOptions] = None,
    input_stream: Optional[BinaryIO] = None,
    output_stream: Optional[BinaryIO] = None,
) -> RunResult:
    try:
        f = Path(path).open('rb')
    except OSError as e:
        raise make_interpreter_error(kind=InterpreterErrorKind.IO, description=str(e)) from e
    with f:
        return run_string(f, options=options, input_stream=input_stream, output_stream=output_stream)
