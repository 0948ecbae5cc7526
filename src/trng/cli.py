from __future__ import annotations

import argparse
import logging
import sys
import time

from pathlib import Path
from typing import List, Optional, Sequence

from .errors import TRNGError
from .interpreter import Interpreter
from .tape import DEFAULT_TAPE_SIZE
from .translator import translate

LOG = logging.getLogger("trng")


def format_cells(cells: Sequence[int], count: int, per_row: int = 8) -> str:
    """Render the first ``count`` cells as rows of ``per_row`` decimal values."""
    shown = [int(b) for b in cells[:count]]
    rows = []
    for i in range(0, len(shown), per_row):
        row = " ".join(f"{b:3d}" for b in shown[i:i + per_row])
        rows.append(f"{i:5d}: {row}")
    return "\n".join(rows)


def _read_program(path: str) -> bytes:
    if path == '-':
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return value


def _non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {value}")
    return value


def _cmd_run(args: argparse.Namespace) -> int:
    code = _read_program(args.file)
    interpreter = Interpreter(args.tape_size)

    start = time.perf_counter()
    status = 0
    try:
        interpreter.run(code)
    except TRNGError as e:
        print(e, file=sys.stderr)
        status = 1
    elapsed = time.perf_counter() - start
    LOG.info("Execution took %.2f ms", elapsed * 1000)

    if args.dump:
        print("\n================", file=sys.stderr)
        print(f"pointer: {interpreter.tape.pointer}", file=sys.stderr)
        print(format_cells(interpreter.get_data(), args.dump), file=sys.stderr)
    return status


def _cmd_translate(args: argparse.Namespace) -> int:
    code = _read_program(args.file)
    try:
        bf = translate(code)
    except TRNGError as e:
        print(e, file=sys.stderr)
        return 1
    sys.stdout.write(bf)
    sys.stdout.write("\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trng", description="TRNG interpreter - Brainfuck's pretty sister.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Execute a TRNG program")
    run.add_argument("file", help="TRNG source file ('-' reads stdin)")
    run.add_argument("--tape-size", type=_positive_int, default=DEFAULT_TAPE_SIZE,
                     help=f"Number of tape cells (default {DEFAULT_TAPE_SIZE})")
    run.add_argument("--dump", type=_non_negative_int, default=0, metavar="N",
                     help="Print the pointer and the first N cells to stderr after the run")
    run.set_defaults(func=_cmd_run)

    tr = sub.add_parser("translate", help="Translate a TRNG program to Brainfuck")
    tr.add_argument("file", help="TRNG source file ('-' reads stdin)")
    tr.set_defaults(func=_cmd_translate)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except OSError as e:
        print(f"Couldn't read program: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
