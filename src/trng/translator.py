#
# TRNG -> Brainfuck translator (outputs STANDARD Brainfuck).
#
# Only the instructions Brainfuck can express are accepted:
#   pfw n / pbw n -> '>' / '<' repeated n times
#   inc n / dec n -> '+' / '-' repeated n times
#   wrt / rdi     -> '.' / ','
#   lop B pol     -> B[B]   (TRNG loops test at 'pol', so the body always runs once)
#   lop B <eof>   -> B      (an unclosed loop runs its body once and the program ends)
#
# NOTE: TRNG arithmetic and pointer moves are checked, Brainfuck's usually wrap.
#       Programs that rely on a TRNG error being raised do not translate faithfully.
#
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Union

from .errors import TranslatorErrorKind, make_translator_error
from .lexer import Source, Token, TokenKind, read_source, tokenize
from .numeric import U8, U64, TapeNum


# ---------------- IR Nodes ----------------
@dataclass(frozen=True)
class Add:
    n: int  # net +/- on current cell


@dataclass(frozen=True)
class Move:
    n: int  # net >/<


@dataclass(frozen=True)
class IO:
    op: str  # '.' or ','


@dataclass(frozen=True)
class Loop:
    body: List["Node"]


Node = Union[Add, Move, IO, Loop]

SUPPORTED = frozenset({
    TokenKind.PFW, TokenKind.PBW, TokenKind.INC, TokenKind.DEC,
    TokenKind.WRT, TokenKind.RDI, TokenKind.LOP, TokenKind.POL,
})


# ---------------- Emit ----------------
def emit(nodes: List[Node]) -> str:
    out: List[str] = []
    for n in nodes:
        if isinstance(n, Add):
            out.append(("+" * n.n) if n.n > 0 else ("-" * (-n.n)))
        elif isinstance(n, Move):
            out.append((">" * n.n) if n.n > 0 else ("<" * (-n.n)))
        elif isinstance(n, IO):
            out.append(n.op)
        elif isinstance(n, Loop):
            out.append("[" + emit(n.body) + "]")
    return "".join(out)


# ---------------- Parser: TRNG -> IR ----------------
def _operand(tokens: List[Token], i: int, num: TapeNum) -> int:
    if i + 1 >= len(tokens):
        raise make_translator_error(
            kind=TranslatorErrorKind.MALFORMED_OPERAND,
            description=f"Expected 'num' after '{tokens[i].value}'. Found nothing instead.",
            line=tokens[i].line,
            column=tokens[i].column,
        )
    tok = tokens[i + 1]
    if tok.kind is not TokenKind.NUM:
        raise make_translator_error(
            kind=TranslatorErrorKind.MALFORMED_OPERAND,
            description=f"Expected 'num'. Found '{tok.value}'.",
            line=tok.line,
            column=tok.column,
        )
    try:
        return int(num.parse(tok.value))
    except ValueError as e:
        raise make_translator_error(
            kind=TranslatorErrorKind.MALFORMED_OPERAND,
            description=f"Invalid {num.name} operand '{tok.value}': {e}",
            line=tok.line,
            column=tok.column,
        ) from e


def parse_trng(tokens: List[Token]) -> List[Node]:
    stack: List[List[Node]] = [[]]

    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if tok.kind not in SUPPORTED:
            raise make_translator_error(
                kind=TranslatorErrorKind.NOT_SUPPORTED,
                description=f"The token '{tok.value}' is not supported in translation.",
                line=tok.line,
                column=tok.column,
            )

        if tok.kind is TokenKind.LOP:
            stack.append([])
        elif tok.kind is TokenKind.POL:
            if len(stack) == 1:
                raise make_translator_error(
                    kind=TranslatorErrorKind.LOOP_STACK_UNDERFLOW,
                    description="Found 'pol' without a matching 'lop'.",
                    line=tok.line,
                    column=tok.column,
                )
            body = stack.pop()
            stack[-1].extend(body)
            stack[-1].append(Loop(body))
        elif tok.kind is TokenKind.WRT:
            stack[-1].append(IO("."))
        elif tok.kind is TokenKind.RDI:
            stack[-1].append(IO(","))
        elif tok.kind is TokenKind.PFW:
            stack[-1].append(Move(_operand(tokens, i, U64)))
            i += 1
        elif tok.kind is TokenKind.PBW:
            stack[-1].append(Move(-_operand(tokens, i, U64)))
            i += 1
        elif tok.kind is TokenKind.INC:
            stack[-1].append(Add(_operand(tokens, i, U8)))
            i += 1
        elif tok.kind is TokenKind.DEC:
            stack[-1].append(Add(-_operand(tokens, i, U8)))
            i += 1
        i += 1

    # Loops still open at the end ran their body exactly once.
    while len(stack) > 1:
        body = stack.pop()
        stack[-1].extend(body)
    return stack[0]


def translate(source: Source) -> str:
    try:
        data = read_source(source)
    except OSError as e:
        raise make_translator_error(kind=TranslatorErrorKind.IO, description=str(e)) from e
    return emit(parse_trng(tokenize(data)))
