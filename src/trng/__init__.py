from .api import RunOptions, RunResult, run_file, run_string
from .errors import InterpreterError, InterpreterErrorKind, TapeError, TapeErrorKind, TranslatorError, TRNGError
from .interpreter import Interpreter
from .lexer import Token, TokenKind, tokenize
from .tape import DEFAULT_TAPE_SIZE, Tape
from .translator import translate

__all__ = [
    'Interpreter',
    'Tape',
    'DEFAULT_TAPE_SIZE',
    'Token',
    'TokenKind',
    'tokenize',
    'translate',
    'RunOptions',
    'RunResult',
    'run_string',
    'run_file',
    'TRNGError',
    'TapeError',
    'TapeErrorKind',
    'InterpreterError',
    'InterpreterErrorKind',
    'TranslatorError',
]
