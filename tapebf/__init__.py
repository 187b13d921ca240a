from .bf_interpreter import DEFAULT_MAX_OPERATIONS, BrainfuckInterpreter, ExecutionState
from .config import InterpreterConfig
from .debugger import DebugSession
from .errors import (
    BracketMismatch,
    BracketMismatchUnclosed,
    BracketMismatchUnopened,
    InterpreterError,
    OperationLimitExceeded,
    TapeUnderflow,
)
from .problem import Problem, ProblemFormatError, parse_problem, read_problem
from .streams import ByteInput, ByteOutput
from .tape import Tape

__all__ = [
    "BracketMismatch",
    "BracketMismatchUnclosed",
    "BracketMismatchUnopened",
    "BrainfuckInterpreter",
    "ByteInput",
    "ByteOutput",
    "DEFAULT_MAX_OPERATIONS",
    "DebugSession",
    "ExecutionState",
    "InterpreterConfig",
    "InterpreterError",
    "OperationLimitExceeded",
    "Problem",
    "ProblemFormatError",
    "Tape",
    "TapeUnderflow",
    "parse_problem",
    "read_problem",
]
