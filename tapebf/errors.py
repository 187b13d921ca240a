from __future__ import annotations

from typing import Optional


class InterpreterError(RuntimeError):
    """Base class for every failure that aborts an interpretation run."""

    kind = "interpreter_error"

    def __init__(self, message: str, position: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at position {self.position})"


class TapeUnderflow(InterpreterError):
    kind = "tape_underflow"

    def __init__(self, message: str = "Pointer moved before start of tape", position: Optional[int] = None) -> None:
        super().__init__(message, position)


class BracketMismatch(InterpreterError):
    kind = "bracket_mismatch"


class BracketMismatchUnopened(BracketMismatch):
    kind = "bracket_mismatch_unopened"

    def __init__(self, position: Optional[int] = None) -> None:
        super().__init__("Unmatched ']' with no open loop", position)


class BracketMismatchUnclosed(BracketMismatch):
    kind = "bracket_mismatch_unclosed"

    def __init__(self, position: Optional[int] = None) -> None:
        super().__init__("Unmatched '[' reached end of program while skipping", position)


class OperationLimitExceeded(InterpreterError):
    """Raised when execution exceeds the configured dispatch budget."""

    kind = "operation_limit_exceeded"

    def __init__(self, limit: int, position: Optional[int] = None) -> None:
        super().__init__(f"Program exceeded allowed operation count of {limit}", position)
        self.limit = limit


__all__ = [
    "BracketMismatch",
    "BracketMismatchUnclosed",
    "BracketMismatchUnopened",
    "InterpreterError",
    "OperationLimitExceeded",
    "TapeUnderflow",
]
