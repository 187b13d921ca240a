from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from .errors import (
    BracketMismatchUnclosed,
    BracketMismatchUnopened,
    InterpreterError,
    OperationLimitExceeded,
    TapeUnderflow,
)
from .streams import ByteInput, ByteOutput, ByteSource
from .tape import Tape

logger = logging.getLogger(__name__)

DEFAULT_MAX_OPERATIONS = 100_000
OPCODES = frozenset("+-<>.,[]")


@dataclass
class ExecutionState:
    step: int
    pc: int
    command: Optional[str]
    pointer: int
    tape_start: int
    tape: List[int]
    output: bytes
    code_length: int


@dataclass
class BrainfuckInterpreter:
    """Executes a program against a growable tape.

    ``max_operations`` bounds the number of dispatched instructions; ``None``
    disables the guard. Characters outside ``OPCODES`` are skipped and do
    not count towards the bound.
    """

    max_operations: Optional[int] = DEFAULT_MAX_OPERATIONS

    tape: Tape = field(init=False, repr=False)
    loop_stack: List[int] = field(init=False, repr=False)
    operations: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.tape = Tape()
        self.loop_stack = []
        self.operations = 0

    def execute(
        self,
        instructions: Sequence[str],
        input_stream: ByteInput,
        output_stream: ByteOutput,
    ) -> int:
        """Run ``instructions`` to completion and return the dispatch count.

        Output already written before an ``InterpreterError`` stays written.
        """
        self.reset()
        logger.debug("Executing %d instruction characters", len(instructions))
        try:
            for _ in self._dispatch_loop(instructions, input_stream, output_stream):
                pass
        except InterpreterError as exc:
            logger.debug("Run aborted after %d operations: %s", self.operations, exc)
            raise
        logger.debug("Run finished after %d operations", self.operations)
        return self.operations

    def run(self, code: str, input_data: Optional[ByteSource] = None) -> bytes:
        output = ByteOutput()
        self.execute(code, ByteInput(input_data), output)
        return output.getvalue()

    def step(
        self,
        code: str,
        input_data: Optional[ByteSource] = None,
        tape_window: int = 10,
    ) -> Iterator[ExecutionState]:
        self.reset()
        input_stream = ByteInput(input_data)
        output = ByteOutput()
        for pc, command in self._dispatch_loop(code, input_stream, output):
            yield self._snapshot(pc, command, len(code), tape_window, output)

        # Emit final snapshot indicating completion
        yield self._snapshot(len(code), None, len(code), tape_window, output)

    def _dispatch_loop(
        self,
        code: Sequence[str],
        input_stream: ByteInput,
        output_stream: ByteOutput,
    ) -> Iterator[Tuple[int, str]]:
        pc = 0
        code_length = len(code)
        while pc < code_length:
            command = code[pc]
            if command not in OPCODES:
                pc += 1
                continue
            if self.max_operations is not None and self.operations >= self.max_operations:
                raise OperationLimitExceeded(self.max_operations, position=pc)

            pc = self._execute_instruction(command, pc, code, input_stream, output_stream)
            self.operations += 1
            yield pc, command

    def _execute_instruction(
        self,
        command: str,
        pc: int,
        code: Sequence[str],
        input_stream: ByteInput,
        output_stream: ByteOutput,
    ) -> int:
        tape = self.tape
        if command == "+":
            tape.increment()
        elif command == "-":
            tape.decrement()
        elif command == "<":
            try:
                tape.move_left()
            except TapeUnderflow as exc:
                exc.position = pc
                raise
        elif command == ">":
            tape.move_right()
        elif command == ".":
            output_stream.write_byte(tape.read_cell())
        elif command == ",":
            # Exhausted input leaves the cell as it was.
            if input_stream.has_next():
                tape.write_cell(input_stream.read_next())
        elif command == "[":
            if tape.read_cell():
                self.loop_stack.append(pc)
            else:
                pc = self._find_loop_end(code, pc)
        elif command == "]":
            if not self.loop_stack:
                raise BracketMismatchUnopened(position=pc)
            if tape.read_cell():
                # Resume just after the matching '['; the entry stays on the stack.
                return self.loop_stack[-1] + 1
            self.loop_stack.pop()
        return pc + 1

    @staticmethod
    def _find_loop_end(code: Sequence[str], start: int) -> int:
        depth = 0
        for index in range(start, len(code)):
            char = code[index]
            if char == "[":
                depth += 1
            elif char == "]":
                depth -= 1
                if depth == 0:
                    return index
        raise BracketMismatchUnclosed(position=start)

    def _snapshot(
        self,
        pc: int,
        command: Optional[str],
        code_length: int,
        tape_window: int,
        output: ByteOutput,
    ) -> ExecutionState:
        start, tape_view = self.tape.window(tape_window)
        return ExecutionState(
            step=self.operations,
            pc=pc,
            command=command,
            pointer=self.tape.pointer,
            tape_start=start,
            tape=tape_view,
            output=output.getvalue(),
            code_length=code_length,
        )


__all__ = [
    "BrainfuckInterpreter",
    "DEFAULT_MAX_OPERATIONS",
    "ExecutionState",
    "OPCODES",
]
