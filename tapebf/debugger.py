from __future__ import annotations

import shlex
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .bf_interpreter import DEFAULT_MAX_OPERATIONS, BrainfuckInterpreter, ExecutionState
from .errors import InterpreterError, OperationLimitExceeded


@dataclass
class DebugSession:
    """Single-stepping wrapper around ``BrainfuckInterpreter.step``.

    Keeps a bounded history of states and stops on breakpoints, which are
    program-counter values checked after each dispatched instruction.
    """

    code: str
    input_data: bytes = b""
    tape_window: int = 10
    max_operations: Optional[int] = DEFAULT_MAX_OPERATIONS
    history_limit: int = 200

    def __post_init__(self) -> None:
        self.breakpoints: set[int] = set()
        self.history: List[ExecutionState] = []
        self.hit_breakpoint: Optional[int] = None
        self._init_interpreter()

    def _init_interpreter(self) -> None:
        self.interpreter = BrainfuckInterpreter(max_operations=self.max_operations)
        self.step_iter = self.interpreter.step(
            self.code,
            input_data=self.input_data,
            tape_window=self.tape_window,
        )
        self.finished = False
        self.error: Optional[InterpreterError] = None
        self.last_state = self._initial_state()
        self._record_state(self.last_state)

    def restart(self) -> None:
        self.history.clear()
        self.hit_breakpoint = None
        self._init_interpreter()

    def _initial_state(self) -> ExecutionState:
        return ExecutionState(
            step=0,
            pc=0,
            command=None,
            pointer=0,
            tape_start=0,
            tape=[0],
            output=b"",
            code_length=len(self.code),
        )

    def _record_state(self, state: ExecutionState) -> None:
        self.history.append(state)
        if len(self.history) > self.history_limit:
            self.history.pop(0)
        self.last_state = state

    def step_forward(self, count: int = 1) -> Sequence[ExecutionState]:
        """Advance up to ``count`` instructions.

        An ``InterpreterError`` finishes the session, is kept on ``error`` and
        is re-raised to the caller.
        """
        states: List[ExecutionState] = []
        if count <= 0:
            return states
        self.hit_breakpoint = None
        for _ in range(count):
            if self.finished:
                break
            try:
                state = next(self.step_iter)
            except StopIteration:
                self.finished = True
                break
            except InterpreterError as exc:
                self.finished = True
                self.error = exc
                raise
            self._record_state(state)
            states.append(state)
            if state.command is None:
                self.finished = True
                break
            if state.pc in self.breakpoints:
                self.hit_breakpoint = state.pc
                break
        return states

    def run_until_break(self, limit: Optional[int] = None) -> Sequence[ExecutionState]:
        states: List[ExecutionState] = []
        while limit is None or len(states) < limit:
            step_states = self.step_forward(1)
            if not step_states:
                break
            states.extend(step_states)
            if self.hit_breakpoint is not None:
                break
        return states

    def current_state(self) -> ExecutionState:
        return self.last_state

    def add_breakpoint(self, pc: int) -> None:
        self.breakpoints.add(pc)

    def remove_breakpoint(self, pc: int) -> bool:
        if pc in self.breakpoints:
            self.breakpoints.remove(pc)
            return True
        return False

    def clear_breakpoints(self) -> None:
        self.breakpoints.clear()

    def list_breakpoints(self) -> List[int]:
        return sorted(self.breakpoints)

    def is_finished(self) -> bool:
        return self.finished


def format_state(state: ExecutionState, code: str) -> str:
    cmd_display = state.command if state.command is not None else "(init)"
    lines = [
        f"step={state.step} pc={state.pc}/{state.code_length} command={cmd_display!r} pointer={state.pointer}"
    ]
    if state.output:
        lines.append(f"output={state.output.decode('latin-1')!r}")
    tape_parts: List[str] = []
    for offset, value in enumerate(state.tape):
        index = state.tape_start + offset
        cell = f"{index}:{value:03}"
        tape_parts.append(f"[{cell}]" if index == state.pointer else f" {cell} ")
    lines.append("tape=" + " ".join(tape_parts))
    lines.append(f"code={_format_code_window(code, state.pc)}")
    return "\n".join(lines)


def _format_code_window(code: str, pc: int, window: int = 16) -> str:
    if not code:
        return "(empty)"
    start = max(0, pc - window)
    end = min(len(code), pc + window + 1)
    pieces = [f"[{code[i]}]" if i == pc else code[i] for i in range(start, end)]
    if pc >= len(code):
        pieces.append("[END]")
    return "".join(pieces)


HELP_TEXT = (
    "Commands:\n"
    "  next [N]    : execute N instructions (default 1)\n"
    "  run [N]     : run until a breakpoint, the end, or N instructions\n"
    "  state       : show the current state\n"
    "  history [N] : show the last N states\n"
    "  break PC    : set a breakpoint at PC\n"
    "  breaks      : list breakpoints\n"
    "  clear [PC]  : remove one breakpoint, or all of them\n"
    "  restart     : start the program over\n"
    "  quit/exit   : leave the debugger\n"
)


def run_repl(session: DebugSession) -> None:
    print("tapebf debugger (type 'help' for commands)")
    _print_state(session.current_state(), session)
    while True:
        try:
            line = input("(dbg) ").strip()
        except EOFError:
            print()
            break
        if not line:
            continue
        parts = shlex.split(line)
        command, args = parts[0].lower(), parts[1:]
        try:
            if command in {"n", "next"}:
                count = max(1, int(args[0])) if args else 1
                states = session.step_forward(count)
                if states:
                    _print_state(states[-1], session)
                elif session.is_finished():
                    print("Program has finished.")
            elif command in {"r", "run"}:
                limit = int(args[0]) if args else None
                states = session.run_until_break(limit)
                if states:
                    _print_state(states[-1], session)
                if session.hit_breakpoint is not None:
                    print(f"Stopped at breakpoint {session.hit_breakpoint}.")
                elif session.is_finished():
                    print("Program has finished.")
            elif command == "state":
                _print_state(session.current_state(), session)
            elif command == "history":
                count = int(args[0]) if args else 10
                for state in session.history[-count:]:
                    _print_state(state, session)
            elif command == "break":
                if not args:
                    print("Usage: break PC")
                    continue
                session.add_breakpoint(int(args[0]))
            elif command == "breaks":
                points = session.list_breakpoints()
                print("Breakpoints: " + (", ".join(map(str, points)) if points else "(none)"))
            elif command == "clear":
                if not args:
                    session.clear_breakpoints()
                elif not session.remove_breakpoint(int(args[0])):
                    print(f"No breakpoint at {args[0]}.")
            elif command == "restart":
                session.restart()
                _print_state(session.current_state(), session)
            elif command in {"q", "quit", "exit"}:
                break
            elif command == "help":
                print(HELP_TEXT)
            else:
                print("Unknown command; see 'help'.")
        except ValueError:
            print("Invalid number.", file=sys.stderr)
        except OperationLimitExceeded as exc:
            print(f"Operation limit reached: {exc}", file=sys.stderr)
        except InterpreterError as exc:
            print(f"Runtime error ({exc.kind}): {exc}", file=sys.stderr)


def _print_state(state: ExecutionState, session: DebugSession) -> None:
    print("-" * 40)
    print(format_state(state, session.code))


__all__ = ["DebugSession", "format_state", "run_repl"]
