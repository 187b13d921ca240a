from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import BinaryIO, Optional

from pydantic import ValidationError

from .config import InterpreterConfig
from .debugger import DebugSession, run_repl
from .errors import InterpreterError
from .problem import read_problem
from .streams import ByteInput, ByteOutput, to_input_bytes

logger = logging.getLogger(__name__)


def _read_source(path: str) -> str:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return source_path.read_text(encoding="latin-1")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _add_limit_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--max-operations",
        type=int,
        help="Maximum number of dispatched instructions (default: $TAPEBF_MAX_OPERATIONS or 100000)",
    )
    group.add_argument(
        "--no-limit",
        action="store_true",
        help="Disable the operation limit",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tape-based byte-cell interpreter")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Execute a program file")
    run_parser.add_argument("source", help="Path to the program source")
    input_group = run_parser.add_mutually_exclusive_group()
    input_group.add_argument("--input", default=None, help="Input string supplied to the program")
    input_group.add_argument("--input-file", default=None, help="File whose bytes are supplied as input")
    _add_limit_arguments(run_parser)

    problem_parser = subparsers.add_parser("problem", help="Execute a program in problem format")
    problem_parser.add_argument("path", nargs="?", help="Problem file (default: stdin)")
    _add_limit_arguments(problem_parser)

    debug_parser = subparsers.add_parser("debug", help="Step through a program interactively")
    debug_parser.add_argument("source", help="Path to the program source")
    debug_parser.add_argument("--input", default="", help="Input string supplied to the program")
    debug_parser.add_argument("--tape-window", type=int, default=10, help="Cells shown on each side of the pointer")
    debug_parser.add_argument("--history-limit", type=int, default=200, help="Number of states kept in history")
    _add_limit_arguments(debug_parser)
    return parser


def _execute(config: InterpreterConfig, code: str, source: ByteInput, sink: BinaryIO) -> int:
    interpreter = config.create_interpreter()
    output = ByteOutput(sink)
    operations = interpreter.execute(code, source, output)
    logger.debug("Dispatched %d operations, wrote %d bytes", operations, output.written)
    return operations


def _report_runtime_error(exc: InterpreterError) -> None:
    print(f"Runtime error ({exc.kind}) at position {exc.position}: {exc.message}", file=sys.stderr)


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    stdout = sys.stdout.buffer

    try:
        config = InterpreterConfig.from_env().override(args.max_operations, unlimited=args.no_limit)
        if args.command == "problem":
            if args.path:
                with open(args.path, "rb") as handle:
                    problem = read_problem(handle)
            else:
                problem = read_problem(sys.stdin.buffer)
            _execute(config, problem.code, ByteInput(problem.input_data), stdout)
            stdout.write(b"\n")
            stdout.flush()
            return 0

        code = _read_source(args.source)
        if args.command == "debug":
            session = DebugSession(
                code,
                input_data=to_input_bytes(args.input),
                tape_window=args.tape_window,
                max_operations=config.max_operations,
                history_limit=args.history_limit,
            )
            run_repl(session)
            return 0

        if args.input_file:
            with open(args.input_file, "rb") as handle:
                _execute(config, code, ByteInput(handle), stdout)
        else:
            source = ByteInput(to_input_bytes(args.input)) if args.input is not None else ByteInput(sys.stdin.buffer)
            _execute(config, code, source, stdout)
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except InterpreterError as exc:
        _report_runtime_error(exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
