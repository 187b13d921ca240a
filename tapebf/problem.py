"""Reader for the judge-style problem format.

Layout::

    <input byte count> <instruction line count>
    <program input>$
    <instruction line 1>
    ...

The input runs up to the first ``$``; the instruction lines are joined
without their terminators. Text is handled as latin-1 so that each
character stands for exactly one byte.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import IO, Union

INPUT_TERMINATOR = "$"
# ASCII whitespace only; latin-1 \xa0 and \x85 are input bytes.
_WS = r"[ \t\n\r\f\v]"
_TOKEN = r"([^ \t\n\r\f\v]+)"
_HEADER_RE = re.compile(f"{_WS}*{_TOKEN}{_WS}+{_TOKEN}{_WS}*")
_LEADING_WS_RE = re.compile(f"{_WS}*")


class ProblemFormatError(ValueError):
    pass


@dataclass(frozen=True)
class Problem:
    input_data: bytes
    code: str


def _parse_count(token: str, label: str) -> int:
    if not token.isdecimal():
        raise ProblemFormatError(f"Invalid {label}: {token!r}")
    return int(token)


def parse_problem(text: str) -> Problem:
    header = _HEADER_RE.match(text)
    if header is None:
        raise ProblemFormatError("Missing input count and line count header")
    input_count = _parse_count(header.group(1), "input count")
    line_count = _parse_count(header.group(2), "line count")
    position = header.end()

    terminator = text.find(INPUT_TERMINATOR, position)
    if terminator == -1:
        raw_input = text[position:]
        position = len(text)
    else:
        raw_input = text[position:terminator]
        position = terminator + 1
    if len(raw_input) != input_count:
        raise ProblemFormatError(
            f"Invalid input, expected {input_count} characters, received {len(raw_input)}"
        )

    position = _LEADING_WS_RE.match(text, position).end()
    lines = text[position:].split("\n")
    if lines[-1] == "":
        lines.pop()
    lines = lines[:line_count]
    if len(lines) != line_count:
        raise ProblemFormatError(f"Expected {line_count} lines, received {len(lines)}")

    return Problem(input_data=raw_input.encode("latin-1"), code="".join(lines))


def read_problem(stream: IO[Union[str, bytes]]) -> Problem:
    data = stream.read()
    if isinstance(data, bytes):
        data = data.decode("latin-1")
    return parse_problem(data)


__all__ = ["INPUT_TERMINATOR", "Problem", "ProblemFormatError", "parse_problem", "read_problem"]
