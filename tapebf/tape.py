from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .errors import TapeUnderflow

CELL_MODULUS = 256


@dataclass
class Tape:
    """Right-growing sequence of unsigned byte cells with a single pointer.

    The tape starts with one zero cell and only ever grows by appending a
    zero cell when the pointer steps past the right edge. Moving left of the
    first cell raises ``TapeUnderflow`` and leaves the pointer untouched.
    """

    cells: List[int] = field(default_factory=lambda: [0])
    pointer: int = 0

    def move_right(self) -> None:
        if self.pointer + 1 == len(self.cells):
            self.cells.append(0)
        self.pointer += 1

    def move_left(self) -> None:
        if self.pointer == 0:
            raise TapeUnderflow()
        self.pointer -= 1

    def increment(self) -> None:
        self.cells[self.pointer] = (self.cells[self.pointer] + 1) % CELL_MODULUS

    def decrement(self) -> None:
        self.cells[self.pointer] = (self.cells[self.pointer] - 1) % CELL_MODULUS

    def read_cell(self) -> int:
        return self.cells[self.pointer]

    def write_cell(self, value: int) -> None:
        if not 0 <= value < CELL_MODULUS:
            raise ValueError(f"Cell value out of range: {value}")
        self.cells[self.pointer] = value

    def window(self, radius: int) -> Tuple[int, List[int]]:
        start = max(0, self.pointer - radius)
        end = min(len(self.cells), self.pointer + radius + 1)
        return start, self.cells[start:end].copy()

    def __len__(self) -> int:
        return len(self.cells)


__all__ = ["CELL_MODULUS", "Tape"]
