from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Iterator, List, Sequence, Tuple, TypeVar

T = TypeVar('T')
Coord = Tuple[int, int]


@dataclass(frozen=True)
class Grid(Generic[T]):
    """Immutable rectangular grid of cells stored row-major."""
    width: int
    height: int
    cells: Tuple[T, ...]  # row-major, length == width * height

    @classmethod
    def filled(cls, width: int, height: int, value: T) -> 'Grid[T]':
        return cls(width=width, height=height, cells=tuple(value for _ in range(width * height)))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[T]]) -> 'Grid[T]':
        """Builds a grid from a list of equally sized rows."""
        height = len(rows)
        width = len(rows[0]) if height else 0
        flat: List[T] = []
        for row in rows:
            if len(row) != width:
                raise ValueError('All rows must have the same length')
            flat.extend(row)
        return cls(width=width, height=height, cells=tuple(flat))

    def index(self, r: int, c: int) -> int:
        """Calculates the 1D index for a given row and column."""
        return r * self.width + c

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.height and 0 <= c < self.width

    def at(self, r: int, c: int) -> T:
        if not self.in_bounds(r, c):
            raise IndexError(f'cell ({r}, {c}) outside {self.height}x{self.width} grid')
        return self.cells[self.index(r, c)]

    def coords(self) -> Iterable[Coord]:
        """Iterates over all coordinates on the grid in row-major order."""
        for r in range(self.height):
            for c in range(self.width):
                yield (r, c)

    def rows(self) -> List[List[T]]:
        """Returns a mutable list-of-lists copy, used by the backtracking solvers."""
        return [list(self.cells[r * self.width:(r + 1) * self.width]) for r in range(self.height)]

    def replace(self, r: int, c: int, value: T) -> 'Grid[T]':
        """Returns a copy with one cell replaced; the receiver is left untouched."""
        if not self.in_bounds(r, c):
            raise IndexError(f'cell ({r}, {c}) outside {self.height}x{self.width} grid')
        cells = list(self.cells)
        cells[self.index(r, c)] = value
        return Grid(self.width, self.height, tuple(cells))

    def map(self, fn: Callable[[T], T]) -> 'Grid[T]':
        return Grid(self.width, self.height, tuple(fn(cell) for cell in self.cells))

    def count(self, predicate: Callable[[T], bool]) -> int:
        return sum(1 for cell in self.cells if predicate(cell))

    def neighbors8(self, r: int, c: int) -> Iterator[Coord]:
        """Yields the in-bounds cells of the 8-neighbourhood of (r, c)."""
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                nr, nc = r + dr, c + dc
                if self.in_bounds(nr, nc):
                    yield (nr, nc)

    def pretty(self, render: Callable[[T], str] = str) -> str:
        """Generates a human-readable string representation of the grid."""
        lines: List[str] = []
        for r in range(self.height):
            lines.append(' '.join(render(self.at(r, c)) for c in range(self.width)))
        return '\n'.join(lines)
