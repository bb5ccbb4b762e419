from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from .grid import Grid
from .state import MoveResult, Notice, NoticeKind, Status, rejected

log = logging.getLogger(__name__)

COLS = 10
ROWS = 10
PALETTE_BASE: Tuple[str, ...] = (
    '#FF4D6D',
    '#FFD24D',
    '#6DF5A7',
    '#5DB7FF',
    '#C07BFF',
    '#FF9E6D',
    '#48E0C1',
    '#FFD9F1',
)
START_COLORS = 3
MAX_COLORS = 8
MAX_LEVEL = 100


@dataclass(frozen=True)
class Ball:
    color: str
    locked: bool = False


Rows = List[List[Optional[Ball]]]


def pick_palette(n: int, rng: random.Random) -> List[str]:
    palette = list(PALETTE_BASE[:min(n, len(PALETTE_BASE))])
    rng.shuffle(palette)
    return palette


def make_grid(colors: int, rng: Optional[random.Random] = None) -> Grid[Ball]:
    rng = rng or random.Random()
    palette = pick_palette(colors, rng)
    return Grid(COLS, ROWS, tuple(Ball(rng.choice(palette)) for _ in range(ROWS * COLS)))


def most_frequent(grid: Grid[Ball]) -> Tuple[Optional[str], int]:
    """Colour with the highest count; ties go to the colour seen first in row-major order."""
    counts: Dict[str, int] = {}
    for ball in grid.cells:
        if ball is None:
            continue
        counts[ball.color] = counts.get(ball.color, 0) + 1
    best_color: Optional[str] = None
    best_count = 0
    for color, count in counts.items():
        if count > best_count:
            best_color, best_count = color, count
    return best_color, best_count


def collapse_columns(rows: Rows) -> None:
    """Drops every ball to the bottom of its column, in place."""
    for c in range(COLS):
        column = [rows[r][c] for r in range(ROWS - 1, -1, -1) if rows[r][c] is not None]
        for r in range(ROWS - 1, -1, -1):
            i = ROWS - 1 - r
            rows[r][c] = column[i] if i < len(column) else None


def refill_from_top(rows: Rows, colors: int, rng: random.Random) -> None:
    palette = pick_palette(colors, rng)
    for c in range(COLS):
        for r in range(ROWS):
            if rows[r][c] is None:
                rows[r][c] = Ball(rng.choice(palette))


def shuffle_colors(grid: Grid[Ball], rng: Optional[random.Random] = None) -> Grid[Ball]:
    """Permutes the colours of unlocked balls; locked balls keep theirs."""
    rng = rng or random.Random()
    free = [ball.color for ball in grid.cells if not ball.locked]
    rng.shuffle(free)
    it = iter(free)
    return grid.map(lambda ball: ball if ball.locked else replace(ball, color=next(it)))


def gain_for(count: int, level: int) -> int:
    return count * math.ceil(10 * (1 + level / 20))


@dataclass(frozen=True)
class ColorBurstState:
    grid: Grid[Ball]
    level: int = 1
    score: int = 0
    colors: int = START_COLORS
    status: Status = Status.PLAYING


def new_game(rng: Optional[random.Random] = None) -> ColorBurstState:
    return ColorBurstState(grid=make_grid(START_COLORS, rng))


def _penalty(state: ColorBurstState, rng: random.Random, reason: str) -> MoveResult[ColorBurstState]:
    shuffled = shuffle_colors(state.grid, rng)
    return MoveResult(replace(state, grid=shuffled, score=0), Notice(NoticeKind.PENALTY, reason))


def tap(state: ColorBurstState, r: int, c: int, rng: Optional[random.Random] = None) -> MoveResult[ColorBurstState]:
    """
    Bursting the most frequent colour scores and advances the level.
    Any other tap shuffles the board and wipes the score.
    """
    rng = rng or random.Random()
    if not state.grid.in_bounds(r, c):
        return rejected(state, 'Cell is not on the board.')
    ball = state.grid.at(r, c)
    if ball.locked:
        return _penalty(state, rng, 'That ball is locked.')
    color, _ = most_frequent(state.grid)
    if color is None:
        return rejected(state, 'Board is empty.')
    if ball.color != color:
        return _penalty(state, rng, 'Wrong colour! Pick the most common one.')

    rows: Rows = state.grid.rows()  # type: ignore[assignment]
    burst = 0
    for rr in range(ROWS):
        for cc in range(COLS):
            cell = rows[rr][cc]
            if cell is not None and not cell.locked and cell.color == color:
                rows[rr][cc] = None
                burst += 1
    collapse_columns(rows)
    refill_from_top(rows, state.colors, rng)

    level = min(MAX_LEVEL, state.level + 1)
    colors = state.colors
    if level % 3 == 0 and colors < min(MAX_COLORS, len(PALETTE_BASE)):
        colors += 1
    log.debug('color burst: %d balls of %s at level %d', burst, color, state.level)
    return MoveResult(replace(
        state,
        grid=Grid.from_rows(rows),  # type: ignore[arg-type]
        score=state.score + gain_for(burst, state.level),
        level=level,
        colors=colors,
    ))


def restart(rng: Optional[random.Random] = None) -> ColorBurstState:
    return new_game(rng)
