from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import List, Optional, Set, Tuple

from .grid import Coord, Grid
from .state import Level, MoveResult, Status, rejected

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MineLevel(Level):
    size: int = 8
    mines: int = 8


LEVELS: Tuple[MineLevel, ...] = (
    MineLevel(0, 'Easy', size=8, mines=8),
    MineLevel(1, 'Medium', size=10, mines=15),
    MineLevel(2, 'Hard', size=12, mines=25),
)


@dataclass(frozen=True)
class Cell:
    mined: bool = False
    revealed: bool = False
    flagged: bool = False
    near: int = 0


def _count_near(mined: Set[Coord], grid: Grid[Cell], r: int, c: int) -> int:
    return sum(1 for nb in grid.neighbors8(r, c) if nb in mined)


def create_random_board(size: int, mines: int, rng: Optional[random.Random] = None) -> Tuple[Grid[Cell], int]:
    """
    Places mines at distinct random cells and computes every neighbour count.
    Returns (board, remaining) where remaining is the number of safe cells.
    """
    if size <= 0:
        raise ValueError('size must be positive')
    if not 0 <= mines <= size * size:
        raise ValueError(f'cannot place {mines} mines on a {size}x{size} board')
    rng = rng or random.Random()
    mined: Set[Coord] = set()
    while len(mined) < mines:
        mined.add((rng.randrange(size), rng.randrange(size)))

    blank: Grid[Cell] = Grid.filled(size, size, Cell())
    cells: List[Cell] = []
    for r, c in blank.coords():
        if (r, c) in mined:
            cells.append(Cell(mined=True))
        else:
            cells.append(Cell(near=_count_near(mined, blank, r, c)))
    return Grid(size, size, tuple(cells)), size * size - mines


@dataclass(frozen=True)
class MinesState:
    """Board plus progress counters for one Minesweeper session."""
    board: Grid[Cell]
    level: MineLevel
    remaining: int
    flags: int = 0
    flag_mode: bool = False
    status: Status = Status.READY
    seconds: int = 0

    @property
    def size(self) -> int:
        return self.board.width


def new_game(level_index: int = 1, flag_mode: bool = False, rng: Optional[random.Random] = None) -> MinesState:
    if not 0 <= level_index < len(LEVELS):
        raise ValueError(f'unknown minesweeper level: {level_index}')
    level = LEVELS[level_index]
    board, remaining = create_random_board(level.size, level.mines, rng)
    return MinesState(board=board, level=level, remaining=remaining, flag_mode=flag_mode)


def change_level(state: MinesState, level_index: int, rng: Optional[random.Random] = None) -> MoveResult[MinesState]:
    """Switching level is only allowed before the first move."""
    if state.status != Status.READY:
        return rejected(state, 'Level can only be changed before the game starts.')
    return MoveResult(new_game(level_index, state.flag_mode, rng))


def _ensure_started(state: MinesState) -> MinesState:
    if state.status == Status.READY:
        return replace(state, status=Status.PLAYING)
    return state


def flood_reveal(board: Grid[Cell], r: int, c: int) -> Tuple[Grid[Cell], int]:
    """
    Iterative flood fill from (r, c) with an explicit stack.
    Zero cells push their unrevealed, unmined neighbours; flagged cells stop
    the cascade. Returns the new board and the number of cells revealed.
    """
    cells = list(board.cells)
    stack: List[Coord] = [(r, c)]
    revealed = 0
    while stack:
        rr, cc = stack.pop()
        idx = board.index(rr, cc)
        cur = cells[idx]
        if cur.revealed or cur.flagged:
            continue
        cells[idx] = replace(cur, revealed=True)
        revealed += 1
        if cur.near == 0:
            for nr, nc in board.neighbors8(rr, cc):
                nb = cells[board.index(nr, nc)]
                if not nb.revealed and not nb.mined:
                    stack.append((nr, nc))
    return Grid(board.width, board.height, tuple(cells)), revealed


def reveal(state: MinesState, r: int, c: int) -> MoveResult[MinesState]:
    if state.status.terminal:
        return rejected(state, 'Game is over.')
    if not state.board.in_bounds(r, c):
        return rejected(state, 'Cell is not on the board.')
    cell = state.board.at(r, c)
    if cell.revealed or cell.flagged:
        return rejected(state, 'Cell is already open or flagged.')
    state = _ensure_started(state)

    if cell.mined:
        board = state.board.map(lambda cc: replace(cc, revealed=True) if cc.mined else cc)
        log.debug('mine hit at (%d, %d)', r, c)
        return MoveResult(replace(state, board=board, status=Status.LOST))

    board, count = flood_reveal(state.board, r, c)
    remaining = state.remaining - count
    status = Status.WON if remaining <= 0 else state.status
    if status == Status.WON:
        log.debug('minesweeper cleared on %s', state.level.label)
    return MoveResult(replace(state, board=board, remaining=remaining, status=status))


def toggle_flag(state: MinesState, r: int, c: int) -> MoveResult[MinesState]:
    if state.status.terminal:
        return rejected(state, 'Game is over.')
    if not state.board.in_bounds(r, c):
        return rejected(state, 'Cell is not on the board.')
    cell = state.board.at(r, c)
    if cell.revealed:
        return rejected(state, 'Open cells cannot be flagged.')
    state = _ensure_started(state)
    flagged = not cell.flagged
    board = state.board.replace(r, c, replace(cell, flagged=flagged))
    return MoveResult(replace(state, board=board, flags=state.flags + (1 if flagged else -1)))


def press(state: MinesState, r: int, c: int) -> MoveResult[MinesState]:
    """Primary tap: flags in flag mode, reveals otherwise."""
    if state.flag_mode:
        return toggle_flag(state, r, c)
    return reveal(state, r, c)


def long_press(state: MinesState, r: int, c: int) -> MoveResult[MinesState]:
    return toggle_flag(state, r, c)


def toggle_flag_mode(state: MinesState) -> MinesState:
    return replace(state, flag_mode=not state.flag_mode)


def reset_same_board(state: MinesState) -> MinesState:
    """Closes every cell and clears flags while keeping the mine layout."""
    board = state.board.map(lambda cc: replace(cc, revealed=False, flagged=False))
    safe = board.count(lambda cc: not cc.mined)
    return replace(state, board=board, remaining=safe, flags=0, status=Status.READY, seconds=0)


def restart(state: MinesState, rng: Optional[random.Random] = None) -> MinesState:
    """New game at the same level with a freshly generated mine layout."""
    return new_game(state.level.index, state.flag_mode, rng)


def render(cell: Cell) -> str:
    if cell.flagged:
        return 'F'
    if not cell.revealed:
        return '#'
    if cell.mined:
        return '*'
    return str(cell.near) if cell.near else '.'
