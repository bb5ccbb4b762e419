from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from .grid import Coord, Grid
from .state import MoveResult, Notice, NoticeKind, Status, rejected

log = logging.getLogger(__name__)

SIZE = 9
BOX = 3
DIGITS = tuple(range(1, SIZE + 1))

REMOVE_COUNTS: Dict[str, int] = {
    'Easy': 30,
    'Medium': 40,
    'Hard': 50,
}
DIFFICULTIES: Tuple[str, ...] = tuple(REMOVE_COUNTS)

# Upper bound on re-seeding the diagonal boxes before giving up.
MAX_GENERATION_ATTEMPTS = 20

Rows = List[List[int]]


class GenerationError(RuntimeError):
    """Raised when the board generator exhausts its retry budget."""


def empty_board() -> Rows:
    return [[0] * SIZE for _ in range(SIZE)]


def is_safe(board: Rows, r: int, c: int, num: int) -> bool:
    """True iff num is absent from row r, column c and the 3x3 box holding (r, c)."""
    for i in range(SIZE):
        if board[r][i] == num or board[i][c] == num:
            return False
    sr = (r // BOX) * BOX
    sc = (c // BOX) * BOX
    for i in range(BOX):
        for j in range(BOX):
            if board[sr + i][sc + j] == num:
                return False
    return True


def solve_sudoku(board: Rows) -> bool:
    """
    Fills board in place by exhaustive backtracking.
    Cells are scanned row-major and digits tried in ascending order; returns
    False only when no placement completes the grid.
    """
    for r in range(SIZE):
        for c in range(SIZE):
            if board[r][c] != 0:
                continue
            for num in DIGITS:
                if is_safe(board, r, c, num):
                    board[r][c] = num
                    if solve_sudoku(board):
                        return True
                    board[r][c] = 0
            return False
    return True


def _seed_diagonal_boxes(board: Rows, rng: random.Random) -> None:
    # The three diagonal boxes share no row, column or box, so any
    # permutation in each is a consistent partial grid.
    for k in range(0, SIZE, BOX):
        nums = list(DIGITS)
        rng.shuffle(nums)
        for i in range(BOX):
            for j in range(BOX):
                board[k + i][k + j] = nums[i * BOX + j]


def generate_full_board(rng: Optional[random.Random] = None, max_attempts: int = MAX_GENERATION_ATTEMPTS) -> Grid[int]:
    """Returns a fully solved 9x9 grid."""
    rng = rng or random.Random()
    for attempt in range(1, max_attempts + 1):
        board = empty_board()
        _seed_diagonal_boxes(board, rng)
        if solve_sudoku(board):
            log.debug('sudoku solution generated on attempt %d', attempt)
            return Grid.from_rows(board)
        log.warning('sudoku seed %d could not be completed, reseeding', attempt)
    raise GenerationError(f'no solvable sudoku seed after {max_attempts} attempts')


def make_puzzle_from_solution(solution: Grid[int], remove_count: int, rng: Optional[random.Random] = None) -> Grid[int]:
    """Zeroes remove_count randomly chosen cells of a copy of solution."""
    if not 0 <= remove_count <= SIZE * SIZE:
        raise ValueError(f'remove_count must be between 0 and {SIZE * SIZE}')
    rng = rng or random.Random()
    positions: List[Coord] = list(solution.coords())
    rng.shuffle(positions)
    cells = list(solution.cells)
    for r, c in positions[:remove_count]:
        cells[solution.index(r, c)] = 0
    return Grid(solution.width, solution.height, tuple(cells))


def empty_cells(puzzle: Grid[int]) -> int:
    return puzzle.count(lambda v: v == 0)


@dataclass(frozen=True)
class SudokuState:
    """Represents one Sudoku session: the hidden solution and the board the player edits."""
    solution: Grid[int]
    puzzle: Grid[int]
    difficulty: str
    status: Status = Status.PLAYING
    selected: Optional[Coord] = None

    def is_locked(self, r: int, c: int) -> bool:
        """Givens and correctly entered digits can no longer be edited."""
        value = self.puzzle.at(r, c)
        return value != 0 and value == self.solution.at(r, c)


def new_sudoku(difficulty: str = 'Easy', rng: Optional[random.Random] = None) -> SudokuState:
    if difficulty not in REMOVE_COUNTS:
        raise ValueError(f'unknown sudoku difficulty: {difficulty}')
    rng = rng or random.Random()
    solution = generate_full_board(rng)
    puzzle = make_puzzle_from_solution(solution, REMOVE_COUNTS[difficulty], rng)
    return SudokuState(solution=solution, puzzle=puzzle, difficulty=difficulty)


def select_cell(state: SudokuState, r: int, c: int) -> SudokuState:
    if not state.puzzle.in_bounds(r, c):
        raise IndexError(f'cell ({r}, {c}) is not on the board')
    return replace(state, selected=(r, c))


def enter_number(state: SudokuState, num: int, cell: Optional[Coord] = None) -> MoveResult[SudokuState]:
    """Writes num (0 clears) into cell, or into the selected cell when cell is None."""
    if state.status.terminal:
        return rejected(state, 'Game is over.')
    target = cell if cell is not None else state.selected
    if target is None:
        return rejected(state, 'Select a cell first.')
    r, c = target
    if not state.puzzle.in_bounds(r, c):
        return rejected(state, 'Cell is not on the board.')
    if not 0 <= num <= SIZE:
        return rejected(state, 'Only digits 1-9 (or 0 to clear) are allowed.')
    if state.is_locked(r, c):
        return rejected(state, 'This cell is locked.')
    return MoveResult(replace(state, puzzle=state.puzzle.replace(r, c, num), selected=(r, c)))


def give_hint(state: SudokuState) -> MoveResult[SudokuState]:
    """Fills the first empty cell (row-major) with its solution value."""
    if state.status.terminal:
        return rejected(state, 'Game is over.')
    for r, c in state.puzzle.coords():
        if state.puzzle.at(r, c) == 0:
            return MoveResult(replace(state, puzzle=state.puzzle.replace(r, c, state.solution.at(r, c))))
    return MoveResult(state, Notice(NoticeKind.INFO, 'No empty cells left.'))


def fill_solution(state: SudokuState) -> SudokuState:
    return replace(state, puzzle=state.solution)


def mismatches(state: SudokuState) -> List[Coord]:
    """Filled cells whose value disagrees with the stored solution."""
    return [
        (r, c)
        for r, c in state.puzzle.coords()
        if state.puzzle.at(r, c) != 0 and state.puzzle.at(r, c) != state.solution.at(r, c)
    ]


def check_solution(state: SudokuState, strict: bool = False) -> MoveResult[SudokuState]:
    """
    Completeness check behind the CHECK button.
    A full grid is accepted as solved without comparing it to the solution
    unless strict is set.
    """
    if state.status.terminal:
        return MoveResult(state)
    blanks = empty_cells(state.puzzle)
    if blanks > 0:
        return rejected(
            state,
            f'There are {blanks} empty cells. Please fill in every cell.',
            NoticeKind.INCOMPLETE,
        )
    if strict:
        wrong = mismatches(state)
        if wrong:
            return rejected(state, f'{len(wrong)} cells are incorrect.')
    log.debug('sudoku %s solved', state.difficulty)
    return MoveResult(replace(state, status=Status.WON))


def reset(state: SudokuState, rng: Optional[random.Random] = None) -> SudokuState:
    return new_sudoku(state.difficulty, rng)
