from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from .state import MoveResult, Status, rejected

log = logging.getLogger(__name__)

Mark = str  # '', 'X' or 'O'
Board = Tuple[Mark, ...]
Line = Tuple[int, int, int]

HUMAN = 'X'
BOT = 'O'
EMPTY = ''

WIN_LINES: Tuple[Line, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

SCORES = {BOT: 1, HUMAN: -1, 'tie': 0}
DIFFICULTIES: Tuple[str, ...] = ('easy', 'medium', 'hard')


def empty_board() -> Board:
    return (EMPTY,) * 9


def legal_moves(board: Board) -> List[int]:
    return [i for i, v in enumerate(board) if v == EMPTY]


def apply_move(board: Board, index: int, mark: Mark) -> Board:
    cells = list(board)
    cells[index] = mark
    return tuple(cells)


def find_winning_line(board: Board, mark: Mark) -> Optional[Line]:
    """Returns the first of the 8 lines filled by mark, if any."""
    for line in WIN_LINES:
        if all(board[i] == mark for i in line):
            return line
    return None


def is_draw(board: Board) -> bool:
    return all(v != EMPTY for v in board)


def random_move(board: Board, rng: Optional[random.Random] = None) -> Optional[int]:
    empty = legal_moves(board)
    if not empty:
        return None
    return (rng or random).choice(empty)


def _completing_cell(board: Board, mark: Mark) -> Optional[int]:
    for line in WIN_LINES:
        marks = [board[i] for i in line]
        if marks.count(mark) == 2 and EMPTY in marks:
            return line[marks.index(EMPTY)]
    return None


def smart_move(board: Board, rng: Optional[random.Random] = None) -> Optional[int]:
    """Win if possible, otherwise block the human, otherwise play randomly."""
    win = _completing_cell(board, BOT)
    if win is not None:
        return win
    block = _completing_cell(board, HUMAN)
    if block is not None:
        return block
    return random_move(board, rng)


def minimax(board: Board, maximizing: bool) -> int:
    """Plain minimax over the remaining game tree; O maximises, X minimises."""
    if find_winning_line(board, BOT):
        return SCORES[BOT]
    if find_winning_line(board, HUMAN):
        return SCORES[HUMAN]
    if is_draw(board):
        return SCORES['tie']
    if maximizing:
        return max(minimax(apply_move(board, i, BOT), False) for i in legal_moves(board))
    return min(minimax(apply_move(board, i, HUMAN), True) for i in legal_moves(board))


def best_move(board: Board) -> Optional[int]:
    """First index (scan order 0..8) achieving the best minimax score for O."""
    best_score: Optional[int] = None
    move: Optional[int] = None
    for i in legal_moves(board):
        score = minimax(apply_move(board, i, BOT), False)
        if best_score is None or score > best_score:
            best_score = score
            move = i
    return move


def choose_bot_move(board: Board, difficulty: str, rng: Optional[random.Random] = None) -> Optional[int]:
    if difficulty == 'easy':
        return random_move(board, rng)
    if difficulty == 'medium':
        return smart_move(board, rng)
    return best_move(board)


@dataclass(frozen=True)
class Scoreboard:
    x: int = 0
    o: int = 0
    draw: int = 0


@dataclass(frozen=True)
class TicTacToeState:
    board: Board
    difficulty: str = 'easy'
    current: Mark = HUMAN
    running: bool = True
    winner: Optional[Mark] = None  # 'X', 'O' or 'tie' once the round ends
    winning_line: Tuple[int, ...] = ()
    scores: Scoreboard = Scoreboard()

    @property
    def status(self) -> Status:
        if self.running:
            return Status.PLAYING
        if self.winner == 'tie':
            return Status.DRAW
        return Status.WON if self.winner == HUMAN else Status.LOST

    def status_text(self) -> str:
        if self.running:
            return f'Turn: {self.current}' + (' (bot is thinking...)' if self.current == BOT else '')
        if self.winner == 'tie':
            return 'Draw!'
        return f'{self.winner} wins!'


def new_game(difficulty: str = 'easy', scores: Optional[Scoreboard] = None) -> TicTacToeState:
    if difficulty not in DIFFICULTIES:
        raise ValueError(f'unknown tic-tac-toe difficulty: {difficulty}')
    return TicTacToeState(board=empty_board(), difficulty=difficulty, scores=scores or Scoreboard())


def _settle(state: TicTacToeState, board: Board, mark: Mark) -> TicTacToeState:
    """Applies the terminal checks after mark has just played."""
    line = find_winning_line(board, mark)
    if line is not None:
        scores = replace(state.scores, x=state.scores.x + 1) if mark == HUMAN else replace(state.scores, o=state.scores.o + 1)
        log.debug('tic-tac-toe round won by %s on %s', mark, line)
        return replace(state, board=board, running=False, winner=mark, winning_line=line, scores=scores)
    if is_draw(board):
        return replace(state, board=board, running=False, winner='tie',
                       scores=replace(state.scores, draw=state.scores.draw + 1))
    nxt = BOT if mark == HUMAN else HUMAN
    return replace(state, board=board, current=nxt)


def play(state: TicTacToeState, index: int) -> MoveResult[TicTacToeState]:
    """The human (X) claims a cell; the bot answers through bot_move."""
    if not state.running:
        return rejected(state, 'Round is over.')
    if state.current != HUMAN:
        return rejected(state, 'Wait for the bot to move.')
    if not 0 <= index < 9:
        return rejected(state, 'Cell is not on the board.')
    if state.board[index] != EMPTY:
        return rejected(state, 'Cell is already taken.')
    return MoveResult(_settle(state, apply_move(state.board, index, HUMAN), HUMAN))


def bot_move(state: TicTacToeState, rng: Optional[random.Random] = None) -> MoveResult[TicTacToeState]:
    if not state.running:
        return rejected(state, 'Round is over.')
    if state.current != BOT:
        return rejected(state, 'It is not the bot\'s turn.')
    move = choose_bot_move(state.board, state.difficulty, rng)
    if move is None:
        return rejected(state, 'No moves left.')
    return MoveResult(_settle(state, apply_move(state.board, move, BOT), BOT))


def new_round(state: TicTacToeState) -> TicTacToeState:
    """Clears the board and keeps the running scoreboard."""
    return new_game(state.difficulty, state.scores)


def reset_scores(state: TicTacToeState) -> TicTacToeState:
    return new_game(state.difficulty)


def set_difficulty(state: TicTacToeState, difficulty: str) -> TicTacToeState:
    if difficulty not in DIFFICULTIES:
        raise ValueError(f'unknown tic-tac-toe difficulty: {difficulty}')
    return replace(state, difficulty=difficulty)


def pretty(board: Board) -> str:
    rows = []
    for r in range(3):
        rows.append(' '.join(board[r * 3 + c] or str(r * 3 + c) for c in range(3)))
    return '\n'.join(rows)
