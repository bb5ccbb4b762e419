from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass, replace
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .state import MoveResult, Notice, NoticeKind, Status, rejected

log = logging.getLogger(__name__)

# Ordered easy -> hard; level n uses WORDS[n - 1].
WORDS: Tuple[str, ...] = (
    # 1-20: five letters
    'APPLE', 'WATER', 'HOUSE', 'MUSIC', 'LIGHT', 'GREEN', 'STONE', 'SMILE', 'PLANT', 'CLOUD',
    'RIVER', 'BREAD', 'HEART', 'STARS', 'NIGHT', 'WORLD', 'PEACE', 'LUCKY', 'MAGIC', 'DREAM',
    # 21-40: six letters
    'PLANET', 'BRIDGE', 'WINTER', 'GARDEN', 'FAMILY', 'ORBITR', 'GALAXY', 'SUMMER', 'ORCHID', 'SHADOW',
    'STREAM', 'AUTUMN', 'BOTTLE', 'CANDLE', 'FOREST', 'RUBBER', 'COFFEE', 'POETRY', 'CIRCLE', 'TRAVEL',
    # 41-60: six to seven letters
    'MYSTERY', 'VIOLETS', 'HARBOR', 'CHEESE', 'HARVEST', 'CANYONS', 'SPIRIT', 'JOURNEY', 'BALANCE', 'NETWORK',
    'PORTAL', 'TEXTURE', 'MIRACLE', 'CAPTAIN', 'ELEMENT', 'SUNRISE', 'SWEETER', 'CAPSTONE', 'SERPENT', 'LIBERTY',
    # 61-80: seven to eight letters
    'HORIZON', 'TREMBLES', 'FORTUNE', 'SHADOWS', 'ODYSSEYS', 'MONOLITH', 'PENDULUM', 'FIREWALL', 'STRANGER', 'GARDENS',
    'CINEMATIC', 'MOUNTAIN', 'ECLIPSES', 'MEANDERS', 'SAPPHIRE', 'CRESCENT', 'WANDERING', 'BLUEBIRD', 'STARLIGHT', 'MOONLIT',
    # 81-90: eight to nine letters
    'ADVENTUR', 'NOTEBOOKS', 'PSYCHOTIC', 'LABYRINTH', 'BREATHEIN', 'SKYSCRAPE', 'ASTRONOMY', 'WILDERNES', 'UNDERGROW', 'EVERYTHING',
    # 91-100: nine to eleven letters
    'IMPERVIOUS', 'TRANQUILITY', 'CHARCOALS', 'INTRICACY', 'METAMORPH', 'CONSEQUENCE', 'POLARIZING', 'UNFORGIVEN', 'SPECTRUMS', 'HALLOWEENS',
)
TOTAL_LEVELS = 100
ROWS = 5
# settings.default_level_index -> first level
LEVEL_FROM_SETTINGS: Tuple[int, ...] = (1, 21, 41)

IDLE = 'idle'
CORRECT = 'correct'
PRESENT = 'present'
ABSENT = 'absent'
_RANK = {ABSENT: 1, PRESENT: 2, CORRECT: 3}


def compute_length_for_level(level: int) -> int:
    if level <= 30:
        return 5
    if level <= 55:
        return 6
    if level <= 75:
        return 7
    if level <= 90:
        return 8
    if level <= 97:
        return 9
    return 10


def pick_solution_for_level(level: int, rng: Optional[random.Random] = None) -> str:
    """Fixed word per level, falling back to the first word of the expected length."""
    if 1 <= level <= len(WORDS):
        return WORDS[level - 1].upper()
    target = compute_length_for_level(level)
    for word in WORDS:
        if len(word) == target:
            return word.upper()
    return (rng or random).choice(WORDS).upper()


def start_level_for_index(level_index: int) -> int:
    if 0 <= level_index < len(LEVEL_FROM_SETTINGS):
        return LEVEL_FROM_SETTINGS[level_index]
    return 1


def evaluate_guess(guess: str, solution: str) -> List[str]:
    """
    Two-pass colouring with standard duplicate-letter semantics.
    Exact matches are consumed first; remaining letters then consume one
    leftover occurrence each, left to right.
    """
    if len(guess) != len(solution):
        raise ValueError('guess and solution must have the same length')
    remaining: List[Optional[str]] = list(solution)
    result = [ABSENT] * len(guess)
    for i, letter in enumerate(guess):
        if letter == solution[i]:
            result[i] = CORRECT
            remaining[i] = None
    for i, letter in enumerate(guess):
        if result[i] == CORRECT:
            continue
        if letter in remaining:
            result[i] = PRESENT
            remaining[remaining.index(letter)] = None
    return result


def merge_key_states(prev: Mapping[str, str], guess: str, result: Sequence[str]) -> Dict[str, str]:
    """Keyboard colours keep the best state seen per letter: correct > present > absent."""
    updated = dict(prev)
    for letter, state in zip(guess, result):
        if _RANK[state] > _RANK.get(updated.get(letter, ''), 0):
            updated[letter] = state
    return updated


@dataclass(frozen=True)
class WordleState:
    level: int
    solution: str
    board: Tuple[Tuple[str, ...], ...]
    tiles: Tuple[Tuple[str, ...], ...]
    row: int = 0
    col: int = 0
    key_states: Tuple[Tuple[str, str], ...] = ()
    status: Status = Status.PLAYING

    @property
    def cols(self) -> int:
        return len(self.solution)

    @property
    def keys(self) -> Dict[str, str]:
        return dict(self.key_states)

    @property
    def finished(self) -> bool:
        return self.status.terminal


def init_level(level: int = 1, rng: Optional[random.Random] = None) -> WordleState:
    if level < 1:
        raise ValueError('level must be >= 1')
    word = pick_solution_for_level(level, rng)
    cols = len(word)
    return WordleState(
        level=level,
        solution=word,
        board=tuple(('',) * cols for _ in range(ROWS)),
        tiles=tuple((IDLE,) * cols for _ in range(ROWS)),
    )


def _set_row(rows: Tuple[Tuple[str, ...], ...], index: int, row: Sequence[str]) -> Tuple[Tuple[str, ...], ...]:
    out = list(rows)
    out[index] = tuple(row)
    return tuple(out)


def type_letter(state: WordleState, letter: str) -> MoveResult[WordleState]:
    if state.finished:
        return rejected(state, 'Level is over.')
    if state.col >= state.cols or state.row >= ROWS:
        return rejected(state, 'Row is full.')
    upper = letter.upper()
    if not re.fullmatch(r'[A-Z]', upper):
        return rejected(state, 'Only letters A-Z are allowed.')
    row = list(state.board[state.row])
    row[state.col] = upper
    return MoveResult(replace(state, board=_set_row(state.board, state.row, row), col=state.col + 1))


def backspace(state: WordleState) -> MoveResult[WordleState]:
    if state.finished or state.col == 0:
        return rejected(state, 'Nothing to delete.')
    row = list(state.board[state.row])
    row[state.col - 1] = ''
    return MoveResult(replace(state, board=_set_row(state.board, state.row, row), col=state.col - 1))


def clear_row(state: WordleState) -> MoveResult[WordleState]:
    if state.finished:
        return rejected(state, 'Level is over.')
    return MoveResult(replace(state, board=_set_row(state.board, state.row, ('',) * state.cols), col=0))


def submit(state: WordleState) -> MoveResult[WordleState]:
    """Scores the current row; a full correct row wins, running out of rows loses."""
    if state.finished:
        return rejected(state, 'Level is over.')
    if state.col < state.cols:
        return rejected(state, 'Not enough letters.', NoticeKind.INCOMPLETE)
    guess = ''.join(state.board[state.row])
    if not re.fullmatch(rf'[A-Z]{{{state.cols}}}', guess):
        return rejected(state, 'Invalid word.')

    result = evaluate_guess(guess, state.solution)
    keys = merge_key_states(state.keys, guess, result)
    nxt = replace(
        state,
        tiles=_set_row(state.tiles, state.row, result),
        key_states=tuple(sorted(keys.items())),
    )
    if all(r == CORRECT for r in result):
        log.debug('wordle level %d solved in %d rows', state.level, state.row + 1)
        return MoveResult(
            replace(nxt, status=Status.WON),
            Notice(NoticeKind.INFO, f'Congratulations! Level {state.level} completed. Word: {state.solution}'),
        )
    if state.row + 1 >= ROWS:
        return MoveResult(
            replace(nxt, status=Status.LOST),
            Notice(NoticeKind.INFO, f'You lost. The word was {state.solution}'),
        )
    return MoveResult(replace(nxt, row=state.row + 1, col=0))


def next_level(state: WordleState, rng: Optional[random.Random] = None) -> MoveResult[WordleState]:
    if state.level >= TOTAL_LEVELS:
        return MoveResult(state, Notice(NoticeKind.INFO, 'All levels completed!'))
    return MoveResult(init_level(state.level + 1, rng))


def retry_level(state: WordleState, rng: Optional[random.Random] = None) -> WordleState:
    return init_level(state.level, rng)
