from __future__ import annotations

# Facade module that re-exports the arcade engines.
# The Flask app, the CLI and the tests import through here.
# Single-responsibility modules live under arcade_core/*.

from arcade_core import colorburst, memory, minesweeper, snake, sudoku, tictactoe, watersort, wordle
from arcade_core.grid import Coord, Grid
from arcade_core.haptics import Feedback, Haptics, RecordingHaptics
from arcade_core.scores import ScoreRecord, ScoreService
from arcade_core.session import GAMES, GameSession, actions_for, continuations_for, create_state, feedback_for
from arcade_core.settings import DEFAULT_SETTINGS, STORAGE_KEY, THEMES, Settings, SettingsStore
from arcade_core.state import (
    LEVEL_LABELS,
    Level,
    MoveResult,
    Notice,
    NoticeKind,
    Status,
    level_for_index,
    rejected,
)
from arcade_core.sudoku import (
    GenerationError,
    SudokuState,
    check_solution,
    generate_full_board,
    give_hint,
    is_safe,
    make_puzzle_from_solution,
    new_sudoku,
    solve_sudoku,
)
from arcade_core.minesweeper import Cell, MinesState, create_random_board, flood_reveal
from arcade_core.tictactoe import TicTacToeState, best_move, choose_bot_move, minimax
from arcade_core.watersort import WaterSortState, can_pour, is_level_completed, pour
from arcade_core.wordle import WordleState, evaluate_guess
from arcade_core.timers import Generation, Scheduler, Token

__all__ = [
    'colorburst', 'memory', 'minesweeper', 'snake', 'sudoku', 'tictactoe', 'watersort', 'wordle',
    'Coord', 'Grid',
    'Feedback', 'Haptics', 'RecordingHaptics',
    'ScoreRecord', 'ScoreService',
    'GAMES', 'GameSession', 'actions_for', 'continuations_for', 'create_state', 'feedback_for',
    'DEFAULT_SETTINGS', 'STORAGE_KEY', 'THEMES', 'Settings', 'SettingsStore',
    'LEVEL_LABELS', 'Level', 'MoveResult', 'Notice', 'NoticeKind', 'Status', 'level_for_index', 'rejected',
    'GenerationError', 'SudokuState', 'check_solution', 'generate_full_board', 'give_hint', 'is_safe',
    'make_puzzle_from_solution', 'new_sudoku', 'solve_sudoku',
    'Cell', 'MinesState', 'create_random_board', 'flood_reveal',
    'TicTacToeState', 'best_move', 'choose_bot_move', 'minimax',
    'WaterSortState', 'can_pour', 'is_level_completed', 'pour',
    'WordleState', 'evaluate_guess',
    'Generation', 'Scheduler', 'Token',
]
