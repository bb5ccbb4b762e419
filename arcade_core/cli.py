from __future__ import annotations

import argparse
import logging
import os
import random
from typing import Callable, List, Optional

from . import minesweeper, sudoku, tictactoe, watersort, wordle
from .scores import ScoreService
from .state import LEVEL_LABELS


def _print_sudoku(rng: random.Random, level_index: int) -> None:
    state = sudoku.new_sudoku(LEVEL_LABELS[level_index], rng)
    print(f'Sudoku ({state.difficulty}, {sudoku.empty_cells(state.puzzle)} empty cells):')
    print(state.puzzle.pretty(lambda v: str(v) if v else '.'))


def _print_minesweeper(rng: random.Random, level_index: int) -> None:
    state = minesweeper.new_game(level_index, rng=rng)
    print(f'Minesweeper {state.size}x{state.size}, {state.level.mines} mines (revealed):')
    print(state.board.pretty(lambda cell: '*' if cell.mined else str(cell.near)))


def _print_watersort(rng: random.Random, level_index: int) -> None:
    state = watersort.init_level(watersort.start_level_for_index(level_index), rng)
    print(f'Water Sort level {state.level}:')
    for i, bottle in enumerate(state.bottles):
        print(f'  {i}: ' + ' '.join(str(unit) for unit in bottle))


def prompt_index(moves: List[int], read: Callable[[str], str] = input) -> int:
    print('Free cells:', moves)
    while True:
        text = read('Your move (0-8): ').strip()
        try:
            move = int(text)
        except ValueError:
            print('Could not parse. Try again.')
            continue
        if move in moves:
            return move
        print('Illegal move. Try again.')


def play_tictactoe(difficulty: str, rng: random.Random, read: Callable[[str], str] = input) -> tictactoe.TicTacToeState:
    state = tictactoe.new_game(difficulty)
    print(f'You are {tictactoe.HUMAN}, the bot plays {tictactoe.BOT} ({difficulty}).')
    while state.running:
        print(tictactoe.pretty(state.board))
        if state.current == tictactoe.HUMAN:
            state = tictactoe.play(state, prompt_index(tictactoe.legal_moves(state.board), read)).state
        else:
            state = tictactoe.bot_move(state, rng).state
    print(tictactoe.pretty(state.board))
    print(state.status_text())
    return state


def play_wordle(level: int, rng: random.Random, read: Callable[[str], str] = input) -> wordle.WordleState:
    state = wordle.init_level(level, rng)
    print(f'Wordle level {level}: guess the {state.cols}-letter word in {wordle.ROWS} tries.')
    while not state.finished:
        guess = read('Guess: ').strip().upper()
        state = wordle.clear_row(state).state
        for letter in guess[:state.cols]:
            state = wordle.type_letter(state, letter).state
        row = state.row
        result = wordle.submit(state)
        state = result.state
        if result.notice is not None:
            print(result.notice.message)
        if result.accepted:
            print(' '.join(f'{ch}:{tile[0]}' for ch, tile in zip(state.board[row], state.tiles[row])))
    return state


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description='Pocket Arcade puzzles in the terminal')
    parser.add_argument('--game', choices=['sudoku', 'minesweeper', 'watersort', 'tictactoe', 'wordle'], default='sudoku')
    parser.add_argument('--level', type=int, choices=[0, 1, 2], default=0, help='Level index: 0 easy, 1 medium, 2 hard')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed')
    parser.add_argument('--play', action='store_true', help='Play interactively (tictactoe, wordle)')
    parser.add_argument('--scores', action='store_true', help='List the best recorded times and exit')
    parser.add_argument('--db', default=os.environ.get('ARCADE_SCORES_DB', os.path.join('data', 'scores.db')),
                        help='SQLite scores file')
    args = parser.parse_args(argv)

    logging.basicConfig(level=os.environ.get('ARCADE_LOG_LEVEL', 'INFO').upper())
    rng = random.Random(args.seed)

    if args.scores:
        records = ScoreService(args.db).load_top_scores()
        if not records:
            print('No scores yet.')
        for i, rec in enumerate(records, 1):
            print(f'{i:2d}. {rec.name:<12} {rec.time:>5}s  {rec.level}')
        return

    if args.game == 'tictactoe':
        difficulty = tictactoe.DIFFICULTIES[args.level]
        if args.play:
            play_tictactoe(difficulty, rng)
        else:
            for opening in range(9):
                board = tictactoe.apply_move(tictactoe.empty_board(), opening, tictactoe.HUMAN)
                reply = tictactoe.choose_bot_move(board, difficulty, rng)
                print(f'X on {opening} -> O on {reply}')
        return
    if args.game == 'wordle':
        level = wordle.start_level_for_index(args.level)
        if args.play:
            play_wordle(level, rng)
        else:
            print(f'Level {level} uses {wordle.compute_length_for_level(level)}-letter words.')
        return

    printers = {
        'sudoku': _print_sudoku,
        'minesweeper': _print_minesweeper,
        'watersort': _print_watersort,
    }
    printers[args.game](rng, args.level)


if __name__ == '__main__':
    main()
