from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from . import colorburst, memory, minesweeper, snake, sudoku, tictactoe, watersort, wordle
from .haptics import Feedback, Haptics
from .scores import ScoreService
from .settings import DEFAULT_SETTINGS, Settings, SettingsStore
from .state import LEVEL_LABELS, MoveResult, Notice, NoticeKind, Status, level_for_index
from .timers import Generation, Scheduler

log = logging.getLogger(__name__)

GAMES = ('sudoku', 'minesweeper', 'tictactoe', 'watersort', 'wordle', 'memory', 'snake', 'colorburst')
TICK_MS = 1000
BOT_DELAY_MS = 400
# only these games show a clock
TIMED_GAMES = ('sudoku', 'minesweeper')
# actions that throw the running board away
RESET_ACTIONS = frozenset({'reset', 'restart', 'retry', 'next_level', 'new_round', 'reset_scores', 'change_level'})


def _state_only(fn: Callable[..., Any]) -> Callable[..., MoveResult]:
    return lambda *args, **kwargs: MoveResult(fn(*args, **kwargs))


def create_state(game: str, settings: Settings, rng: random.Random, **options: Any) -> Any:
    """Fresh snapshot for game, sized from settings unless options say otherwise."""
    index = level_for_index(options.get('level_index', settings.default_level_index)).index
    if game == 'sudoku':
        return sudoku.new_sudoku(options.get('difficulty', LEVEL_LABELS[index]), rng)
    if game == 'minesweeper':
        return minesweeper.new_game(index, options.get('flag_mode', settings.flag_mode_on_start), rng)
    if game == 'tictactoe':
        return tictactoe.new_game(options.get('difficulty', tictactoe.DIFFICULTIES[index]))
    if game == 'watersort':
        return watersort.init_level(options.get('level', watersort.start_level_for_index(index)), rng)
    if game == 'wordle':
        return wordle.init_level(options.get('level', wordle.start_level_for_index(index)), rng)
    if game == 'memory':
        return memory.new_game(options.get('pairs', memory.pairs_for_index(index)), rng)
    if game == 'snake':
        return snake.new_game(index, rng)
    if game == 'colorburst':
        return colorburst.new_game(rng)
    raise ValueError(f'unknown game: {game}')


def actions_for(game: str, rng: random.Random) -> Dict[str, Callable[..., MoveResult]]:
    """Player actions per game; every handler takes the snapshot first and returns a MoveResult."""
    if game == 'sudoku':
        return {
            'select': _state_only(sudoku.select_cell),
            'enter': sudoku.enter_number,
            'hint': sudoku.give_hint,
            'check': sudoku.check_solution,
            'solve': _state_only(sudoku.fill_solution),
            'reset': _state_only(lambda s: sudoku.reset(s, rng)),
        }
    if game == 'minesweeper':
        return {
            'press': minesweeper.press,
            'long_press': minesweeper.long_press,
            'reveal': minesweeper.reveal,
            'flag': minesweeper.toggle_flag,
            'toggle_flag_mode': _state_only(minesweeper.toggle_flag_mode),
            'reset': _state_only(minesweeper.reset_same_board),
            'restart': _state_only(lambda s: minesweeper.restart(s, rng)),
            'change_level': lambda s, level_index: minesweeper.change_level(s, level_index, rng),
        }
    if game == 'tictactoe':
        return {
            'play': tictactoe.play,
            'new_round': _state_only(tictactoe.new_round),
            'reset_scores': _state_only(tictactoe.reset_scores),
            'set_difficulty': _state_only(tictactoe.set_difficulty),
        }
    if game == 'watersort':
        return {
            'select': watersort.select,
            'undo': watersort.undo,
            'reset': _state_only(lambda s: watersort.reset(s, rng)),
            'shuffle': _state_only(lambda s: watersort.shuffle(s, rng)),
            'next_level': _state_only(lambda s: watersort.next_level(s, rng)),
        }
    if game == 'wordle':
        return {
            'type': wordle.type_letter,
            'backspace': wordle.backspace,
            'clear': wordle.clear_row,
            'submit': wordle.submit,
            'next_level': lambda s: wordle.next_level(s, rng),
            'retry': _state_only(lambda s: wordle.retry_level(s, rng)),
        }
    if game == 'memory':
        return {
            'flip': memory.flip,
            'restart': _state_only(lambda s, pairs=None: memory.restart(s, pairs, rng)),
        }
    if game == 'snake':
        return {
            'turn': snake.change_direction,
            'restart': _state_only(lambda s: snake.restart(s, rng)),
        }
    if game == 'colorburst':
        return {
            'tap': lambda s, r, c: colorburst.tap(s, r, c, rng),
            'restart': _state_only(lambda s: colorburst.restart(rng)),
        }
    raise ValueError(f'unknown game: {game}')


def continuations_for(game: str, rng: random.Random) -> Dict[str, Callable[..., MoveResult]]:
    """
    Steps a GameSession runs on its own timer. Stateless hosts (the HTTP API)
    let the client trigger them after the same delays.
    """
    if game == 'tictactoe':
        return {'bot': lambda s: tictactoe.bot_move(s, rng)}
    if game == 'memory':
        return {'resolve': _state_only(memory.resolve)}
    if game == 'snake':
        return {'step': _state_only(lambda s: snake.step(s, rng))}
    return {}


def feedback_for(before: Status, result: MoveResult) -> Optional[Feedback]:
    """Haptic event for a finished action, keyed on the notice and the status transition."""
    notice = result.notice
    if notice is not None and notice.kind in (NoticeKind.INVALID_MOVE, NoticeKind.INCOMPLETE, NoticeKind.PENALTY):
        return Feedback.WARNING
    after = result.state.status
    if after != before:
        if after == Status.WON:
            return Feedback.SUCCESS
        if after == Status.LOST:
            return Feedback.ERROR
        if after == Status.DRAW:
            return Feedback.WARNING
    if notice is not None:
        return Feedback.SUCCESS
    return Feedback.LIGHT


class GameSession:
    """
    One running game: the engine snapshot plus everything around it
    (settings, clock, haptics, scores and delayed continuations such as the
    Memory flip-back or the Tic-Tac-Toe bot reply).

    Every new game, reset and dispose() bumps a generation counter; anything
    still queued on the scheduler from an older generation is dropped.
    """

    def __init__(
        self,
        game: str,
        settings: Optional[SettingsStore] = None,
        haptics: Optional[Haptics] = None,
        scores: Optional[ScoreService] = None,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        player_name: str = 'Player',
    ) -> None:
        if game not in GAMES:
            raise ValueError(f'unknown game: {game}')
        self.game = game
        self.settings_store = settings
        self.haptics = haptics or Haptics(settings=settings)
        self.scores = scores
        self.scheduler = scheduler or Scheduler()
        self.rng = rng or random.Random()
        self.player_name = player_name
        self._generation = Generation()
        self.seconds = 0
        self.last_notice: Optional[Notice] = None
        self.disposed = False
        self._actions = actions_for(game, self.rng)
        self.state: Any = None
        self.start()

    @property
    def settings(self) -> Settings:
        return self.settings_store.settings if self.settings_store else DEFAULT_SETTINGS

    @property
    def status(self) -> Status:
        return self.state.status

    # -- lifecycle ---------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation.value

    def _later(self, delay_ms: int, fn: Callable[[], None]) -> None:
        """Queues a continuation that only runs for the generation it was scheduled in."""
        self.scheduler.call_later(delay_ms, fn, self._generation.token())

    def start(self, **options: Any) -> Any:
        """Starts a fresh game from the current settings (options override them)."""
        self.state = create_state(self.game, self.settings, self.rng, **options)
        self._restart_clock()
        return self.state

    def _restart_clock(self) -> None:
        self._generation.bump()
        self.seconds = 0
        self.last_notice = None
        if self.game in TIMED_GAMES:
            self._later(TICK_MS, self._tick)
        elif self.game == 'snake':
            self._schedule_snake_step()

    def dispose(self) -> None:
        self._generation.bump()
        self.disposed = True

    # -- clock -------------------------------------------------------------

    def _ticking(self) -> bool:
        if not self.settings.timer_enabled:
            return False
        return self.state.status == Status.PLAYING

    def _tick(self) -> None:
        if self._ticking():
            self.seconds += 1
            if self.game == 'minesweeper':
                self.state = replace(self.state, seconds=self.seconds)
        self._later(TICK_MS, self._tick)

    def _schedule_snake_step(self) -> None:
        self._later(self.state.speed_ms, self._snake_step)

    def _snake_step(self) -> None:
        before = self.state
        self.state = snake.step(before, self.rng)
        if self.state.status == Status.LOST:
            self.haptics.emit(Feedback.ERROR)
            return
        if self.state.status == Status.WON:
            self.haptics.emit(Feedback.SUCCESS)
            return
        if self.state.score > before.score:
            self.haptics.emit(Feedback.MEDIUM)
        self._schedule_snake_step()

    # -- actions -----------------------------------------------------------

    def act(self, action: str, *args: Any, **kwargs: Any) -> MoveResult:
        """Runs one player action against the current snapshot."""
        if self.disposed:
            raise RuntimeError('session has been disposed')
        handler = self._actions.get(action)
        if handler is None:
            raise ValueError(f'unknown {self.game} action: {action}')
        before = self.state.status
        result = handler(self.state, *args, **kwargs)
        self.state = result.state
        self.last_notice = result.notice
        if action in RESET_ACTIONS and result.accepted:
            self._restart_clock()
            self.last_notice = result.notice
            return result

        feedback = feedback_for(before, result)
        if feedback is not None:
            self.haptics.emit(feedback)
        if result.accepted:
            self._after_move(before)
        return result

    def _after_move(self, before: Status) -> None:
        state = self.state
        if self.game == 'sudoku' and before != Status.WON and state.status == Status.WON:
            self._record_score(state.difficulty.lower())
        elif self.game == 'memory' and state.pending:
            self._later(state.pending_delay_ms(), self._resolve_memory)
        elif self.game == 'tictactoe' and state.running and state.current == tictactoe.BOT:
            self._later(BOT_DELAY_MS, self._bot_reply)

    def _record_score(self, level: str) -> None:
        if self.scores is None:
            return
        self.scores.save_score(self.player_name, self.seconds, level)

    def _resolve_memory(self) -> None:
        before = self.state
        self.state = memory.resolve(before)
        if self.state.matches > before.matches:
            self.haptics.emit(Feedback.SUCCESS)
        else:
            self.haptics.emit(Feedback.WARNING)

    def _bot_reply(self) -> None:
        before = self.state.status
        result = tictactoe.bot_move(self.state, self.rng)
        self.state = result.state
        if not result.accepted:
            log.debug('bot had no move: %s', result.notice)
            return
        feedback = feedback_for(before, result)
        if feedback is not None and feedback != Feedback.LIGHT:
            self.haptics.emit(feedback)
