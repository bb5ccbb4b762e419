from __future__ import annotations

import logging
import os
import random
from typing import Any, Callable, Dict, List, Optional, Tuple

from flask import Flask, jsonify, request

from arcade_core import colorburst, memory, minesweeper, snake, sudoku, tictactoe, watersort, wordle
from arcade_core.grid import Grid
from arcade_core.scores import ScoreService
from arcade_core.session import GAMES, actions_for, continuations_for, create_state
from arcade_core.settings import SettingsStore
from arcade_core.state import MoveResult, Status

DEFAULT_SCORES_DB = os.getenv('ARCADE_SCORES_DB', os.path.join('data', 'scores.db'))
DEFAULT_SETTINGS_FILE = os.getenv('ARCADE_SETTINGS_FILE', os.path.join('data', 'settings.json'))

logging.basicConfig(level=os.getenv('ARCADE_LOG_LEVEL', 'INFO').upper())
log = logging.getLogger(__name__)

app = Flask(__name__)

SETTINGS_STORE = SettingsStore(DEFAULT_SETTINGS_FILE)
SCORE_SERVICE = ScoreService(DEFAULT_SCORES_DB)


def configure(settings_file: Optional[str] = None, scores_db: Optional[str] = None) -> None:
    """Points the API at other storage files (tests use temporary ones)."""
    global SETTINGS_STORE, SCORE_SERVICE
    if settings_file is not None:
        SETTINGS_STORE = SettingsStore(settings_file)
    if scores_db is not None:
        SCORE_SERVICE = ScoreService(scores_db)


# ---------- JSON codecs ----------

def _coord(v: Any) -> Optional[Tuple[int, int]]:
    if v is None:
        return None
    r, c = v
    return (int(r), int(c))


def _int_grid(rows: List[List[Any]]) -> Grid[int]:
    return Grid.from_rows([[int(v) for v in row] for row in rows])


def _sudoku_to_json(s: sudoku.SudokuState) -> Dict[str, Any]:
    return {
        'solution': s.solution.rows(),
        'puzzle': s.puzzle.rows(),
        'difficulty': s.difficulty,
        'status': s.status.value,
        'selected': list(s.selected) if s.selected else None,
        'emptyCells': sudoku.empty_cells(s.puzzle),
    }


def _json_to_sudoku(obj: Dict[str, Any]) -> sudoku.SudokuState:
    return sudoku.SudokuState(
        solution=_int_grid(obj['solution']),
        puzzle=_int_grid(obj['puzzle']),
        difficulty=str(obj['difficulty']),
        status=Status(obj.get('status', 'playing')),
        selected=_coord(obj.get('selected')),
    )


def _mines_to_json(s: minesweeper.MinesState) -> Dict[str, Any]:
    return {
        'board': [
            [{'mined': c.mined, 'revealed': c.revealed, 'flagged': c.flagged, 'near': c.near} for c in row]
            for row in s.board.rows()
        ],
        'levelIndex': s.level.index,
        'remaining': s.remaining,
        'flags': s.flags,
        'flagMode': s.flag_mode,
        'status': s.status.value,
        'seconds': s.seconds,
    }


def _json_to_mines(obj: Dict[str, Any]) -> minesweeper.MinesState:
    board = Grid.from_rows([
        [minesweeper.Cell(bool(c['mined']), bool(c['revealed']), bool(c['flagged']), int(c['near'])) for c in row]
        for row in obj['board']
    ])
    return minesweeper.MinesState(
        board=board,
        level=minesweeper.LEVELS[int(obj['levelIndex'])],
        remaining=int(obj['remaining']),
        flags=int(obj.get('flags', 0)),
        flag_mode=bool(obj.get('flagMode', False)),
        status=Status(obj.get('status', 'ready')),
        seconds=int(obj.get('seconds', 0)),
    )


def _ttt_to_json(s: tictactoe.TicTacToeState) -> Dict[str, Any]:
    return {
        'board': list(s.board),
        'difficulty': s.difficulty,
        'current': s.current,
        'running': s.running,
        'winner': s.winner,
        'winningLine': list(s.winning_line),
        'scores': {'x': s.scores.x, 'o': s.scores.o, 'draw': s.scores.draw},
        'status': s.status.value,
        'statusText': s.status_text(),
    }


def _json_to_ttt(obj: Dict[str, Any]) -> tictactoe.TicTacToeState:
    board = tuple(str(v) for v in obj['board'])
    if len(board) != 9:
        raise ValueError('board must have 9 cells')
    scores = obj.get('scores') or {}
    return tictactoe.TicTacToeState(
        board=board,
        difficulty=str(obj.get('difficulty', 'easy')),
        current=str(obj.get('current', tictactoe.HUMAN)),
        running=bool(obj.get('running', True)),
        winner=obj.get('winner'),
        winning_line=tuple(int(i) for i in obj.get('winningLine', [])),
        scores=tictactoe.Scoreboard(int(scores.get('x', 0)), int(scores.get('o', 0)), int(scores.get('draw', 0))),
    )


def _bottles(raw: List[List[Any]]) -> watersort.Bottles:
    return tuple(tuple(int(u) for u in bottle) for bottle in raw)


def _watersort_to_json(s: watersort.WaterSortState) -> Dict[str, Any]:
    return {
        'level': s.level,
        'bottles': [list(b) for b in s.bottles],
        'selected': s.selected,
        'history': [[list(b) for b in snap] for snap in s.history],
        'status': s.status.value,
        'rows': s.config.rows,
        'palette': list(watersort.PALETTE),
    }


def _json_to_watersort(obj: Dict[str, Any]) -> watersort.WaterSortState:
    return watersort.WaterSortState(
        level=int(obj['level']),
        bottles=_bottles(obj['bottles']),
        selected=int(obj.get('selected', -1)),
        history=tuple(_bottles(snap) for snap in obj.get('history', [])),
        status=Status(obj.get('status', 'playing')),
    )


def _wordle_to_json(s: wordle.WordleState) -> Dict[str, Any]:
    return {
        'level': s.level,
        'solution': s.solution,
        'board': [list(row) for row in s.board],
        'tiles': [list(row) for row in s.tiles],
        'row': s.row,
        'col': s.col,
        'keys': s.keys,
        'status': s.status.value,
    }


def _json_to_wordle(obj: Dict[str, Any]) -> wordle.WordleState:
    return wordle.WordleState(
        level=int(obj['level']),
        solution=str(obj['solution']).upper(),
        board=tuple(tuple(str(ch) for ch in row) for row in obj['board']),
        tiles=tuple(tuple(str(t) for t in row) for row in obj['tiles']),
        row=int(obj.get('row', 0)),
        col=int(obj.get('col', 0)),
        key_states=tuple(sorted((str(k), str(v)) for k, v in (obj.get('keys') or {}).items())),
        status=Status(obj.get('status', 'playing')),
    )


def _memory_to_json(s: memory.MemoryState) -> Dict[str, Any]:
    return {
        'cards': [{'id': c.id, 'symbol': c.symbol, 'flipped': c.flipped, 'matched': c.matched} for c in s.cards],
        'totalPairs': s.total_pairs,
        'first': s.first,
        'second': s.second,
        'locked': s.locked,
        'moves': s.moves,
        'matches': s.matches,
        'status': s.status.value,
        'resolveInMs': s.pending_delay_ms(),
    }


def _json_to_memory(obj: Dict[str, Any]) -> memory.MemoryState:
    return memory.MemoryState(
        cards=tuple(
            memory.Card(str(c['id']), str(c['symbol']), bool(c.get('flipped')), bool(c.get('matched')))
            for c in obj['cards']
        ),
        total_pairs=int(obj['totalPairs']),
        first=obj.get('first'),
        second=obj.get('second'),
        locked=bool(obj.get('locked', False)),
        moves=int(obj.get('moves', 0)),
        matches=int(obj.get('matches', 0)),
        status=Status(obj.get('status', 'playing')),
    )


def _snake_to_json(s: snake.SnakeState) -> Dict[str, Any]:
    return {
        'grid': s.grid,
        'snake': [list(p) for p in s.snake],
        'food': list(s.food),
        'direction': list(s.direction),
        'turned': s.turned,
        'score': s.score,
        'speedMs': s.speed_ms,
        'status': s.status.value,
    }


def _json_to_snake(obj: Dict[str, Any]) -> snake.SnakeState:
    return snake.SnakeState(
        grid=int(obj['grid']),
        snake=tuple(_coord(p) for p in obj['snake']),
        food=_coord(obj['food']),
        direction=_coord(obj.get('direction', [1, 0])),
        turned=bool(obj.get('turned', False)),
        score=int(obj.get('score', 0)),
        speed_ms=int(obj.get('speedMs', snake.START_SPEED_MS)),
        status=Status(obj.get('status', 'playing')),
    )


def _colorburst_to_json(s: colorburst.ColorBurstState) -> Dict[str, Any]:
    return {
        'grid': [[{'color': b.color, 'locked': b.locked} for b in row] for row in s.grid.rows()],
        'level': s.level,
        'score': s.score,
        'colors': s.colors,
        'status': s.status.value,
    }


def _json_to_colorburst(obj: Dict[str, Any]) -> colorburst.ColorBurstState:
    return colorburst.ColorBurstState(
        grid=Grid.from_rows([[colorburst.Ball(str(b['color']), bool(b.get('locked'))) for b in row] for row in obj['grid']]),
        level=int(obj.get('level', 1)),
        score=int(obj.get('score', 0)),
        colors=int(obj.get('colors', colorburst.START_COLORS)),
        status=Status(obj.get('status', 'playing')),
    )


CODECS: Dict[str, Tuple[Callable[[Any], Dict[str, Any]], Callable[[Dict[str, Any]], Any]]] = {
    'sudoku': (_sudoku_to_json, _json_to_sudoku),
    'minesweeper': (_mines_to_json, _json_to_mines),
    'tictactoe': (_ttt_to_json, _json_to_ttt),
    'watersort': (_watersort_to_json, _json_to_watersort),
    'wordle': (_wordle_to_json, _json_to_wordle),
    'memory': (_memory_to_json, _json_to_memory),
    'snake': (_snake_to_json, _json_to_snake),
    'colorburst': (_colorburst_to_json, _json_to_colorburst),
}

# JSON argument names -> engine keyword names where they differ
_ARG_ALIASES = {'levelIndex': 'level_index', 'direction': 'name'}
_NEW_OPTIONS = {'levelIndex': 'level_index', 'difficulty': 'difficulty', 'level': 'level',
                'pairs': 'pairs', 'flagMode': 'flag_mode'}


def _action_args(raw: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        name = _ARG_ALIASES.get(key, key)
        out[name] = _coord(value) if name == 'cell' else value
    return out


def _notice_to_json(result: MoveResult) -> Optional[Dict[str, Any]]:
    if result.notice is None:
        return None
    return {'kind': result.notice.kind.value, 'message': result.notice.message}


# ---------- Game routes ----------

@app.post('/api/<game>/new')
def api_new(game: str) -> Any:
    if game not in GAMES:
        return jsonify({'ok': False, 'error': f'unknown game: {game}'}), 404
    body = request.get_json(force=True, silent=True) or {}
    rng = random.Random(body.get('seed'))
    options = {_NEW_OPTIONS[k]: v for k, v in body.items() if k in _NEW_OPTIONS}
    try:
        state = create_state(game, SETTINGS_STORE.settings, rng, **options)
    except (ValueError, TypeError, IndexError) as e:
        return jsonify({'ok': False, 'error': str(e)}), 400
    encode, _ = CODECS[game]
    return jsonify({'ok': True, 'state': encode(state)})


@app.post('/api/<game>/<action>')
def api_action(game: str, action: str) -> Any:
    if game not in GAMES:
        return jsonify({'ok': False, 'error': f'unknown game: {game}'}), 404
    body = request.get_json(force=True, silent=True) or {}
    rng = random.Random(body.get('seed'))
    handlers = dict(actions_for(game, rng))
    handlers.update(continuations_for(game, rng))
    handler = handlers.get(action)
    if handler is None:
        return jsonify({'ok': False, 'error': f'unknown {game} action: {action}'}), 404

    encode, decode = CODECS[game]
    s_in = body.get('state')
    if not isinstance(s_in, dict):
        return jsonify({'ok': False, 'error': 'state required'}), 400
    try:
        state = decode(s_in)
        result = handler(state, **_action_args(body.get('args') or {}))
    except (KeyError, ValueError, TypeError, IndexError) as e:
        return jsonify({'ok': False, 'error': f'bad request: {e}'}), 400

    if not result.accepted:
        return jsonify({
            'ok': False,
            'error': result.notice.message,
            'notice': _notice_to_json(result),
            'state': encode(result.state),
        }), 400

    if game == 'sudoku' and state.status != Status.WON and result.state.status == Status.WON:
        SCORE_SERVICE.save_score(
            str(body.get('name') or 'Player'),
            int(body.get('seconds', 0)),
            result.state.difficulty.lower(),
        )
    return jsonify({'ok': True, 'state': encode(result.state), 'notice': _notice_to_json(result)})


# ---------- Settings & scores ----------

@app.get('/api/settings')
def api_settings() -> Any:
    return jsonify({'ok': True, 'settings': SETTINGS_STORE.settings.to_json(), 'theme': SETTINGS_STORE.current_theme})


@app.post('/api/settings')
def api_settings_update() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        if body.get('reset'):
            settings = SETTINGS_STORE.reset()
        else:
            settings = SETTINGS_STORE.update(**(body.get('settings') or {}))
    except (ValueError, TypeError) as e:
        return jsonify({'ok': False, 'error': str(e)}), 400
    return jsonify({'ok': True, 'settings': settings.to_json(), 'theme': SETTINGS_STORE.current_theme})


@app.get('/api/scores')
def api_scores() -> Any:
    limit = request.args.get('limit', default=10, type=int)
    return jsonify({'ok': True, 'scores': [rec.to_json() for rec in SCORE_SERVICE.load_top_scores(limit)]})


@app.post('/api/scores')
def api_scores_save() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        name = str(body.get('name') or 'Player')
        seconds = int(body['time'])
        level = str(body['level'])
        errors = int(body.get('errors', 0))
    except (KeyError, ValueError, TypeError) as e:
        return jsonify({'ok': False, 'error': f'bad score: {e}'}), 400
    saved = SCORE_SERVICE.save_score(name, seconds, level, errors)
    return jsonify({'ok': saved})


# Entrypoint for "python app.py"
if __name__ == '__main__':
    debug = os.getenv('FLASK_DEBUG', '0').lower() in ('1', 'true', 'yes', 'on')
    app.run(host='0.0.0.0', port=int(os.getenv('PORT', '5000')), debug=debug)
