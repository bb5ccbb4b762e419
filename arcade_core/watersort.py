from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from .state import MoveResult, Notice, NoticeKind, Status, rejected

log = logging.getLogger(__name__)

Bottle = Tuple[int, ...]  # colour ids, bottom first
Bottles = Tuple[Bottle, ...]

PALETTE: Tuple[str, ...] = (
    '#FF6B6B',
    '#FFD93D',
    '#6BCB77',
    '#4D96FF',
    '#9D4EDD',
    '#FF9F1C',
    '#14B8A6',
    '#F97373',
    '#FBBF24',
    '#2DD4BF',
    '#818CF8',
)
ROWS = 4
MAX_BOTTLES = 10
# Every difficulty starts from level 1; levels grow from there.
LEVEL_FROM_SETTINGS: Tuple[int, ...] = (1,)


@dataclass(frozen=True)
class LevelConfig:
    rows: int
    colors: int
    bottles: int


def level_config(level: int) -> LevelConfig:
    colors = min(2 + level // 3, len(PALETTE))
    return LevelConfig(rows=ROWS, colors=colors, bottles=min(colors + 2, MAX_BOTTLES))


def start_level_for_index(level_index: int) -> int:
    if 0 <= level_index < len(LEVEL_FROM_SETTINGS):
        return LEVEL_FROM_SETTINGS[level_index]
    return 1


def top_color(bottle: Bottle) -> Optional[int]:
    return bottle[-1] if bottle else None


def top_run(bottle: Bottle) -> int:
    """Length of the contiguous same-colour run at the top of bottle."""
    if not bottle:
        return 0
    color = bottle[-1]
    count = 0
    for unit in reversed(bottle):
        if unit != color:
            break
        count += 1
    return count


def can_pour(bottles: Bottles, src: int, dst: int, rows: int = ROWS) -> bool:
    if src == dst:
        return False
    if not bottles[src]:
        return False
    if len(bottles[dst]) >= rows:
        return False
    to_top = top_color(bottles[dst])
    return to_top is None or to_top == top_color(bottles[src])


def pour(bottles: Bottles, src: int, dst: int, rows: int = ROWS) -> Bottles:
    """Moves min(top run of src, free space of dst) units; caller checks can_pour first."""
    move = min(top_run(bottles[src]), rows - len(bottles[dst]))
    out = list(bottles)
    out[dst] = bottles[dst] + bottles[src][len(bottles[src]) - move:]
    out[src] = bottles[src][:len(bottles[src]) - move]
    return tuple(out)


def is_level_completed(bottles: Bottles, rows: int = ROWS) -> bool:
    return all(
        len(b) == 0 or (len(b) == rows and all(x == b[0] for x in b))
        for b in bottles
    )


def deal(units: Sequence[int], config: LevelConfig, rng: random.Random) -> Bottles:
    """Shuffles units and fills the first config.colors bottles; the rest stay empty."""
    shuffled = list(units)
    rng.shuffle(shuffled)
    bottles: List[List[int]] = [[] for _ in range(config.bottles)]
    idx = 0
    for b in range(config.colors):
        while len(bottles[b]) < config.rows and idx < len(shuffled):
            bottles[b].append(shuffled[idx])
            idx += 1
    return tuple(tuple(b) for b in bottles)


@dataclass(frozen=True)
class WaterSortState:
    level: int
    bottles: Bottles
    selected: int = -1
    history: Tuple[Bottles, ...] = ()
    status: Status = Status.PLAYING

    @property
    def config(self) -> LevelConfig:
        return level_config(self.level)

    @property
    def completed(self) -> bool:
        return self.status == Status.WON


def init_level(level: int = 1, rng: Optional[random.Random] = None) -> WaterSortState:
    if level < 1:
        raise ValueError('level must be >= 1')
    rng = rng or random.Random()
    config = level_config(level)
    units = [color for color in range(config.colors) for _ in range(config.rows)]
    return WaterSortState(level=level, bottles=deal(units, config, rng))


def select(state: WaterSortState, index: int) -> MoveResult[WaterSortState]:
    """Tap handling: pick a source bottle, tap it again to drop it, or tap a target to pour."""
    if state.completed:
        return rejected(state, 'Level is already completed.')
    if not 0 <= index < len(state.bottles):
        return rejected(state, 'No such bottle.')
    if state.selected == -1:
        if not state.bottles[index]:
            return rejected(state, 'That bottle is empty.')
        return MoveResult(replace(state, selected=index))
    if state.selected == index:
        return MoveResult(replace(state, selected=-1))

    src, dst = state.selected, index
    rows = state.config.rows
    if not can_pour(state.bottles, src, dst, rows):
        return rejected(replace(state, selected=-1), 'That move is not allowed.')
    nxt = pour(state.bottles, src, dst, rows)
    done = is_level_completed(nxt, rows)
    new_state = replace(
        state,
        bottles=nxt,
        selected=-1,
        history=state.history + (state.bottles,),
        status=Status.WON if done else Status.PLAYING,
    )
    if done:
        log.debug('water sort level %d completed', state.level)
        return MoveResult(new_state, Notice(NoticeKind.INFO, f'Congratulations! Level {state.level} completed.'))
    return MoveResult(new_state)


def undo(state: WaterSortState) -> MoveResult[WaterSortState]:
    if not state.history:
        return rejected(state, 'Nothing to undo.')
    last = state.history[-1]
    done = is_level_completed(last, state.config.rows)
    return MoveResult(replace(
        state,
        bottles=last,
        selected=-1,
        history=state.history[:-1],
        status=Status.WON if done else Status.PLAYING,
    ))


def reset(state: WaterSortState, rng: Optional[random.Random] = None) -> WaterSortState:
    return init_level(state.level, rng)


def shuffle(state: WaterSortState, rng: Optional[random.Random] = None) -> WaterSortState:
    """Redeals the units currently in play across the level's bottles."""
    rng = rng or random.Random()
    units = [unit for bottle in state.bottles for unit in bottle]
    return WaterSortState(level=state.level, bottles=deal(units, state.config, rng))


def next_level(state: WaterSortState, rng: Optional[random.Random] = None) -> WaterSortState:
    return init_level(state.level + 1, rng)


def color_totals(bottles: Bottles) -> dict:
    totals: dict = {}
    for bottle in bottles:
        for unit in bottle:
            totals[unit] = totals.get(unit, 0) + 1
    return totals
