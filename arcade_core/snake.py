from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from .grid import Coord
from .state import MoveResult, Status, rejected

log = logging.getLogger(__name__)

# settings.default_level_index -> board side
GRID_SIZES: Tuple[int, ...] = (10, 15, 20)
START_SPEED_MS = 200
MIN_SPEED_MS = 60
SPEED_STEP_MS = 5

Point = Coord  # (x, y)
DIRECTIONS: Dict[str, Point] = {
    'UP': (0, -1),
    'DOWN': (0, 1),
    'LEFT': (-1, 0),
    'RIGHT': (1, 0),
}


def initial_snake(grid: int) -> Tuple[Point, ...]:
    mid = grid // 2
    return ((mid, mid), (mid - 1, mid))


def random_food(snake: Tuple[Point, ...], grid: int, rng: Optional[random.Random] = None) -> Point:
    occupied = set(snake)
    free = [(x, y) for y in range(grid) for x in range(grid) if (x, y) not in occupied]
    if not free:
        raise ValueError('no free cell left for food')
    return (rng or random).choice(free)


@dataclass(frozen=True)
class SnakeState:
    grid: int
    snake: Tuple[Point, ...]
    food: Point
    direction: Point = DIRECTIONS['RIGHT']
    turned: bool = False  # one direction change per tick
    score: int = 0
    speed_ms: int = START_SPEED_MS
    status: Status = Status.PLAYING

    @property
    def head(self) -> Point:
        return self.snake[0]


def new_game(level_index: int = 1, rng: Optional[random.Random] = None) -> SnakeState:
    if not 0 <= level_index < len(GRID_SIZES):
        raise ValueError(f'unknown snake level: {level_index}')
    grid = GRID_SIZES[level_index]
    body = initial_snake(grid)
    return SnakeState(grid=grid, snake=body, food=random_food(body, grid, rng))


def change_direction(state: SnakeState, name: str) -> MoveResult[SnakeState]:
    if state.status.terminal:
        return rejected(state, 'Game is over.')
    key = name.upper()
    if key not in DIRECTIONS:
        return rejected(state, f'Unknown direction: {name}')
    if state.turned:
        return rejected(state, 'Already turned this tick.')
    dx, dy = DIRECTIONS[key]
    if state.direction[0] + dx == 0 and state.direction[1] + dy == 0:
        return rejected(state, 'Cannot reverse onto itself.')
    return MoveResult(replace(state, direction=(dx, dy), turned=True))


def step(state: SnakeState, rng: Optional[random.Random] = None) -> SnakeState:
    """Advances the snake one cell; wall or body collision ends the game."""
    if state.status.terminal:
        return state
    hx, hy = state.head
    new_head = (hx + state.direction[0], hy + state.direction[1])
    x, y = new_head
    if not (0 <= x < state.grid and 0 <= y < state.grid) or new_head in state.snake:
        log.debug('snake crashed at %s with score %d', new_head, state.score)
        return replace(state, status=Status.LOST, turned=False)

    body = (new_head,) + state.snake
    if new_head == state.food:
        if len(body) == state.grid * state.grid:
            return replace(state, snake=body, score=state.score + 1, turned=False, status=Status.WON)
        return replace(
            state,
            snake=body,
            food=random_food(body, state.grid, rng),
            score=state.score + 1,
            speed_ms=max(MIN_SPEED_MS, state.speed_ms - SPEED_STEP_MS),
            turned=False,
        )
    return replace(state, snake=body[:-1], turned=False)


def restart(state: SnakeState, rng: Optional[random.Random] = None) -> SnakeState:
    return new_game(GRID_SIZES.index(state.grid), rng)
