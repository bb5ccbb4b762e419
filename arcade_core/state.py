from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, Tuple, TypeVar

S = TypeVar('S')


class Status(str, Enum):
    """Lifecycle of a single game session."""
    READY = 'ready'
    PLAYING = 'playing'
    WON = 'won'
    LOST = 'lost'
    DRAW = 'draw'

    @property
    def terminal(self) -> bool:
        return self in (Status.WON, Status.LOST, Status.DRAW)


class NoticeKind(str, Enum):
    INVALID_MOVE = 'invalid_move'
    INCOMPLETE = 'incomplete'
    INFO = 'info'
    PENALTY = 'penalty'


@dataclass(frozen=True)
class Notice:
    """Transient user-visible message attached to a rejected or informative move."""
    kind: NoticeKind
    message: str


@dataclass(frozen=True)
class MoveResult(Generic[S]):
    """Outcome of applying a move: the next state plus an optional notice.

    A rejected move never alters the board or counters of the state it was given.
    A penalty is an accepted move that costs the player something.
    """
    state: S
    notice: Optional[Notice] = None

    @property
    def accepted(self) -> bool:
        return self.notice is None or self.notice.kind in (NoticeKind.INFO, NoticeKind.PENALTY)


def rejected(state: S, message: str, kind: NoticeKind = NoticeKind.INVALID_MOVE) -> MoveResult[S]:
    return MoveResult(state, Notice(kind, message))


@dataclass(frozen=True)
class Level:
    """A named difficulty shared by the level pickers (Easy/Medium/Hard)."""
    index: int
    label: str


LEVEL_LABELS: Tuple[str, ...] = ('Easy', 'Medium', 'Hard')


def level_for_index(index: int) -> Level:
    """Maps settings.default_level_index (0, 1, 2) to a Level."""
    if not 0 <= index < len(LEVEL_LABELS):
        raise ValueError(f'level index must be 0..{len(LEVEL_LABELS) - 1}, got {index}')
    return Level(index=index, label=LEVEL_LABELS[index])
