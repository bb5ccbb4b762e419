from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .state import MoveResult, Status, rejected

log = logging.getLogger(__name__)

# settings.default_level_index -> number of pairs
PAIRS_MAP: Tuple[int, ...] = (4, 6, 8)
SYMBOLS: Tuple[str, ...] = (
    '🍎', '🍌', '🍇', '🍓', '🍍', '🥑', '🍑',
    '🍒', '🍉', '🍋', '🥝', '🥥', '🍐', '🍊',
)
MATCH_DELAY_MS = 300
MISMATCH_DELAY_MS = 600


@dataclass(frozen=True)
class Card:
    id: str
    symbol: str
    flipped: bool = False
    matched: bool = False


def pairs_for_index(level_index: int) -> int:
    if 0 <= level_index < len(PAIRS_MAP):
        return PAIRS_MAP[level_index]
    return 6


def build_deck(pairs: int, rng: Optional[random.Random] = None) -> Tuple[Card, ...]:
    if not 1 <= pairs <= len(SYMBOLS):
        raise ValueError(f'pairs must be between 1 and {len(SYMBOLS)}')
    rng = rng or random.Random()
    use = list(SYMBOLS[:pairs])
    deck = use + use
    rng.shuffle(deck)
    return tuple(Card(id=str(i), symbol=s) for i, s in enumerate(deck))


@dataclass(frozen=True)
class MemoryState:
    cards: Tuple[Card, ...]
    total_pairs: int
    first: Optional[int] = None
    second: Optional[int] = None  # set while a pair waits for resolve()
    locked: bool = False
    moves: int = 0
    matches: int = 0
    status: Status = Status.PLAYING

    @property
    def pending(self) -> bool:
        return self.second is not None

    def pending_delay_ms(self) -> Optional[int]:
        """Delay the host should wait before calling resolve(), if a pair is face up."""
        if self.first is None or self.second is None:
            return None
        same = self.cards[self.first].symbol == self.cards[self.second].symbol
        return MATCH_DELAY_MS if same else MISMATCH_DELAY_MS


def new_game(pairs: int = 6, rng: Optional[random.Random] = None) -> MemoryState:
    return MemoryState(cards=build_deck(pairs, rng), total_pairs=pairs)


def _set_card(cards: Tuple[Card, ...], index: int, card: Card) -> Tuple[Card, ...]:
    out = list(cards)
    out[index] = card
    return tuple(out)


def flip(state: MemoryState, index: int) -> MoveResult[MemoryState]:
    """Turns a card face up; the second card of a turn locks the board until resolve()."""
    if state.status.terminal:
        return rejected(state, 'Game is over.')
    if state.locked:
        return rejected(state, 'Wait for the cards to settle.')
    if not 0 <= index < len(state.cards):
        return rejected(state, 'No such card.')
    card = state.cards[index]
    if card.flipped or card.matched:
        return rejected(state, 'Card is already face up.')

    cards = _set_card(state.cards, index, replace(card, flipped=True))
    if state.first is None:
        return MoveResult(replace(state, cards=cards, first=index))
    return MoveResult(replace(state, cards=cards, second=index, locked=True, moves=state.moves + 1))


def resolve(state: MemoryState) -> MemoryState:
    """Settles the face-up pair: matched cards stay, others turn back."""
    if state.first is None or state.second is None:
        return state
    a, b = state.first, state.second
    cards = state.cards
    if cards[a].symbol == cards[b].symbol:
        cards = _set_card(cards, a, replace(cards[a], matched=True))
        cards = _set_card(cards, b, replace(cards[b], matched=True))
        matches = state.matches + 1
        status = Status.WON if matches == state.total_pairs else state.status
        if status == Status.WON:
            log.debug('memory cleared in %d moves', state.moves)
        return replace(state, cards=cards, first=None, second=None, locked=False, matches=matches, status=status)
    cards = _set_card(cards, a, replace(cards[a], flipped=False))
    cards = _set_card(cards, b, replace(cards[b], flipped=False))
    return replace(state, cards=cards, first=None, second=None, locked=False)


def restart(state: MemoryState, pairs: Optional[int] = None, rng: Optional[random.Random] = None) -> MemoryState:
    return new_game(pairs or state.total_pairs, rng)
