from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

Callback = Callable[[], None]


class Generation:
    """
    Monotonic counter owned by one session. Every reset bumps it, which
    invalidates all tokens handed out before.
    """

    def __init__(self) -> None:
        self.value = 0

    def bump(self) -> int:
        self.value += 1
        return self.value

    def token(self) -> 'Token':
        return Token(self, self.value)


@dataclass(frozen=True)
class Token:
    owner: Generation = field(compare=False)
    generation: int

    @property
    def live(self) -> bool:
        return self.owner.value == self.generation


class Scheduler:
    """
    Deterministic virtual clock. Hosts call advance() from their own loop;
    callbacks whose token went stale are dropped when they come due.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._queue: List[Tuple[int, int, Callback, Optional[Token]]] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: int, callback: Callback, token: Optional[Token] = None) -> None:
        if delay_ms < 0:
            raise ValueError('delay must be non-negative')
        heapq.heappush(self._queue, (self.now_ms + delay_ms, next(self._seq), callback, token))

    def call_every(self, interval_ms: int, callback: Callback, token: Token) -> None:
        """Repeats callback every interval until the token goes stale."""
        if interval_ms <= 0:
            raise ValueError('interval must be positive')

        def fire() -> None:
            callback()
            if token.live:
                self.call_later(interval_ms, fire, token)

        self.call_later(interval_ms, fire, token)

    @property
    def pending(self) -> int:
        return sum(1 for _, _, _, token in self._queue if token is None or token.live)

    def advance(self, ms: int) -> int:
        """Moves the clock forward and runs what came due, in order. Returns how many ran."""
        target = self.now_ms + ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, callback, token = heapq.heappop(self._queue)
            self.now_ms = due
            if token is not None and not token.live:
                continue
            callback()
            ran += 1
        self.now_ms = target
        return ran

    def run_pending(self) -> int:
        """Runs everything queued so far, however far in the future."""
        if not self._queue:
            return 0
        return self.advance(max(due for due, _, _, _ in self._queue) - self.now_ms)
