from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional

from .settings import SettingsStore

log = logging.getLogger(__name__)


class Feedback(str, Enum):
    SUCCESS = 'success'
    WARNING = 'warning'
    ERROR = 'error'
    LIGHT = 'light'
    MEDIUM = 'medium'


Sink = Callable[[Feedback], None]


class Haptics:
    """
    Fire-and-forget feedback. The sink is whatever the host platform offers
    (a vibration motor, a sound, a log line); a failing sink never reaches the
    caller.
    """

    def __init__(self, sink: Optional[Sink] = None, settings: Optional[SettingsStore] = None) -> None:
        self.sink = sink
        self.settings = settings

    @property
    def enabled(self) -> bool:
        return self.settings is None or self.settings.settings.vibration_enabled

    def emit(self, feedback: Feedback) -> None:
        if self.sink is None or not self.enabled:
            return
        try:
            self.sink(feedback)
        except Exception as e:  # noqa: BLE001
            log.warning('haptics error (%s): %s', feedback.value, e)


class RecordingHaptics(Haptics):
    """Keeps every emitted event in memory."""

    def __init__(self, settings: Optional[SettingsStore] = None) -> None:
        self.events: List[Feedback] = []
        super().__init__(self.events.append, settings)
