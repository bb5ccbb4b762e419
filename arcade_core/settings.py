from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable, Dict, List, Mapping

log = logging.getLogger(__name__)

STORAGE_KEY = '@global_game_settings_v1'


@dataclass(frozen=True)
class Settings:
    theme: str = 'dark'  # 'dark' | 'light'
    default_level_index: int = 1  # 0 easy, 1 medium, 2 hard
    timer_enabled: bool = True
    flag_mode_on_start: bool = False
    vibration_enabled: bool = True

    def to_json(self) -> Dict[str, Any]:
        return {
            'theme': self.theme,
            'defaultLevelIndex': self.default_level_index,
            'timerEnabled': self.timer_enabled,
            'flagModeOnStart': self.flag_mode_on_start,
            'vibrationEnabled': self.vibration_enabled,
        }


DEFAULT_SETTINGS = Settings()

THEMES: Dict[str, Dict[str, str]] = {
    'dark': {
        'background': '#0B1221',
        'board': '#0F1628',
        'text': '#FFFFFF',
        'subText': '#AEC4DF',
        'primary': '#1C88FF',
        'danger': '#FF3B5F',
    },
    'light': {
        'background': '#F4F7FB',
        'board': '#FFFFFF',
        'text': '#1A2333',
        'subText': '#5E6A80',
        'primary': '#1C88FF',
        'danger': '#FF3B5F',
    },
}

# camelCase keys as stored -> dataclass field names
_JSON_KEYS = {
    'theme': 'theme',
    'defaultLevelIndex': 'default_level_index',
    'timerEnabled': 'timer_enabled',
    'flagModeOnStart': 'flag_mode_on_start',
    'vibrationEnabled': 'vibration_enabled',
}
_FIELDS = {f.name for f in fields(Settings)}


def validate_patch(patch: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalises a settings patch (camelCase or snake_case keys) and checks values."""
    out: Dict[str, Any] = {}
    for key, value in patch.items():
        name = _JSON_KEYS.get(key, key)
        if name not in _FIELDS:
            raise ValueError(f'unknown setting: {key}')
        if name == 'theme':
            if value not in THEMES:
                raise ValueError(f'theme must be one of {sorted(THEMES)}')
        elif name == 'default_level_index':
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 2:
                raise ValueError('defaultLevelIndex must be 0, 1 or 2')
        elif not isinstance(value, bool):
            raise ValueError(f'{key} must be a boolean')
        out[name] = value
    return out


def merge_with_defaults(raw: Mapping[str, Any]) -> Settings:
    """Overlays recognised, valid stored values on top of the defaults."""
    merged = DEFAULT_SETTINGS
    for key, value in raw.items():
        try:
            merged = replace(merged, **validate_patch({key: value}))
        except ValueError:
            log.warning('ignoring stored setting %r=%r', key, value)
    return merged


class SettingsStore:
    """
    JSON key-value file holding the settings under STORAGE_KEY.
    Load and save failures are logged and swallowed; callers always get a
    usable Settings object.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._settings = DEFAULT_SETTINGS
        self._subscribers: List[Callable[[Settings], None]] = []
        self._settings = self.load()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def current_theme(self) -> Dict[str, str]:
        return THEMES.get(self._settings.theme, THEMES['dark'])

    def _read_storage(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def load(self) -> Settings:
        try:
            raw = self._read_storage().get(STORAGE_KEY)
        except (OSError, ValueError) as e:
            log.warning('settings load error: %s', e)
            return DEFAULT_SETTINGS
        if not raw:
            return DEFAULT_SETTINGS
        try:
            parsed = json.loads(raw) if isinstance(raw, str) else raw
        except ValueError as e:
            log.warning('settings load error: %s', e)
            return DEFAULT_SETTINGS
        if not isinstance(parsed, dict):
            return DEFAULT_SETTINGS
        return merge_with_defaults(parsed)

    def _save(self, settings: Settings) -> None:
        try:
            try:
                storage = self._read_storage()
            except ValueError:
                storage = {}
            storage[STORAGE_KEY] = json.dumps(settings.to_json())
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(storage, f, indent=2)
        except OSError as e:
            log.warning('settings save error: %s', e)

    def _commit(self, settings: Settings) -> Settings:
        self._settings = settings
        self._save(settings)
        for callback in list(self._subscribers):
            callback(settings)
        return settings

    def update(self, **patch: Any) -> Settings:
        return self._commit(replace(self._settings, **validate_patch(patch)))

    def toggle_theme(self) -> Settings:
        return self.update(theme='light' if self._settings.theme == 'dark' else 'dark')

    def reset(self) -> Settings:
        return self._commit(DEFAULT_SETTINGS)

    def subscribe(self, callback: Callable[[Settings], None]) -> Callable[[], None]:
        """Registers callback for every change; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self._settings)
