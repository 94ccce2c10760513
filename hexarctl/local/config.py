import json
import shlex
import logging
from pathlib import Path
from types import ModuleType
from typing import Optional

import hexarctl.settings as default_settings

log = logging.getLogger(__name__)


class MergedSettings:
    """
    A singleton class that merges default settings with JSON/env overrides.

    This class provides a unified, attribute-based access point for all
    controller configuration. It follows a clear precedence:
    1. Base values from `settings.py`.
    2. Overrides from `.env` file (handled by `python-dotenv` in settings.py).
    3. Overrides from `hexarctl.json` for settings in `MODIFIABLE_SETTINGS`.
    """

    def __init__(self, defaults: ModuleType = default_settings, overrides_path: Optional[Path] = None) -> None:
        """
        Initializes the settings object by loading defaults and overrides.

        :param defaults: Module whose uppercase attributes are the defaults.
        :param overrides_path: JSON overrides file, defaults to `OVERRIDES_JSON_PATH`.
        """
        self._load_defaults(defaults)
        if overrides_path is not None:
            self.OVERRIDES_JSON_PATH = Path(overrides_path)
        self._load_overrides()

    def _load_defaults(self, defaults: ModuleType) -> None:
        """Loads all uppercase attributes from the settings module as defaults."""
        for key in dir(defaults):
            if key.isupper():
                setattr(self, key, getattr(defaults, key))

    def _load_overrides(self) -> None:
        """
        Loads and applies settings from the `hexarctl.json` file.

        Only keys listed in `MODIFIABLE_SETTINGS` are applied, and each value
        is coerced to the type of its default.
        """
        if not self.OVERRIDES_JSON_PATH.exists():
            return

        try:
            with self.OVERRIDES_JSON_PATH.open('r') as f:
                overrides = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            log.error(f"Failed to load or parse overrides file '{self.OVERRIDES_JSON_PATH}': {e}")
            return

        if not isinstance(overrides, dict):
            log.error(f"Overrides file '{self.OVERRIDES_JSON_PATH}' must contain a JSON object. Ignoring.")
            return

        log.debug(f"Loading controller overrides from {self.OVERRIDES_JSON_PATH}")
        for key, value in overrides.items():
            if not hasattr(self, key):
                log.warning(f"Override setting '{key}' not found in default settings. Ignoring.")
                continue
            if key not in self.MODIFIABLE_SETTINGS:
                log.warning(f"Attempted to override non-modifiable setting '{key}'. Ignoring.")
                continue
            try:
                setattr(self, key, self._coerce(getattr(self, key), value))
                log.debug(f"Overridden setting: {key} = {value}")
            except (ValueError, TypeError) as e:
                log.error(f"Could not convert value '{value}' for key '{key}': {e}")

    @staticmethod
    def _coerce(original, value):
        """Coerces an override to the type of the default it replaces."""
        if isinstance(original, bool):
            return str(value).lower() in ('true', '1', 't', 'yes', 'y')
        if isinstance(original, Path):
            return Path(value)
        if isinstance(original, list):
            if isinstance(value, str):
                return shlex.split(value)
            return [str(part) for part in value]
        if original is not None:
            return type(original)(value)
        return value

# Create a singleton instance to be imported by other modules
effective_settings = MergedSettings()
