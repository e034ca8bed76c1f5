"""
Settings file I/O.

Settings live in ~/.fretboard/settings.json. Values from the file are
merged over the defaults per category so new settings are always present.
"""
import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from core.constants import TOTAL_FRETS

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".fretboard" / "settings.json"

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "audio": {
        "sample_rate": 44100,
        "buffer_size": 512,
        "output_device": "Default",
    },
    "playback": {
        "hover_duration": 0.5,        # passive preview, polyphonic
        "click_duration": 0.8,
        "performance_duration": 1.5,  # shift+click, monophonic
    },
    "fretboard": {
        "total_frets": TOTAL_FRETS,
    },
    # PluckPreset overrides (field name -> value)
    "synth": {},
    "video": {
        "ui_scale": 1.0,
    },
}


def default_settings() -> Dict[str, Dict[str, Any]]:
    """Fresh copy of the default settings."""
    return copy.deepcopy(DEFAULT_SETTINGS)


def _resolve(path: Optional[Union[str, Path]]) -> Path:
    if path is None:
        return DEFAULT_SETTINGS_PATH
    return Path(path)


def load_settings(path: Optional[Union[str, Path]] = None) -> Dict[str, Dict[str, Any]]:
    """
    Load settings from config file.

    A missing file is created with the defaults. A file that cannot be read
    or parsed is left alone and the defaults are returned.

    Args:
        path: Settings file (defaults to ~/.fretboard/settings.json)

    Returns:
        Settings dictionary keyed by category
    """
    config_path = _resolve(path)
    settings = default_settings()

    if not config_path.exists():
        try:
            save_settings(settings, config_path)
            logger.info("[SETTINGS] Created new settings file with defaults at %s", config_path)
        except OSError as e:
            logger.warning("[SETTINGS] Failed to save default settings: %s", e)
        return settings

    try:
        with open(config_path, "r") as f:
            loaded = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("[SETTINGS] Failed to load settings from %s: %s", config_path, e)
        return settings

    if not isinstance(loaded, dict):
        logger.warning("[SETTINGS] Ignoring settings file %s: top level is not an object", config_path)
        return settings

    # Merge with defaults (in case new settings added)
    for category, values in loaded.items():
        if not isinstance(values, dict):
            logger.warning("[SETTINGS] Ignoring non-object category %r", category)
            continue
        settings.setdefault(category, {}).update(values)

    return settings


def save_settings(settings: Dict[str, Dict[str, Any]],
                  path: Optional[Union[str, Path]] = None) -> None:
    """
    Save settings to config file.

    Raises:
        OSError: If the file cannot be written
    """
    config_path = _resolve(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        json.dump(settings, f, indent=2)
