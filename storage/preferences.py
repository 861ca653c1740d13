"""
Persisted display preferences.

A small JSON key/value file that survives between sessions.  The atlas
stores two keys: ``scoreHeatmap`` (bool) and ``voidstones`` (int).

Usage:
    prefs = PreferenceStore()
    mode = load_display_mode(prefs)
    save_display_mode(prefs, mode.with_voidstones(2))
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from atlas_core.config import config
from atlas_core.errors import AtlasConfigError, AtlasStorageError
from atlas_core.logging import get_logger
from atlas_core.protocols import KeyValueStore
from atlas_core.types import DisplayMode

logger = get_logger("preferences")

SCORE_HEATMAP_KEY = "scoreHeatmap"
VOIDSTONES_KEY = "voidstones"


class PreferenceStore:
    """JSON-file key/value store.  Every ``set`` is written through."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or config.get("paths.preferences_path"))
        self._values = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r") as fh:
                values = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable preferences at {self.path}: {e}")
            return {}
        if not isinstance(values, dict):
            logger.warning(f"Ignoring preferences at {self.path}: not a JSON object")
            return {}
        return values

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value
        self._save()

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as fh:
                json.dump(self._values, fh, indent=2)
        except OSError as e:
            raise AtlasStorageError("preferences", str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)


def load_display_mode(store: KeyValueStore) -> DisplayMode:
    """
    Display mode from *store*.  Unusable stored values fall back to the
    defaults (tier colouring, no voidstones).
    """
    heatmap = store.get(SCORE_HEATMAP_KEY, False)
    if not isinstance(heatmap, bool):
        logger.warning(f"Ignoring stored {SCORE_HEATMAP_KEY}={heatmap!r}")
        heatmap = False

    level = store.get(VOIDSTONES_KEY, 0)
    # Older sessions stored the level as a string.
    if isinstance(level, str) and level.strip().isdigit():
        level = int(level)
    try:
        return DisplayMode(score_heatmap=heatmap, voidstones=level)
    except AtlasConfigError as e:
        logger.warning(f"Ignoring stored {VOIDSTONES_KEY}: {e}")
        return DisplayMode(score_heatmap=heatmap)


def save_display_mode(store: KeyValueStore, mode: DisplayMode) -> None:
    store.set(SCORE_HEATMAP_KEY, mode.score_heatmap)
    store.set(VOIDSTONES_KEY, mode.voidstones)
