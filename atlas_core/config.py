"""
Singleton configuration loader for the atlas.

Reads config.json once and provides dot-notation access.  Every key the code
reads is listed in CONFIG_SCHEMA with its type and default, so an empty or
missing config.json still yields a working atlas.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from atlas_core.errors import AtlasConfigError
from atlas_core.logging import get_logger

logger = get_logger("atlas_core.config")

# Each entry: (type, default_value)
# Types: str, int, float, bool, None (any)
CONFIG_SCHEMA: Dict[str, tuple] = {
    # Paths
    "paths.logs_dir":               (str,   "logs"),
    "paths.maps_path":              (str,   "data/maps.json"),
    "paths.preferences_path":       (str,   "data/preferences.json"),

    # Logging (read directly by atlas_core.logging)
    "logging.console_level":        (str,   "INFO"),
    "logging.file_level":           (str,   "DEBUG"),

    # Atlas geometry (must match the background image)
    "atlas.scale":                  (float, 2.5),
    "atlas.offset":                 (float, 6.0),
    "atlas.background.width":       (float, 1003.52),
    "atlas.background.height":      (float, 564.48),
    "atlas.background.image":       (str,   "/atlas.webp"),
    "atlas.background_id":          (str,   "bg"),

    # Graph encoding
    "atlas.edge_separator":         (str,   "-"),
    "atlas.faded_opacity":          (float, 0.4),
    "atlas.rating_max":             (float, 10.0),
    "atlas.prune_dangling_edges":   (bool,  False),

    # Viewport
    "atlas.fit_delay_seconds":      (float, 0.15),

    # Visualizer
    "visualizer.host":              (str,   "localhost"),
    "visualizer.port":              (int,   8080),
    "visualizer.static_dir":        (str,   "./visualizer/static"),
}


def _type_matches(value: Any, expected_type: type) -> bool:
    # JSON has no int/float distinction worth warning about; bool is not a number.
    if expected_type is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected_type is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, expected_type)


class Config:
    """Process-wide configuration backed by config.json."""

    _instance: Optional["Config"] = None
    _data: Dict[str, Any]

    def __new__(cls) -> "Config":
        if cls._instance is None:
            inst = super().__new__(cls)
            inst._data = {}
            inst._load()
            cls._instance = inst
        return cls._instance

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load(self) -> None:
        config_path = Path("config.json")
        if not config_path.exists():
            logger.debug("config.json not found, using schema defaults")
            self._data = {}
            return

        with open(config_path, "r") as fh:
            self._data = json.load(fh)

        logger.info("Loaded configuration from config.json")

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve a value by dot-separated key (e.g. ``"atlas.scale"``).

        Lookup order:
        1. Value from config.json (if present and not None).
        2. Caller-supplied *default*.
        3. Schema default from CONFIG_SCHEMA.
        """
        value = self._traverse(key)
        if value is not None:
            return value
        if default is not None:
            return default
        schema_entry = CONFIG_SCHEMA.get(key)
        if schema_entry is not None:
            return schema_entry[1]
        return None

    def require(self, key: str) -> Any:
        """
        Like :meth:`get` but without defaults: raises :class:`AtlasConfigError`
        when config.json does not set the key.
        """
        value = self._traverse(key)
        if value is None:
            logger.error("Missing required config key: %s", key)
            raise AtlasConfigError(key)
        return value

    def validate(self) -> List[str]:
        """
        Checks config.json values against CONFIG_SCHEMA.

        Returns a list of warning strings for type mismatches.  Does not
        raise; config.json values always take precedence.
        """
        warnings = []
        for key, (expected_type, _default) in CONFIG_SCHEMA.items():
            if expected_type is None:
                continue
            value = self._traverse(key)
            if value is not None and not _type_matches(value, expected_type):
                warnings.append(
                    f"Config '{key}': expected {expected_type.__name__}, "
                    f"got {type(value).__name__} ({value!r})"
                )
        for w in warnings:
            logger.warning(w)
        return warnings

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _traverse(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if isinstance(node, dict):
                node = node.get(part)
            else:
                return None
            if node is None:
                return None
        return node

    def __repr__(self) -> str:
        return f"<Config keys={list(self._data.keys())}>"


# Module-level singleton
config = Config()
