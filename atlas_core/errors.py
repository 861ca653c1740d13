"""
Custom exception hierarchy for atlas_core.

Only genuinely unusable input raises.  Malformed entity fields, empty match
sets and a not-yet-initialised rendering surface are handled where they occur
so the atlas always renders something.
"""


class AtlasError(Exception):
    """Base exception for all atlas errors."""


class AtlasConfigError(AtlasError):
    """Raised when a configuration key or display setting is missing or invalid."""

    def __init__(self, key: str, reason: str = "missing or None"):
        self.key = key
        super().__init__(f"Configuration error for '{key}': {reason}")


class AtlasEntityError(AtlasError):
    """Raised when a map record cannot be turned into a MapEntity at all."""

    def __init__(self, detail: str, record: object = None):
        self.record = record
        super().__init__(f"Invalid map entity: {detail}")


class AtlasStorageError(AtlasError):
    """Raised when a map or preference file cannot be read or written."""

    def __init__(self, backend: str, detail: str):
        self.backend = backend
        super().__init__(f"Storage error [{backend}]: {detail}")
