"""
Storage layer for the atlas.

- MapStore: read-only map records from JSON or Parquet
- PreferenceStore: persisted display preferences (JSON)
"""

from storage.map_store import MapStore
from storage.preferences import (
    SCORE_HEATMAP_KEY,
    VOIDSTONES_KEY,
    PreferenceStore,
    load_display_mode,
    save_display_mode,
)

__all__ = [
    'MapStore',
    'PreferenceStore',
    'load_display_mode',
    'save_display_mode',
    'SCORE_HEATMAP_KEY',
    'VOIDSTONES_KEY',
]
