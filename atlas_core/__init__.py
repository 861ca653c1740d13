"""
atlas_core — minimal core library for the voidstone atlas.

Every other package imports from here.  It provides:
- Domain types (MapEntity, DisplayMode, Node, Edge, AtlasGraph, ...)
- Protocol definitions for external collaborators (surface, scheduler, store)
- Singleton configuration loader
- Custom exception hierarchy
- Structured JSON logger

This package contains **zero** graph logic — only primitives and
contracts.
"""

# Errors — import first, no internal deps
from atlas_core.errors import (
    AtlasConfigError,
    AtlasEntityError,
    AtlasError,
    AtlasStorageError,
)

# Logging
from atlas_core.logging import get_logger

# Configuration
from atlas_core.config import Config, config

# Domain types
from atlas_core.types import (
    POSSIBLE_VOIDSTONES,
    AtlasGraph,
    AtlasSnapshot,
    BackgroundNode,
    Bounds,
    DisplayMode,
    Edge,
    FitTarget,
    MapEntity,
    MapName,
    Node,
)

# Protocols
from atlas_core.protocols import (
    Cancellable,
    FitSurface,
    KeyValueStore,
    Scheduler,
    ScrollToElement,
)

__all__ = [
    # Errors
    "AtlasError",
    "AtlasConfigError",
    "AtlasEntityError",
    "AtlasStorageError",
    # Logging
    "get_logger",
    # Config
    "Config",
    "config",
    # Types
    "POSSIBLE_VOIDSTONES",
    "MapName",
    "Bounds",
    "MapEntity",
    "DisplayMode",
    "Node",
    "BackgroundNode",
    "Edge",
    "AtlasGraph",
    "FitTarget",
    "AtlasSnapshot",
    # Protocols
    "FitSurface",
    "ScrollToElement",
    "Cancellable",
    "Scheduler",
    "KeyValueStore",
]
