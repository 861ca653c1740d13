"""
Visualizer module for the voidstone atlas.

Provides web UI and API server for exploring the atlas:
- REST API serving graph snapshots for a search and display mode
- Map record lookup and counts
"""

from visualizer.server import AtlasServer

__all__ = ['AtlasServer']
