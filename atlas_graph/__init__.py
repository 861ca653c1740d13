"""
Atlas graph engine.

Turns map records into renderable atlas snapshots:
- Search matching (non-transitive, case-insensitive)
- Graph construction (visible set, positions, labels, colors, edge dedup)
- Viewport fitting (debounced, cancelable, generation-keyed)
"""

from atlas_graph.protocols import ColorScale
from atlas_graph.colors import RatingColorScale, TierColorScale, rating_color, tier_color
from atlas_graph.registry import ColorScaleRegistry, default_registry
from atlas_graph.matcher import matches, matching_names
from atlas_graph.transform import AtlasGeometry, project_positions
from atlas_graph.builder import GraphBuilder, build_graph, derive_edges
from atlas_graph.viewport import TimerScheduler, ViewportFitter, compute_fit_target
from atlas_graph.pipeline import AtlasPipeline
from atlas_graph.controller import AtlasController

__all__ = [
    # Protocols
    'ColorScale',
    # Color scales
    'RatingColorScale',
    'TierColorScale',
    'rating_color',
    'tier_color',
    'ColorScaleRegistry',
    'default_registry',
    # Matching
    'matches',
    'matching_names',
    # Geometry
    'AtlasGeometry',
    'project_positions',
    # Building
    'GraphBuilder',
    'build_graph',
    'derive_edges',
    # Viewport
    'ViewportFitter',
    'TimerScheduler',
    'compute_fit_target',
    # Orchestration
    'AtlasPipeline',
    'AtlasController',
]
