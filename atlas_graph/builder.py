"""
Graph construction for the atlas.

Turns the flat map collection into the node/edge snapshot a rendering
surface draws:

- only placed maps with at least one neighbour become nodes
- every node is positioned relative to the background anchor
- labels and colors follow the display mode
- non-matching maps are faded, never removed
- symmetric adjacency collapses to one edge per unordered pair

A malformed map degrades to a fallback label/color; it never stops the rest
of the graph from being built.
"""

from typing import AbstractSet, Iterable, Optional, Sequence, Tuple

from atlas_core.config import config
from atlas_core.logging import atlas_context, get_logger
from atlas_core.types import AtlasGraph, DisplayMode, Edge, MapEntity, MapName, Node
from atlas_graph.colors import as_number, has_exact_tier, resolve_tier
from atlas_graph.matcher import is_blank
from atlas_graph.registry import ColorScaleRegistry, default_registry
from atlas_graph.transform import AtlasGeometry, project_positions

logger = get_logger("atlas_graph.builder")


def format_number(value: float) -> str:
    """``7.0`` -> ``'7'``, ``7.5`` -> ``'7.5'``."""
    return str(int(value)) if float(value).is_integer() else str(value)


def node_label(entity: MapEntity, mode: DisplayMode) -> str:
    """``'<score> <name>'`` in heatmap mode, ``'T<tier> <name>'`` otherwise."""
    if mode.score_heatmap:
        score = as_number(entity.score)
        if score is None:
            logger.debug("Map %r has non-numeric score %r", entity.name, entity.score)
            return f"? {entity.name}"
        return f"{format_number(score)} {entity.name}"

    tier = resolve_tier(entity, mode.voidstones)
    if tier is None:
        logger.debug(
            "No usable tier data",
            extra=atlas_context(map_name=entity.name, voidstones=mode.voidstones),
        )
        return f"T? {entity.name}"
    if not has_exact_tier(entity, mode.voidstones):
        logger.debug(
            "No tier for voidstone level, showing T%d", tier,
            extra=atlas_context(map_name=entity.name, voidstones=mode.voidstones),
        )
    return f"T{tier} {entity.name}"


def visible_entities(entities: Iterable[MapEntity]) -> Tuple[MapEntity, ...]:
    """Placed, connected entities; the first of any duplicate name wins."""
    seen = set()
    visible = []
    for entity in entities:
        if not entity.is_visible:
            continue
        if entity.name in seen:
            logger.debug("Duplicate map name %r ignored", entity.name)
            continue
        seen.add(entity.name)
        visible.append(entity)
    return tuple(visible)


def derive_edges(
    entities: Iterable[MapEntity],
    separator: str = "-",
    restrict_to: Optional[AbstractSet[str]] = None,
) -> Tuple[Edge, ...]:
    """
    One edge per unordered pair of adjacent names.

    Args:
        entities: Maps whose adjacency lists produce edges.
        separator: Joins the sorted pair into the edge id.
        restrict_to: When given, edges to names outside this set are dropped.

    Returns:
        Edges in first-occurrence order, unique by id.  Self-references
        produce no edge.
    """
    seen_ids = set()
    edges = []
    for entity in entities:
        for other in entity.connected:
            if other == entity.name:
                continue
            if restrict_to is not None and other not in restrict_to:
                continue
            source, target = sorted((entity.name, other))
            edge_id = f"{source}{separator}{target}"
            if edge_id in seen_ids:
                continue
            seen_ids.add(edge_id)
            edges.append(Edge(id=edge_id, source=MapName(source), target=MapName(target)))
    return tuple(edges)


class GraphBuilder:
    """
    Builds AtlasGraph snapshots.  Holds only configuration, so one builder
    can be reused for every recomputation.

    Args:
        geometry: Coordinate transform and background (default: from config).
        registry: Color scales by name (default: score + tier).
        faded_opacity: Opacity of non-matching nodes.
        separator: Edge id separator.
        prune_dangling_edges: Drop edges to maps that are not nodes.
    """

    def __init__(
        self,
        geometry: Optional[AtlasGeometry] = None,
        registry: Optional[ColorScaleRegistry] = None,
        faded_opacity: Optional[float] = None,
        separator: Optional[str] = None,
        prune_dangling_edges: Optional[bool] = None,
    ):
        self.geometry = geometry or AtlasGeometry.from_config()
        self.registry = registry or default_registry()
        self.faded_opacity = float(
            faded_opacity if faded_opacity is not None else config.get("atlas.faded_opacity")
        )
        self.separator = separator if separator is not None else config.get("atlas.edge_separator")
        if prune_dangling_edges is None:
            prune_dangling_edges = config.get("atlas.prune_dangling_edges")
        self.prune_dangling_edges = bool(prune_dangling_edges)

    def build(
        self,
        entities: Sequence[MapEntity],
        matched_ids: Iterable[str],
        query: Optional[str],
        mode: DisplayMode,
    ) -> AtlasGraph:
        visible = visible_entities(entities)
        positions = project_positions(visible, self.geometry)
        matched = frozenset(matched_ids)
        show_all = is_blank(query)
        scale = self.registry.require(mode.color_scale)

        nodes = []
        for entity, (px, py) in zip(visible, positions):
            opacity = 1.0 if show_all or entity.name in matched else self.faded_opacity
            nodes.append(Node(
                id=entity.name,
                position=(float(px), float(py)),
                label=node_label(entity, mode),
                color=scale.color(entity, mode),
                opacity=opacity,
                parent=self.geometry.background_id,
            ))

        restrict_to = {e.name for e in visible} if self.prune_dangling_edges else None
        edges = derive_edges(visible, self.separator, restrict_to)

        logger.debug(
            "Built atlas graph",
            extra=atlas_context(
                nodes=len(nodes),
                edges=len(edges),
                heatmap=mode.score_heatmap,
                voidstones=mode.voidstones,
            ),
        )
        return AtlasGraph(
            background=self.geometry.background_node(),
            nodes=tuple(nodes),
            edges=edges,
        )


def build_graph(
    entities: Sequence[MapEntity],
    matched_ids: Iterable[str],
    query: Optional[str],
    mode: DisplayMode,
    geometry: Optional[AtlasGeometry] = None,
    registry: Optional[ColorScaleRegistry] = None,
) -> AtlasGraph:
    """Convenience: one-off GraphBuilder(...).build(...)."""
    return GraphBuilder(geometry=geometry, registry=registry).build(
        entities, matched_ids, query, mode
    )
