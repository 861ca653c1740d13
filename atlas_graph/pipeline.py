"""Atlas pipeline — orchestrates matching, graph building and fit targeting."""

from typing import Optional, Sequence, Tuple

from atlas_core.logging import atlas_context, get_logger
from atlas_core.types import AtlasGraph, AtlasSnapshot, DisplayMode, MapEntity, MapName
from atlas_graph.builder import GraphBuilder, visible_entities
from atlas_graph.matcher import matching_names
from atlas_graph.viewport import compute_fit_target

logger = get_logger("atlas_graph.pipeline")


class AtlasPipeline:
    """
    Orchestrates one recomputation: match -> build -> fit target.

    Stateless between calls; identical inputs give equal snapshots.

    Args:
        builder: Graph construction strategy (default: GraphBuilder from config).
    """

    def __init__(self, builder: Optional[GraphBuilder] = None):
        self.builder = builder or GraphBuilder()

    def match(self, entities: Sequence[MapEntity], query: Optional[str]) -> Tuple[MapName, ...]:
        """Names of visible maps satisfying *query*."""
        return matching_names(visible_entities(entities), query)

    def build(
        self,
        entities: Sequence[MapEntity],
        matched_ids: Sequence[str],
        query: Optional[str],
        mode: DisplayMode,
    ) -> AtlasGraph:
        return self.builder.build(entities, matched_ids, query, mode)

    def run(
        self,
        entities: Sequence[MapEntity],
        query: Optional[str],
        mode: DisplayMode,
    ) -> AtlasSnapshot:
        query = query or ""
        matched = self.match(entities, query)
        graph = self.build(entities, matched, query, mode)
        logger.debug(
            "Query matched",
            extra=atlas_context(query=query, matched=len(matched), nodes=len(graph.nodes)),
        )
        return AtlasSnapshot(
            query=query,
            mode=mode,
            matched_ids=matched,
            graph=graph,
            fit_target=compute_fit_target(matched, graph),
        )
