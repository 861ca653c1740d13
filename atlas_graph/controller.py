"""
Interactive atlas controller.

Owns the current inputs (maps, search query, display mode, fullscreen flag),
recomputes a fresh snapshot whenever one of them changes and drives the
viewport fitter.  Display-mode changes are written to the preference store;
node clicks are forwarded to the host's scroll-to-element callback.
"""

from typing import Iterable, Optional

from atlas_core.logging import atlas_context, get_logger
from atlas_core.protocols import FitSurface, KeyValueStore, ScrollToElement
from atlas_core.types import AtlasSnapshot, DisplayMode, MapEntity
from atlas_graph.pipeline import AtlasPipeline
from atlas_graph.viewport import ViewportFitter
from storage.preferences import load_display_mode, save_display_mode

logger = get_logger("atlas_graph.controller")

ESCAPE_KEY = "Escape"


class AtlasController:
    """
    Event-driven glue between the atlas inputs and a rendering surface.

    A viewport fit is requested whenever the matched set changes and on
    every fullscreen toggle.  Display-mode changes relabel and recolor
    nodes without moving the viewport.

    Args:
        entities: Map collection to show.
        pipeline: Recomputation strategy (default: AtlasPipeline()).
        fitter: Viewport fitter (default: ViewportFitter()).
        preferences: Persisted display mode; read on start, written on change.
        scroll_to: Called with the id of a clicked map node.
        mode: Initial display mode; overrides *preferences* when given.
    """

    def __init__(
        self,
        entities: Iterable[MapEntity] = (),
        *,
        pipeline: Optional[AtlasPipeline] = None,
        fitter: Optional[ViewportFitter] = None,
        preferences: Optional[KeyValueStore] = None,
        scroll_to: Optional[ScrollToElement] = None,
        mode: Optional[DisplayMode] = None,
    ):
        self.pipeline = pipeline or AtlasPipeline()
        self.fitter = fitter or ViewportFitter()
        self._preferences = preferences
        self._scroll_to = scroll_to

        if mode is None:
            mode = load_display_mode(preferences) if preferences is not None else DisplayMode()
        self._entities = tuple(entities)
        self._query = ""
        self._mode = mode
        self._full = False
        self._snapshot: Optional[AtlasSnapshot] = None
        self._recompute()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> AtlasSnapshot:
        return self._snapshot

    @property
    def query(self) -> str:
        return self._query

    @property
    def mode(self) -> DisplayMode:
        return self._mode

    @property
    def is_fullscreen(self) -> bool:
        return self._full

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def set_entities(self, entities: Iterable[MapEntity]) -> AtlasSnapshot:
        self._entities = tuple(entities)
        return self._recompute()

    def set_query(self, query: Optional[str]) -> AtlasSnapshot:
        query = query or ""
        if query == self._query:
            return self._snapshot
        self._query = query
        return self._recompute()

    def set_mode(self, mode: DisplayMode) -> AtlasSnapshot:
        if mode == self._mode:
            return self._snapshot
        self._mode = mode
        if self._preferences is not None:
            save_display_mode(self._preferences, mode)
        return self._recompute()

    def set_score_heatmap(self, enabled: bool) -> AtlasSnapshot:
        return self.set_mode(self._mode.with_score_heatmap(enabled))

    def toggle_score_heatmap(self) -> AtlasSnapshot:
        return self.set_score_heatmap(not self._mode.score_heatmap)

    def set_voidstones(self, level: int) -> AtlasSnapshot:
        return self.set_mode(self._mode.with_voidstones(level))

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    def toggle_fullscreen(self) -> bool:
        """Switch fullscreen/windowed; the viewport size changes, so refit."""
        self._full = not self._full
        self._request_fit()
        return self._full

    def handle_key(self, key: str) -> bool:
        """Escape leaves fullscreen.  Returns True if the key was handled."""
        if key == ESCAPE_KEY and self._full:
            self.toggle_fullscreen()
            return True
        return False

    def reset_view(self) -> bool:
        """Fit to the current matches right away."""
        return self.fitter.fit_now(self._snapshot.matched_ids, self._snapshot.graph)

    def attach_surface(self, surface: FitSurface) -> bool:
        return self.fitter.attach(surface)

    def click_node(self, node_id: str) -> bool:
        """Forward a click on a map node.  The background anchor ignores clicks."""
        if node_id == self._snapshot.graph.background.id:
            return False
        if self._scroll_to is None:
            return False
        self._scroll_to(node_id)
        return True

    def close(self) -> None:
        self.fitter.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _recompute(self) -> AtlasSnapshot:
        previous = self._snapshot
        self._snapshot = self.pipeline.run(self._entities, self._query, self._mode)
        if previous is None or previous.matched_ids != self._snapshot.matched_ids:
            self._request_fit()
        return self._snapshot

    def _request_fit(self) -> None:
        generation = self.fitter.request_fit(self._snapshot.matched_ids, self._snapshot.graph)
        logger.debug(
            "Requested fit",
            extra=atlas_context(
                generation=generation,
                matched=len(self._snapshot.matched_ids),
                fullscreen=self._full,
            ),
        )
