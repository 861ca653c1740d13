"""
Viewport fitting for the atlas.

After the matched set changes (or the surface is resized) the rendering
surface should zoom to the matched maps.  Fits are deferred by a short
settle delay so the surface can finish its own layout pass first.  Every
request bumps a generation counter and cancels the pending callback, so only
the most recent request is ever issued.
"""

import threading
from typing import Callable, Iterable, Optional

import numpy as np

from atlas_core.config import config
from atlas_core.logging import atlas_context, get_logger
from atlas_core.protocols import Cancellable, FitSurface, Scheduler
from atlas_core.types import AtlasGraph, Bounds, FitTarget, MapName

logger = get_logger("atlas_graph.viewport")


def _bounds(positions) -> Optional[Bounds]:
    if not positions:
        return None
    points = np.asarray(positions, dtype=np.float64)
    (min_x, min_y), (max_x, max_y) = points.min(axis=0), points.max(axis=0)
    return (float(min_x), float(min_y), float(max_x), float(max_y))


def compute_fit_target(
    matched_ids: Iterable[str],
    graph: Optional[AtlasGraph] = None,
) -> FitTarget:
    """
    Region to fit for *matched_ids*.

    An empty id set means fit everything.  With a *graph*, ``bounds`` covers
    the targeted nodes (all map nodes when fitting everything).
    """
    node_ids = tuple(MapName(n) for n in dict.fromkeys(matched_ids))
    if graph is None:
        return FitTarget(node_ids=node_ids)

    wanted = set(node_ids)
    positions = [n.position for n in graph.nodes if not wanted or n.id in wanted]
    return FitTarget(node_ids=node_ids, bounds=_bounds(positions))


class TimerScheduler:
    """Scheduler backed by daemon threading.Timer instances."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class ViewportFitter:
    """
    Issues fit commands to a rendering surface.

    Args:
        surface: Initialised surface, or None until :meth:`attach` is called.
        scheduler: Runs deferred fits (default: TimerScheduler).
        settle_delay: Seconds between a request and the fit.
    """

    def __init__(
        self,
        surface: Optional[FitSurface] = None,
        scheduler: Optional[Scheduler] = None,
        settle_delay: Optional[float] = None,
    ):
        self._surface = surface
        self._scheduler = scheduler or TimerScheduler()
        self.settle_delay = float(
            settle_delay if settle_delay is not None else config.get("atlas.fit_delay_seconds")
        )

        # Reentrant: a surface may request the next fit from inside fit_view.
        self._lock = threading.RLock()
        self._generation = 0
        self._pending: Optional[Cancellable] = None
        self._parked: Optional[FitTarget] = None
        self._last_issued: Optional[FitTarget] = None
        self._closed = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @property
    def parked(self) -> Optional[FitTarget]:
        """Fit waiting for a surface to be attached."""
        return self._parked

    @property
    def last_issued(self) -> Optional[FitTarget]:
        return self._last_issued

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def compute_fit_target(
        self, matched_ids: Iterable[str], graph: Optional[AtlasGraph] = None
    ) -> FitTarget:
        return compute_fit_target(matched_ids, graph)

    def request_fit(
        self, matched_ids: Iterable[str], graph: Optional[AtlasGraph] = None
    ) -> int:
        """
        Schedule a fit after the settle delay, superseding any pending one.

        Returns:
            The generation of the scheduled fit.
        """
        target = compute_fit_target(matched_ids, graph)
        with self._lock:
            if self._closed:
                logger.debug("Fit requested after close; ignored")
                return self._generation
            self._generation += 1
            generation = self._generation
            if self._pending is not None:
                self._pending.cancel()
            self._pending = self._scheduler.schedule(
                self.settle_delay, lambda: self._fire(generation, target)
            )
        return generation

    def fit_now(
        self, matched_ids: Iterable[str], graph: Optional[AtlasGraph] = None
    ) -> bool:
        """Fit immediately, cancelling any pending fit.  True if a surface received it."""
        target = compute_fit_target(matched_ids, graph)
        with self._lock:
            if self._closed:
                return False
            self._invalidate()
            return self._issue(target)

    def attach(self, surface: FitSurface) -> bool:
        """
        Surface finished initialising.  Issues a fit that was requested
        while no surface was available.
        """
        with self._lock:
            if self._closed:
                return False
            self._surface = surface
            if self._parked is None:
                return False
            return self._issue(self._parked)

    def cancel(self) -> None:
        """Drop any pending fit."""
        with self._lock:
            self._invalidate()

    def close(self) -> None:
        """Cancel pending work and refuse further fits."""
        with self._lock:
            self._invalidate()
            self._closed = True
            self._surface = None
            self._parked = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _invalidate(self) -> None:
        # Caller holds the lock.
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self, generation: int, target: FitTarget) -> None:
        # The generation check and the delivery happen under one lock hold,
        # so a newer request cannot be overtaken by this one.
        with self._lock:
            if self._closed or generation != self._generation:
                logger.debug(
                    "Dropping stale fit",
                    extra=atlas_context(generation=generation),
                )
                return
            self._pending = None
            self._issue(target)

    def _issue(self, target: FitTarget) -> bool:
        # Caller holds the lock.
        surface = self._surface
        if surface is None:
            self._parked = target
            logger.debug(
                "Surface not ready, parked fit",
                extra=atlas_context(matched=len(target.node_ids), fit_all=target.fit_all),
            )
            return False
        self._parked = None
        self._last_issued = target
        surface.fit_view(target)
        logger.debug(
            "Fit issued",
            extra=atlas_context(
                generation=self._generation,
                matched=len(target.node_ids),
                fit_all=target.fit_all,
            ),
        )
        return True
