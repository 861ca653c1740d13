"""
Protocol definitions for the atlas's external collaborators.

The engine never renders, schedules timers or scrolls pages itself; it
talks to whatever the host provides through these protocols.

Uses typing.Protocol (PEP 544) for structural subtyping: classes do NOT
need to inherit from these protocols, they just need matching signatures.
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from atlas_core.types import FitTarget


# ---------------------------------------------------------------------------
# Rendering surface
# ---------------------------------------------------------------------------

@runtime_checkable
class FitSurface(Protocol):
    """Imperative control handle of an initialised rendering surface."""

    def fit_view(self, target: FitTarget) -> None:
        """
        Fit the viewport to *target*.

        An empty ``target.node_ids`` means fit every node.
        """
        ...


ScrollToElement = Callable[[str], None]
"""Receives the id of a clicked map node; owns any page navigation."""


# ---------------------------------------------------------------------------
# Deferred execution
# ---------------------------------------------------------------------------

@runtime_checkable
class Cancellable(Protocol):
    """Handle to a scheduled callback."""

    def cancel(self) -> None:
        """Prevent the callback from running if it has not run yet."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Runs a callback once after a delay."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        """
        Args:
            delay:    Seconds to wait.
            callback: Zero-argument callable.

        Returns:
            Handle that can cancel the pending callback.
        """
        ...


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

@runtime_checkable
class KeyValueStore(Protocol):
    """Persisted key/value pairs surviving between sessions."""

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...
