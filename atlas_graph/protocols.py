"""Abstract base classes for the atlas graph system."""

from abc import ABC, abstractmethod

from atlas_core.types import DisplayMode, MapEntity


class ColorScale(ABC):
    """Protocol for mapping an entity to a color name under a display mode."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique scale name (e.g. 'score')."""
        ...

    @abstractmethod
    def color(self, entity: MapEntity, mode: DisplayMode) -> str:
        """
        Return a color name such as ``'danger'``.

        Must not raise for malformed entities; return a fallback instead.
        """
        ...
