"""Registry of color scales, looked up by the display mode's scale name."""

from typing import Dict, List, Optional

from atlas_core.errors import AtlasConfigError
from atlas_graph.colors import RatingColorScale, TierColorScale
from atlas_graph.protocols import ColorScale


class ColorScaleRegistry:
    """Register and look up color scales by name."""

    def __init__(self):
        self._scales: Dict[str, ColorScale] = {}

    def register(self, scale: ColorScale) -> None:
        """Register a scale (replaces existing with same name)."""
        if not isinstance(scale, ColorScale):
            raise TypeError(f"Unknown color scale type: {type(scale)}")
        self._scales[scale.name] = scale

    def get(self, name: str) -> Optional[ColorScale]:
        return self._scales.get(name)

    def require(self, name: str) -> ColorScale:
        scale = self._scales.get(name)
        if scale is None:
            raise AtlasConfigError(f"color_scale.{name}", reason="no such color scale registered")
        return scale

    @property
    def names(self) -> List[str]:
        return list(self._scales.keys())


def default_registry() -> ColorScaleRegistry:
    """Registry holding the built-in score and tier scales."""
    registry = ColorScaleRegistry()
    registry.register(RatingColorScale())
    registry.register(TierColorScale())
    return registry
