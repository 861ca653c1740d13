"""
Color scales shared by the atlas and the map cards.

Color names are Bootstrap contextual names; the renderer turns them into
``text-<name>`` classes.  Both scales fall back to FALLBACK_COLOR instead of
raising when an entity's data is unusable.
"""

import math
from typing import Any, Optional

import numpy as np

from atlas_core.config import config
from atlas_core.types import DisplayMode, MapEntity
from atlas_graph.protocols import ColorScale

FALLBACK_COLOR = "secondary"

# (lower bound as a fraction of the maximum rating, color), best first
RATING_SCALE = (
    (0.8, "success"),
    (0.6, "info"),
    (0.4, "light"),
    (0.2, "warning"),
    (0.0, "danger"),
)

# (lowest tier, color): white, yellow and red maps
TIER_SCALE = (
    (11, "danger"),
    (6, "warning"),
    (1, "light"),
)


def as_number(value: Any) -> Optional[float]:
    """Finite float for numbers and numeric strings, None otherwise."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def as_tier(value: Any) -> Optional[int]:
    number = as_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def resolve_tier(entity: MapEntity, voidstones: int) -> Optional[int]:
    """
    Tier shown for *entity* at voidstone level *voidstones*.

    When the level has no usable entry, the closest lower level that does is
    used (the last known tier).  Returns None when the entity has no usable
    tier at all.
    """
    tiers = entity.tiers
    for level in range(min(voidstones, len(tiers) - 1), -1, -1):
        tier = as_tier(tiers[level])
        if tier is not None:
            return tier
    return None


def has_exact_tier(entity: MapEntity, voidstones: int) -> bool:
    return 0 <= voidstones < len(entity.tiers) and as_tier(entity.tiers[voidstones]) is not None


def rating_color(score: Any, max_rating: float = 10.0) -> str:
    """Graduated color for a rating in [0, max_rating]; out-of-range values are clipped."""
    number = as_number(score)
    if number is None or max_rating <= 0:
        return FALLBACK_COLOR
    ratio = float(np.clip(number / max_rating, 0.0, 1.0))
    for lower, color in RATING_SCALE:
        if ratio >= lower:
            return color
    return FALLBACK_COLOR


def tier_color(entity: MapEntity, voidstones: int) -> str:
    tier = resolve_tier(entity, voidstones)
    if tier is None:
        return FALLBACK_COLOR
    for lowest, color in TIER_SCALE:
        if tier >= lowest:
            return color
    return FALLBACK_COLOR


class RatingColorScale(ColorScale):
    """Heatmap coloring by market score."""

    def __init__(self, max_rating: Optional[float] = None):
        self._max_rating = float(
            max_rating if max_rating is not None else config.get("atlas.rating_max")
        )

    @property
    def name(self) -> str:
        return "score"

    def color(self, entity: MapEntity, mode: DisplayMode) -> str:
        return rating_color(entity.score, self._max_rating)


class TierColorScale(ColorScale):
    """Coloring by map tier at the selected voidstone level."""

    @property
    def name(self) -> str:
        return "tier"

    def color(self, entity: MapEntity, mode: DisplayMode) -> str:
        return tier_color(entity, mode.voidstones)
