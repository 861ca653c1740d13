"""Source-unit to screen-position transform for the atlas background."""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from atlas_core.config import Config, config
from atlas_core.errors import AtlasConfigError
from atlas_core.types import BackgroundNode, MapEntity


@dataclass(frozen=True)
class AtlasGeometry:
    """
    How map coordinates land on the background image.

    ``width`` and ``height`` are the image dimensions in source units; the
    rendered background is ``scale`` times larger, which keeps every map at
    ``coordinate * scale + offset`` on the same picture.
    """
    scale: float = 2.5
    offset: float = 6.0
    width: float = 1003.52
    height: float = 564.48
    image: str = "/atlas.webp"
    background_id: str = "bg"

    def __post_init__(self) -> None:
        if not self.scale > 0:
            raise AtlasConfigError("atlas.scale", reason=f"must be > 0, got {self.scale!r}")
        if not (self.width > 0 and self.height > 0):
            raise AtlasConfigError(
                "atlas.background",
                reason=f"dimensions must be > 0, got {self.width!r}x{self.height!r}",
            )

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None) -> "AtlasGeometry":
        cfg = cfg or config
        return cls(
            scale=float(cfg.get("atlas.scale")),
            offset=float(cfg.get("atlas.offset")),
            width=float(cfg.get("atlas.background.width")),
            height=float(cfg.get("atlas.background.height")),
            image=cfg.get("atlas.background.image"),
            background_id=cfg.get("atlas.background_id"),
        )

    @property
    def pixel_width(self) -> float:
        return self.width * self.scale

    @property
    def pixel_height(self) -> float:
        return self.height * self.scale

    def background_node(self) -> BackgroundNode:
        return BackgroundNode(
            id=self.background_id,
            image=self.image,
            width=self.pixel_width,
            height=self.pixel_height,
        )


def project_positions(entities: Sequence[MapEntity], geometry: AtlasGeometry) -> np.ndarray:
    """
    Screen positions for *entities*.

    Returns:
        (N, 2) float64 array of ``(x * scale + offset, y * scale + offset)``.
    """
    if not entities:
        return np.empty((0, 2), dtype=np.float64)
    coords = np.array([(e.x, e.y) for e in entities], dtype=np.float64)
    return coords * geometry.scale + geometry.offset
