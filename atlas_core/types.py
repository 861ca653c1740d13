"""
Domain types for atlas_core.

Frozen dataclasses that define the vocabulary of the atlas: the read-only
map records that come in, the display settings that steer encoding, and the
node/edge/fit snapshots that go out to a rendering surface.  Derived values
are never mutated; every recomputation produces new instances.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, NewType, Optional, Tuple

from atlas_core.errors import AtlasConfigError, AtlasEntityError

# ---------------------------------------------------------------------------
# Scalar type aliases
# ---------------------------------------------------------------------------

MapName = NewType("MapName", str)
"""Unique map name: primary key, node id and adjacency reference."""

Bounds = Tuple[float, float, float, float]
"""(min_x, min_y, max_x, max_y) in screen units."""

POSSIBLE_VOIDSTONES: Tuple[int, ...] = (0, 1, 2, 3, 4)
"""Voidstone levels the atlas can display tiers for."""


def _coordinate(value: Any) -> float:
    # Unusable coordinates count as unplaced (<= 0).
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------

_ENTITY_KEYS = frozenset(
    {"name", "x", "y", "connected", "tiers", "score", "boss", "search", "searchText"}
)


@dataclass(frozen=True)
class MapEntity:
    """
    One map location on the atlas.

    ``tiers`` is indexed by voidstone level.  ``score`` is kept exactly as
    supplied; the graph builder decides what to do with non-numeric values.
    ``search_text`` is opaque to the engine and only handed to the matcher.
    """
    name: MapName
    x: float
    y: float
    connected: Tuple[MapName, ...] = ()
    tiers: Tuple[Any, ...] = ()
    score: Any = None
    search_text: Optional[str] = None
    boss: bool = False
    extra: Dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def is_placed(self) -> bool:
        """Maps at x <= 0 or y <= 0 have no position on the background."""
        return self.x > 0 and self.y > 0

    @property
    def is_visible(self) -> bool:
        return self.is_placed and len(self.connected) > 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "MapEntity":
        """
        Build an entity from a loosely-typed record (JSON object or Parquet row).

        Raises:
            AtlasEntityError: If the record is not a mapping or has no name.
        """
        if not isinstance(raw, dict):
            raise AtlasEntityError(f"expected a mapping, got {type(raw).__name__}", raw)
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise AtlasEntityError("record has no 'name'", raw)

        search = raw.get("search")
        if search is None:
            search = raw.get("searchText")
        if isinstance(search, (list, tuple)):
            search = " ".join(str(s) for s in search)
        elif search is not None:
            search = str(search)

        return cls(
            name=MapName(name),
            x=_coordinate(raw.get("x")),
            y=_coordinate(raw.get("y")),
            connected=tuple(MapName(str(c)) for c in (raw.get("connected") or ())),
            tiers=tuple(raw.get("tiers") or ()),
            score=raw.get("score"),
            search_text=search,
            boss=bool(raw.get("boss", False)),
            extra={k: v for k, v in raw.items() if k not in _ENTITY_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.extra,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "connected": list(self.connected),
            "tiers": list(self.tiers),
            "score": self.score,
            "boss": self.boss,
            "search": self.search_text,
        }


@dataclass(frozen=True)
class DisplayMode:
    """
    Current display settings: score heatmap vs tier colouring, and the
    voidstone level whose tiers are shown.

    Raises:
        AtlasConfigError: If *voidstones* is not one of POSSIBLE_VOIDSTONES.
    """
    score_heatmap: bool = False
    voidstones: int = 0

    def __post_init__(self) -> None:
        level = self.voidstones
        if not isinstance(level, int) or isinstance(level, bool) or level not in POSSIBLE_VOIDSTONES:
            raise AtlasConfigError(
                "voidstones",
                reason=f"expected one of {POSSIBLE_VOIDSTONES}, got {level!r}",
            )

    @property
    def color_scale(self) -> str:
        """Name of the color scale this mode encodes nodes with."""
        return "score" if self.score_heatmap else "tier"

    def with_score_heatmap(self, enabled: bool) -> "DisplayMode":
        return replace(self, score_heatmap=bool(enabled))

    def with_voidstones(self, level: int) -> "DisplayMode":
        return replace(self, voidstones=level)


# ---------------------------------------------------------------------------
# Derived graph snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Node:
    """A visible map as handed to the rendering surface."""
    id: MapName
    position: Tuple[float, float]
    label: str
    color: str
    opacity: float
    parent: str

    @property
    def class_name(self) -> str:
        return f"btn btn-dark border-1 text-{self.color}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "parentNode": self.parent,
            "position": {"x": self.position[0], "y": self.position[1]},
            "data": {"label": self.label},
            "className": self.class_name,
            "style": {"opacity": self.opacity},
        }


@dataclass(frozen=True)
class BackgroundNode:
    """
    The anchor every map node is positioned relative to: the atlas image,
    pinned at the origin below everything else.  Never matched or clicked.
    """
    id: str
    image: str
    width: float
    height: float
    position: Tuple[float, float] = (0.0, 0.0)
    z_index: int = -1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "background",
            "position": {"x": self.position[0], "y": self.position[1]},
            "data": {"image": self.image, "width": self.width, "height": self.height},
            "zIndex": self.z_index,
            "className": "nodrag",
            "selectable": False,
        }


@dataclass(frozen=True)
class Edge:
    """Undirected link; ``source`` <= ``target`` always."""
    id: str
    source: MapName
    target: MapName

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "source": self.source, "target": self.target}


@dataclass(frozen=True)
class AtlasGraph:
    background: BackgroundNode
    nodes: Tuple[Node, ...]
    edges: Tuple[Edge, ...]

    @property
    def node_count(self) -> int:
        """Map nodes plus the anchor."""
        return 1 + len(self.nodes)

    @property
    def node_ids(self) -> Tuple[MapName, ...]:
        return tuple(n.id for n in self.nodes)

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [self.background.to_dict()] + [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass(frozen=True)
class FitTarget:
    """
    Region a rendering surface should fit its viewport to.

    An empty ``node_ids`` means "fit everything", the surface's own default.
    ``bounds`` is only known when the target was computed against a graph.
    """
    node_ids: Tuple[MapName, ...]
    bounds: Optional[Bounds] = None

    @property
    def fit_all(self) -> bool:
        return not self.node_ids

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [{"id": n} for n in self.node_ids],
            "fitAll": self.fit_all,
            "bounds": list(self.bounds) if self.bounds is not None else None,
        }


@dataclass(frozen=True)
class AtlasSnapshot:
    """Everything derived from one combination of inputs."""
    query: str
    mode: DisplayMode
    matched_ids: Tuple[MapName, ...]
    graph: AtlasGraph
    fit_target: FitTarget

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "scoreHeatmap": self.mode.score_heatmap,
            "voidstones": self.mode.voidstones,
            "matched": list(self.matched_ids),
            "fit": self.fit_target.to_dict(),
            **self.graph.to_dict(),
        }
