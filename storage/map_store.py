"""
Map entity store for the atlas.

Loads the read-only collection of map records from JSON or Parquet.  The
JSON file may hold a bare list of records or an object with a ``maps`` list.

Usage:
    store = MapStore.load("data/maps.json")
    for entity in store:
        ...
    store.save("data/exports/maps.parquet")
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import pyarrow as pa
import pyarrow.parquet as pq

from atlas_core.config import config
from atlas_core.errors import AtlasEntityError, AtlasStorageError
from atlas_core.logging import get_logger
from atlas_core.types import POSSIBLE_VOIDSTONES, MapEntity

logger = get_logger("map_store")


class MapStore:
    """
    Ordered, name-unique collection of MapEntity records.

    Later records with an already-seen name are dropped with a warning.
    """

    def __init__(self, entities: Iterable[MapEntity] = ()):
        unique: Dict[str, MapEntity] = {}
        for entity in entities:
            if entity.name in unique:
                logger.warning(f"Duplicate map name {entity.name!r}, keeping the first record")
                continue
            unique[entity.name] = entity
        self._entities: Tuple[MapEntity, ...] = tuple(unique.values())
        self._by_name = unique

        short = [e.name for e in self._entities if len(e.tiers) < len(POSSIBLE_VOIDSTONES)]
        if short:
            logger.warning(
                f"{len(short)} maps have tier data for fewer than "
                f"{len(POSSIBLE_VOIDSTONES)} voidstone levels (e.g. {short[0]!r})"
            )

    # ==================== Construction ====================

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "MapStore":
        """Builds a store, skipping records that have no usable name."""
        entities = []
        skipped = 0
        for raw in records:
            try:
                entities.append(MapEntity.from_dict(raw))
            except AtlasEntityError as e:
                skipped += 1
                logger.debug(str(e))
        if skipped:
            logger.warning(f"Skipped {skipped} map records without a name")
        return cls(entities)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "MapStore":
        """
        Loads maps from *path* (default: ``paths.maps_path``).

        Raises:
            AtlasStorageError: If the file is missing or unreadable.
        """
        path = Path(path or config.get("paths.maps_path"))
        if not path.exists():
            raise AtlasStorageError("maps", f"{path} does not exist")

        if path.suffix == ".parquet":
            records = cls._read_parquet(path)
        else:
            records = cls._read_json(path)

        store = cls.from_records(records)
        logger.info(f"Loaded {len(store)} maps from {path}")
        return store

    @staticmethod
    def _read_json(path: Path) -> List[Dict[str, Any]]:
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise AtlasStorageError("json", f"cannot read {path}: {e}") from e
        if isinstance(data, dict):
            data = data.get("maps", [])
        if not isinstance(data, list):
            raise AtlasStorageError("json", f"{path} holds no list of maps")
        return data

    @staticmethod
    def _read_parquet(path: Path) -> List[Dict[str, Any]]:
        try:
            return pq.read_table(path).to_pylist()
        except (OSError, pa.ArrowException) as e:
            raise AtlasStorageError("parquet", f"cannot read {path}: {e}") from e

    def save(self, path: str) -> str:
        """
        Writes all maps to *path* as Parquet (``.parquet``) or JSON.

        Returns:
            Path to saved file

        Raises:
            AtlasStorageError: If the records cannot be encoded or written.
        """
        filepath = Path(path)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        records = [e.to_dict() for e in self._entities]

        if filepath.suffix == ".parquet":
            try:
                pq.write_table(pa.Table.from_pylist(records), filepath)
            except (OSError, pa.ArrowException) as e:
                raise AtlasStorageError("parquet", f"cannot write {filepath}: {e}") from e
        else:
            try:
                with open(filepath, "w") as f:
                    json.dump({"maps": records}, f, indent=2)
            except (OSError, TypeError) as e:
                raise AtlasStorageError("json", f"cannot write {filepath}: {e}") from e

        logger.info(f"Saved {len(records)} maps to {filepath}")
        return str(filepath)

    # ==================== Access ====================

    @property
    def entities(self) -> Tuple[MapEntity, ...]:
        return self._entities

    def get(self, name: str) -> Optional[MapEntity]:
        return self._by_name.get(name)

    def visible(self) -> Tuple[MapEntity, ...]:
        return tuple(e for e in self._entities if e.is_visible)

    def stats(self) -> Dict[str, int]:
        return {
            "maps": len(self._entities),
            "visible": sum(1 for e in self._entities if e.is_visible),
            "unplaced": sum(1 for e in self._entities if not e.is_placed),
            "isolated": sum(1 for e in self._entities if e.is_placed and not e.connected),
        }

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[MapEntity]:
        return iter(self._entities)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name
