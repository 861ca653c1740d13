"""Tests for storage/ — map store and persisted preferences."""

import json

import pytest

from atlas_core.errors import AtlasStorageError
from atlas_core.types import DisplayMode
from storage.map_store import MapStore
from storage.preferences import PreferenceStore, load_display_mode, save_display_mode

RECORDS = [
    {"name": "Arcade", "x": 10, "y": 20, "connected": ["Beach"], "tiers": [1, 2, 3, 4, 5],
     "score": 8.5, "search": "arcade"},
    {"name": "Beach", "x": 30, "y": 40, "connected": ["Arcade"], "tiers": [2, 3, 4, 5, 6],
     "score": 3.0, "search": "beach"},
    {"name": "Dunes", "x": 0, "y": 0, "connected": [], "tiers": [1, 1, 1, 1, 1],
     "score": 1.0, "search": "dunes"},
]


@pytest.fixture
def maps_json(tmp_path):
    path = tmp_path / "maps.json"
    path.write_text(json.dumps(RECORDS))
    return path


# ── MapStore ──────────────────────────────────────────────────

class TestMapStore:
    def test_load_json_list(self, maps_json):
        store = MapStore.load(str(maps_json))
        assert len(store) == 3
        assert [e.name for e in store] == ["Arcade", "Beach", "Dunes"]
        assert "Beach" in store

    def test_load_json_object(self, tmp_path):
        path = tmp_path / "maps.json"
        path.write_text(json.dumps({"maps": RECORDS[:1]}))
        assert MapStore.load(str(path)).get("Arcade").score == 8.5

    def test_missing_file(self, tmp_path):
        with pytest.raises(AtlasStorageError):
            MapStore.load(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "maps.json"
        path.write_text("{not json")
        with pytest.raises(AtlasStorageError):
            MapStore.load(str(path))

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "maps.json"
        path.write_text(json.dumps({"maps": "Arcade"}))
        with pytest.raises(AtlasStorageError):
            MapStore.load(str(path))

    def test_nameless_records_skipped(self):
        store = MapStore.from_records(RECORDS + [{"x": 1, "y": 1}])
        assert len(store) == 3

    def test_duplicate_names_keep_first(self):
        store = MapStore.from_records(RECORDS + [dict(RECORDS[0], score=1.0)])
        assert len(store) == 3
        assert store.get("Arcade").score == 8.5

    def test_stats(self, maps_json):
        store = MapStore.load(str(maps_json))
        assert store.stats() == {"maps": 3, "visible": 2, "unplaced": 1, "isolated": 0}
        assert [e.name for e in store.visible()] == ["Arcade", "Beach"]

    def test_parquet_save_and_load(self, maps_json, tmp_path):
        store = MapStore.load(str(maps_json))
        path = store.save(str(tmp_path / "exports" / "maps.parquet"))
        loaded = MapStore.load(path)
        assert [e.name for e in loaded] == ["Arcade", "Beach", "Dunes"]
        assert loaded.get("Beach").connected == ("Arcade",)
        assert loaded.get("Beach").tiers == (2, 3, 4, 5, 6)

    def test_parquet_save_mixed_types(self, tmp_path):
        store = MapStore.from_records([RECORDS[0], dict(RECORDS[1], score="n/a")])
        with pytest.raises(AtlasStorageError) as exc_info:
            store.save(str(tmp_path / "maps.parquet"))
        assert exc_info.value.backend == "parquet"

    def test_json_save_keeps_mixed_types(self, tmp_path):
        store = MapStore.from_records([RECORDS[0], dict(RECORDS[1], score="n/a")])
        loaded = MapStore.load(store.save(str(tmp_path / "maps.json")))
        assert loaded.get("Beach").score == "n/a"

    def test_invalid_parquet(self, tmp_path):
        path = tmp_path / "maps.parquet"
        path.write_bytes(b"not parquet")
        with pytest.raises(AtlasStorageError):
            MapStore.load(str(path))


# ── PreferenceStore ───────────────────────────────────────────

class TestPreferenceStore:
    def test_defaults_without_file(self, tmp_path):
        prefs = PreferenceStore(str(tmp_path / "prefs.json"))
        assert load_display_mode(prefs) == DisplayMode()

    def test_round_trip(self, tmp_path):
        path = str(tmp_path / "nested" / "prefs.json")
        save_display_mode(PreferenceStore(path), DisplayMode(score_heatmap=True, voidstones=2))
        assert load_display_mode(PreferenceStore(path)) == DisplayMode(score_heatmap=True, voidstones=2)

    def test_written_keys(self, tmp_path):
        path = tmp_path / "prefs.json"
        save_display_mode(PreferenceStore(str(path)), DisplayMode(voidstones=1))
        assert json.loads(path.read_text()) == {"scoreHeatmap": False, "voidstones": 1}

    def test_string_level_accepted(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text(json.dumps({"voidstones": "3"}))
        assert load_display_mode(PreferenceStore(str(path))).voidstones == 3

    def test_invalid_values_fall_back(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text(json.dumps({"scoreHeatmap": "yes", "voidstones": 9}))
        assert load_display_mode(PreferenceStore(str(path))) == DisplayMode()

    def test_corrupt_file_ignored(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text("[1, 2")
        prefs = PreferenceStore(str(path))
        assert prefs.to_dict() == {}

    def test_unwritable_path(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        prefs = PreferenceStore(str(blocker / "prefs.json"))
        with pytest.raises(AtlasStorageError):
            prefs.set("voidstones", 1)
