"""Tests for atlas_graph/colors.py and registry.py — color scales."""

import pytest

from atlas_core.errors import AtlasConfigError
from atlas_core.types import DisplayMode
from atlas_graph.colors import (
    FALLBACK_COLOR,
    RatingColorScale,
    TierColorScale,
    as_number,
    rating_color,
    resolve_tier,
    tier_color,
)
from atlas_graph.protocols import ColorScale
from atlas_graph.registry import ColorScaleRegistry, default_registry


# ── rating_color ──────────────────────────────────────────────

class TestRatingColor:
    @pytest.mark.parametrize("score, color", [
        (10, "success"),
        (8, "success"),
        (7.9, "info"),
        (5, "light"),
        (3, "warning"),
        (1, "danger"),
        (0, "danger"),
    ])
    def test_graduated(self, score, color):
        assert rating_color(score, 10) == color

    def test_out_of_range_is_clipped(self):
        assert rating_color(42, 10) == "success"
        assert rating_color(-5, 10) == "danger"

    @pytest.mark.parametrize("score", [None, "cheap", float("nan"), True])
    def test_non_numeric_falls_back(self, score):
        assert rating_color(score, 10) == FALLBACK_COLOR

    def test_numeric_string(self):
        assert as_number("7.5") == 7.5
        assert rating_color("9", 10) == "success"


# ── tiers ─────────────────────────────────────────────────────

class TestTiers:
    def test_exact_tier(self, make_map):
        entity = make_map("A", tiers=(1, 6, 11))
        assert resolve_tier(entity, 0) == 1
        assert resolve_tier(entity, 2) == 11

    def test_short_tiers_use_last_known(self, make_map):
        entity = make_map("A", tiers=(3, 8))
        assert resolve_tier(entity, 4) == 8

    def test_bad_entry_uses_lower_level(self, make_map):
        entity = make_map("A", tiers=(3, None, "x"))
        assert resolve_tier(entity, 2) == 3

    def test_no_tiers(self, make_map):
        assert resolve_tier(make_map("A", tiers=()), 0) is None
        assert tier_color(make_map("A", tiers=()), 0) == FALLBACK_COLOR

    @pytest.mark.parametrize("tier, color", [(1, "light"), (5, "light"), (6, "warning"),
                                             (10, "warning"), (11, "danger"), (16, "danger"),
                                             (0, FALLBACK_COLOR)])
    def test_tier_bands(self, make_map, tier, color):
        assert tier_color(make_map("A", tiers=(tier,)), 0) == color


# ── Scales & registry ─────────────────────────────────────────

class TestScales:
    def test_rating_scale_uses_score(self, make_map):
        scale = RatingColorScale(max_rating=10)
        assert scale.name == "score"
        assert scale.color(make_map("A", score=9), DisplayMode(score_heatmap=True)) == "success"

    def test_rating_scale_default_max_from_config(self, make_map):
        assert RatingColorScale().color(make_map("A", score=10), DisplayMode()) == "success"

    def test_tier_scale_uses_voidstones(self, make_map):
        scale = TierColorScale()
        entity = make_map("A", tiers=(1, 6, 11))
        assert scale.color(entity, DisplayMode(voidstones=0)) == "light"
        assert scale.color(entity, DisplayMode(voidstones=2)) == "danger"


class FakeScale(ColorScale):
    @property
    def name(self):
        return "fake"

    def color(self, entity, mode):
        return "primary"


class TestColorScaleRegistry:
    def test_default_registry(self):
        reg = default_registry()
        assert set(reg.names) == {"score", "tier"}

    def test_register_and_replace(self):
        reg = ColorScaleRegistry()
        reg.register(FakeScale())
        assert reg.get("fake") is not None
        assert reg.names == ["fake"]

    def test_lookup_missing(self):
        assert ColorScaleRegistry().get("score") is None

    def test_require_missing(self):
        with pytest.raises(AtlasConfigError):
            ColorScaleRegistry().require("score")

    def test_register_unknown_type(self):
        with pytest.raises(TypeError):
            ColorScaleRegistry().register("not_a_scale")
