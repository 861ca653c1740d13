"""Tests for atlas_graph/pipeline.py and controller.py — recomputation and refits."""

import pytest

from atlas_core.types import DisplayMode
from atlas_graph.controller import AtlasController
from atlas_graph.pipeline import AtlasPipeline
from atlas_graph.viewport import ViewportFitter


class DictStore:
    def __init__(self, values=None):
        self.values = dict(values or {})

    def get(self, key, default=None):
        return self.values.get(key, default)

    def set(self, key, value):
        self.values[key] = value


@pytest.fixture
def fitter(scheduler, surface):
    return ViewportFitter(surface=surface, scheduler=scheduler)


@pytest.fixture
def controller(sample_maps, fitter):
    ctrl = AtlasController(sample_maps, fitter=fitter)
    yield ctrl
    ctrl.close()


# ── AtlasPipeline ─────────────────────────────────────────────

class TestAtlasPipeline:
    def test_run(self, sample_maps):
        snapshot = AtlasPipeline().run(sample_maps, "coastal", DisplayMode())
        # Estuary matches but is isolated, so it is not part of the matched set.
        assert snapshot.matched_ids == ("Beach",)
        assert snapshot.fit_target.node_ids == ("Beach",)
        assert snapshot.graph.node_count == 4

    def test_no_match_fits_all(self, sample_maps):
        snapshot = AtlasPipeline().run(sample_maps, "foo", DisplayMode())
        assert snapshot.matched_ids == ()
        assert snapshot.fit_target.fit_all
        assert all(n.opacity == 0.4 for n in snapshot.graph.nodes)

    def test_idempotent(self, sample_maps):
        pipe = AtlasPipeline()
        assert pipe.run(sample_maps, "a", DisplayMode()) == pipe.run(sample_maps, "a", DisplayMode())

    def test_to_dict(self, sample_maps):
        payload = AtlasPipeline().run(sample_maps, None, DisplayMode(voidstones=2)).to_dict()
        assert payload["query"] == ""
        assert payload["voidstones"] == 2
        assert payload["nodes"][0]["id"] == "bg"
        assert len(payload["nodes"]) == 4
        assert payload["fit"]["fitAll"] is False


# ── AtlasController ───────────────────────────────────────────

class TestAtlasController:
    def test_initial_fit_requested(self, controller, scheduler, surface):
        assert len(scheduler.live) == 1
        scheduler.run_live()
        assert surface.fits[0].node_ids == ("Arcade", "Beach", "Cells")

    def test_query_change_refits(self, controller, scheduler, surface):
        controller.set_query("cells")
        assert scheduler.handles[0].cancelled
        scheduler.run_all()
        assert [t.node_ids for t in surface.fits] == [("Cells",)]

    def test_same_matches_do_not_refit(self, controller, scheduler):
        controller.set_query("cells")
        count = len(scheduler.handles)
        controller.set_query("prison")
        assert controller.snapshot.query == "prison"
        assert len(scheduler.handles) == count

    def test_unchanged_query_is_noop(self, controller):
        before = controller.snapshot
        assert controller.set_query("") is before

    def test_mode_change_does_not_refit(self, controller, scheduler):
        count = len(scheduler.handles)
        controller.set_voidstones(2)
        controller.toggle_score_heatmap()
        assert len(scheduler.handles) == count
        assert controller.mode == DisplayMode(score_heatmap=True, voidstones=2)
        assert controller.snapshot.graph.get_node("Cells").label == "10 Cells"

    def test_fullscreen_toggle_refits(self, controller, scheduler):
        count = len(scheduler.handles)
        assert controller.toggle_fullscreen() is True
        assert len(scheduler.handles) == count + 1

    def test_escape_leaves_fullscreen(self, controller):
        assert controller.handle_key("Escape") is False
        controller.toggle_fullscreen()
        assert controller.handle_key("Enter") is False
        assert controller.handle_key("Escape") is True
        assert controller.is_fullscreen is False

    def test_reset_view_fits_immediately(self, controller, scheduler, surface):
        controller.set_query("beach")
        assert controller.reset_view() is True
        assert surface.fits[-1].node_ids == ("Beach",)
        scheduler.run_all()
        assert len(surface.fits) == 1

    def test_set_entities_recomputes(self, controller, make_map):
        controller.set_entities([make_map("X", connected=["Y"]), make_map("Y", connected=["X"])])
        assert controller.snapshot.graph.node_ids == ("X", "Y")

    def test_close_cancels_pending_fit(self, controller, scheduler, surface):
        controller.close()
        scheduler.run_all()
        assert surface.fits == []


class TestControllerCollaborators:
    def test_click_forwards_to_scroll(self, sample_maps, fitter):
        clicked = []
        ctrl = AtlasController(sample_maps, fitter=fitter, scroll_to=clicked.append)
        assert ctrl.click_node("Arcade") is True
        assert ctrl.click_node("bg") is False
        assert clicked == ["Arcade"]

    def test_click_without_scroll_target(self, controller):
        assert controller.click_node("Arcade") is False

    def test_mode_loaded_from_preferences(self, sample_maps, fitter):
        prefs = DictStore({"scoreHeatmap": True, "voidstones": 3})
        ctrl = AtlasController(sample_maps, fitter=fitter, preferences=prefs)
        assert ctrl.mode == DisplayMode(score_heatmap=True, voidstones=3)

    def test_mode_change_persisted(self, sample_maps, fitter):
        prefs = DictStore()
        ctrl = AtlasController(sample_maps, fitter=fitter, preferences=prefs)
        ctrl.set_voidstones(4)
        assert prefs.values == {"scoreHeatmap": False, "voidstones": 4}

    def test_explicit_mode_wins(self, sample_maps, fitter):
        prefs = DictStore({"voidstones": 3})
        ctrl = AtlasController(sample_maps, fitter=fitter, preferences=prefs,
                               mode=DisplayMode(voidstones=1))
        assert ctrl.mode.voidstones == 1

    def test_surface_attached_late(self, sample_maps, scheduler, surface):
        ctrl = AtlasController(sample_maps, fitter=ViewportFitter(scheduler=scheduler))
        scheduler.run_live()
        assert ctrl.attach_surface(surface) is True
        assert surface.fits[0].node_ids == ("Arcade", "Beach", "Cells")
