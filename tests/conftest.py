"""
Shared pytest fixtures for atlas tests.

Resets the Config singleton to schema defaults at import time so a local
config.json cannot change geometry, opacity or delays under the tests, and
provides fake collaborators (manual scheduler, recording surface) so
viewport tests never wait on real timers.
"""

import sys
from pathlib import Path

# Ensure project root is on sys.path so imports work from tests/
sys.path.insert(0, str(Path(__file__).parent.parent))

# Patch Config BEFORE anything reads it, so every test sees schema defaults.
from atlas_core.config import config as _config

_config._data = {}

import pytest

from atlas_core.types import MapEntity


# ── Fake collaborators ────────────────────────────────────────

class ManualHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.ran = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Records scheduled callbacks; tests run them explicitly."""

    def __init__(self):
        self.handles = []

    def schedule(self, delay, callback):
        handle = ManualHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def live(self):
        return [h for h in self.handles if not h.cancelled and not h.ran]

    def run_all(self):
        """Run every callback, cancelled ones included (they must be no-ops)."""
        for handle in list(self.handles):
            if not handle.ran:
                handle.ran = True
                handle.callback()

    def run_live(self):
        for handle in self.live:
            handle.ran = True
            handle.callback()


class RecordingSurface:
    def __init__(self):
        self.fits = []

    def fit_view(self, target):
        self.fits.append(target)


# ── Fixtures ──────────────────────────────────────────────────

@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def make_map():
    """Factory for MapEntity with sensible defaults."""
    def _make(name, x=1.0, y=1.0, connected=(), tiers=(1, 2, 3, 4, 5), score=5.0,
              search=None, **extra):
        return MapEntity(
            name=name,
            x=x,
            y=y,
            connected=tuple(connected),
            tiers=tuple(tiers),
            score=score,
            search_text=search if search is not None else name.lower(),
            extra=extra,
        )
    return _make


@pytest.fixture
def sample_maps(make_map):
    """
    Five maps: A-B-C form a connected chain (B links both ways), D is
    unplaced and E is placed but isolated.
    """
    return [
        make_map("Arcade", 10, 20, ["Beach", "Cells"], tiers=(1, 3, 5, 7, 9), score=8.5,
                 search="arcade boss:false"),
        make_map("Beach", 30, 40, ["Arcade"], tiers=(2, 4, 6, 8, 10), score=3,
                 search="beach coastal"),
        make_map("Cells", 50, 60, ["Arcade", "Beach"], tiers=(11, 12, 13, 14, 15), score=10,
                 search="cells prison"),
        make_map("Dunes", 0, 15, ["Arcade"], search="dunes desert"),
        make_map("Estuary", 70, 80, [], search="estuary coastal"),
    ]
