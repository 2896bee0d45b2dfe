"""
Tests for gesture tracking.
"""

import pytest

from fruit_slash.slash_core.config_loader import load_config
from fruit_slash.slash_core.gesture import GestureTracker, TrailPoint


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def tracker(config):
    return GestureTracker(config)


class TestTrail:
    """Test trail accumulation."""

    def test_begin_starts_trail(self, tracker):
        tracker.begin(TrailPoint(10, 20))
        assert tracker.active
        assert tracker.trail == (TrailPoint(10, 20),)

    def test_extend_returns_newest_segment(self, tracker):
        tracker.begin(TrailPoint(0, 0))
        segment = tracker.extend(TrailPoint(30, 40))
        assert segment == (TrailPoint(0, 0), TrailPoint(30, 40))

        segment = tracker.extend(TrailPoint(60, 40))
        assert segment == (TrailPoint(30, 40), TrailPoint(60, 40))

    def test_trail_capped(self, tracker, config):
        """Only the newest max_trail_points samples should be kept."""
        cap = config.gesture.max_trail_points
        tracker.begin(TrailPoint(0, 0))
        for i in range(1, cap + 10):
            tracker.extend(TrailPoint(i, i))

        trail = tracker.trail
        assert len(trail) == cap
        assert trail[-1] == TrailPoint(cap + 9, cap + 9)
        assert trail[0] == TrailPoint(10, 10)

    def test_begin_discards_partial(self, tracker):
        """Beginning again should drop the previous gesture."""
        tracker.begin(TrailPoint(0, 0))
        tracker.extend(TrailPoint(50, 0))
        tracker.begin(TrailPoint(100, 100))
        assert tracker.trail == (TrailPoint(100, 100),)


class TestInactive:
    """Test inputs without an active gesture."""

    def test_extend_without_begin(self, tracker):
        assert tracker.extend(TrailPoint(10, 10)) is None
        assert tracker.trail == ()
        assert not tracker.active

    def test_end_without_begin(self, tracker):
        assert tracker.end(100.0) is None


class TestEnd:
    """Test finalizing gestures."""

    def test_end_archives_trail(self, tracker):
        tracker.begin(TrailPoint(0, 0))
        tracker.extend(TrailPoint(50, 0))

        record = tracker.end(250.0)

        assert record is not None
        assert record.points == (TrailPoint(0, 0), TrailPoint(50, 0))
        assert record.created_at_ms == 250.0
        assert record.age(400.0) == 150.0
        assert not tracker.active
        assert tracker.trail == ()

    def test_single_point_not_archived(self, tracker):
        """A tap without movement leaves no slash trail."""
        tracker.begin(TrailPoint(0, 0))
        assert tracker.end(100.0) is None
        assert not tracker.active

    def test_trail_ids_increase(self, tracker):
        ids = []
        for _ in range(3):
            tracker.begin(TrailPoint(0, 0))
            tracker.extend(TrailPoint(10, 0))
            ids.append(tracker.end(0.0).trail_id)
        assert ids == sorted(set(ids))
