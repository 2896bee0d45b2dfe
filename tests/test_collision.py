"""
Tests for swipe-vs-entity collision resolution.
"""

from dataclasses import replace

import pytest

from fruit_slash.slash_core.collision import CollisionResolver
from fruit_slash.slash_core.config_loader import load_config
from fruit_slash.slash_core.fruit_catalog import FruitCatalog
from fruit_slash.slash_core.gesture import TrailPoint
from fruit_slash.slash_core.physics_world import PhysicsWorld
from fruit_slash.slash_core.scoring import ScoreTracker


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def catalog(config):
    return FruitCatalog(config)


@pytest.fixture
def world(config):
    return PhysicsWorld(config)


@pytest.fixture
def scorer(config):
    return ScoreTracker(config)


@pytest.fixture
def resolver(scorer, config):
    return CollisionResolver(scorer, config)


def swipe_to(x, y, length=100.0):
    """Horizontal segment of the given length ending at (x, y)."""
    return TrailPoint(x - length, y), TrailPoint(x, y)


class TestHitTest:
    """Test hit selection."""

    def test_fast_swipe_hits(self, world, catalog, resolver, scorer):
        fruit = world.spawn_entity(catalog.fruits[0], (200.0, 200.0))

        events = resolver.test(swipe_to(200.0, 200.0), world.entities.values(), 0.0)

        assert len(events) == 1
        assert events[0].uid == fruit.uid
        assert fruit.sliced
        assert scorer.score == 10

    def test_slow_swipe_ignored(self, world, catalog, resolver, scorer):
        """A segment no longer than min_slash_speed is a hover, not a slice."""
        fruit = world.spawn_entity(catalog.fruits[0], (200.0, 200.0))

        events = resolver.test(swipe_to(200.0, 200.0, length=3.0), world.entities.values(), 0.0)

        assert events == []
        assert not fruit.sliced
        assert scorer.score == 0

    def test_threshold_is_exclusive(self, world, catalog, resolver, config):
        fruit = world.spawn_entity(catalog.fruits[0], (200.0, 200.0))
        segment = swipe_to(200.0, 200.0, length=config.collision.min_slash_speed)
        assert resolver.find_hits(segment, [fruit]) == []

    def test_newest_point_distance(self, world, catalog, resolver, config):
        """Only the distance to the newest point counts."""
        radius = config.collision.hit_radius
        near = world.spawn_entity(catalog.fruits[0], (200.0 + radius - 1.0, 200.0))
        far = world.spawn_entity(catalog.fruits[1], (200.0 + radius + 1.0, 200.0))
        # Passes straight through `behind` but ends far from it
        behind = world.spawn_entity(catalog.fruits[2], (150.0, 200.0))

        hits = resolver.find_hits(swipe_to(200.0, 200.0), world.entities.values())

        assert hits == [near]
        assert not far.sliced
        assert not behind.sliced

    def test_radius_scales(self, world, catalog, resolver, config):
        """Shrunken entities have a smaller hit radius."""
        entity = world.spawn_entity(catalog.fruits[0], (230.0, 200.0))
        entity.scale = 0.5
        assert resolver.find_hits(swipe_to(200.0, 200.0), [entity]) == []

        entity.scale = 1.0
        assert resolver.find_hits(swipe_to(200.0, 200.0), [entity]) == [entity]

    def test_multiple_hits_in_one_segment(self, world, catalog, resolver, scorer):
        """Every entity within range is sliced, in spawn order."""
        a = world.spawn_entity(catalog.fruits[0], (300.0, 300.0))
        b = world.spawn_entity(catalog.fruits[1], (320.0, 300.0))

        events = resolver.test(swipe_to(310.0, 300.0), world.entities.values(), 0.0)

        assert [e.uid for e in events] == [a.uid, b.uid]
        assert [e.combo for e in events] == [1, 2]
        assert scorer.score == 30

    def test_sliced_entities_skipped(self, world, catalog, resolver, scorer):
        fruit = world.spawn_entity(catalog.fruits[0], (200.0, 200.0))
        fruit.sliced = True

        assert resolver.test(swipe_to(200.0, 200.0), world.entities.values(), 0.0) == []
        assert scorer.fruits_sliced == 0

    def test_no_candidates(self, resolver):
        assert resolver.find_hits(swipe_to(200.0, 200.0), []) == []


class TestThrottle:
    """Test the hit-test rate limit."""

    def test_throttled_within_window(self, world, catalog, resolver, config):
        first = world.spawn_entity(catalog.fruits[0], (200.0, 200.0))
        second = world.spawn_entity(catalog.fruits[1], (500.0, 200.0))
        throttle = config.collision.throttle_ms

        assert len(resolver.test(swipe_to(200.0, 200.0), world.entities.values(), 1000.0)) == 1
        assert first.sliced

        # Skipped entirely, not deferred
        assert resolver.test(swipe_to(500.0, 200.0), world.entities.values(), 1000.0 + throttle - 1) == []
        assert not second.sliced

        assert len(resolver.test(swipe_to(500.0, 200.0), world.entities.values(), 1000.0 + throttle)) == 1
        assert second.sliced

    def test_throttled_tests_do_not_restart_window(self, world, catalog, resolver, config):
        throttle = config.collision.throttle_ms
        resolver.test(swipe_to(0.0, 0.0), [], 0.0)
        resolver.test(swipe_to(0.0, 0.0), [], throttle - 10)
        assert resolver.last_test_ms == 0.0
        assert not resolver.is_throttled(throttle)

    def test_reset_clears_throttle(self, resolver):
        resolver.test(swipe_to(0.0, 0.0), [], 100.0)
        assert resolver.is_throttled(110.0)
        resolver.reset()
        assert not resolver.is_throttled(110.0)


class TestHazardHits:
    """Test hazard slices."""

    def test_hazard_costs_life(self, world, catalog, resolver, scorer, config):
        world.spawn_entity(catalog.fruits[0], (100.0, 100.0))
        resolver.test(swipe_to(100.0, 100.0), world.entities.values(), 0.0)
        bomb = world.spawn_entity(catalog.hazard, (400.0, 100.0))

        events = resolver.test(swipe_to(400.0, 100.0), world.entities.values(), 100.0)

        assert events[0].is_hazard
        assert bomb.sliced
        assert scorer.lives == config.session.starting_lives - 1
        assert scorer.combo == 0
        assert scorer.score == 10

    def test_last_life_stops_processing(self, config, catalog):
        """Hits after the hazard that takes the last life are not applied."""
        config = replace(config, session=replace(config.session, starting_lives=1))
        world = PhysicsWorld(config)
        scorer = ScoreTracker(config)
        resolver = CollisionResolver(scorer, config)

        bomb = world.spawn_entity(catalog.hazard, (200.0, 200.0))
        fruit = world.spawn_entity(catalog.fruits[0], (205.0, 200.0))

        events = resolver.test(swipe_to(200.0, 200.0), world.entities.values(), 0.0)

        assert len(events) == 1
        assert bomb.sliced
        assert not fruit.sliced
        assert scorer.out_of_lives
        assert scorer.score == 0
