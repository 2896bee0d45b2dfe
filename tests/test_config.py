"""
Tests for configuration loading and validation.
"""

import os

import pytest
import yaml

import fruit_slash
from fruit_slash.slash_core.config_loader import get_config, load_config, reload_config
from fruit_slash.slash_core.fruit_catalog import FruitCatalog


DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(fruit_slash.__file__), "game_config.yaml")


@pytest.fixture
def raw_config():
    with open(DEFAULT_CONFIG_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def write_config(tmp_path, raw):
    path = tmp_path / "game_config.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(raw, f, allow_unicode=True)
    return str(path)


class TestDefaultConfig:
    """Test the shipped game_config.yaml."""

    def test_loads(self):
        """Default config should load and validate."""
        config = load_config()
        assert config.board.width == 800
        assert config.board.height == 600

    def test_gameplay_constants(self):
        """Gameplay constants should match the documented defaults."""
        config = load_config()
        assert config.physics.gravity == pytest.approx(0.3)
        assert config.physics.scale_decay == pytest.approx(0.95)
        assert config.spawn.interval_ms == 800
        assert config.spawn.hazard_probability == pytest.approx(0.1)
        assert config.collision.hit_radius == 40
        assert config.collision.min_slash_speed == 5
        assert config.collision.throttle_ms == 50
        assert config.scoring.points_per_fruit == 10
        assert config.scoring.combo_cap == 10
        assert config.scoring.combo_timeout_ms == 1000
        assert config.session.duration_seconds == 60
        assert config.session.starting_lives == 3
        assert config.gesture.max_trail_points == 20

    def test_fruit_ids_sequential(self):
        """Fruit IDs should run 0..n-1 with the hazard right after."""
        config = load_config()
        assert [f.id for f in config.fruits] == list(range(len(config.fruits)))
        assert config.hazard.id == config.num_fruit_kinds
        assert config.hazard.is_hazard

    def test_get_kind(self):
        """get_kind should resolve fruits and the hazard."""
        config = load_config()
        assert config.get_kind(0).name == config.fruits[0].name
        assert config.get_kind(config.num_fruit_kinds) is config.hazard
        with pytest.raises(ValueError):
            config.get_kind(config.num_fruit_kinds + 1)

    def test_cached_config(self):
        """get_config should return the same instance until reloaded."""
        first = get_config()
        assert get_config() is first
        reloaded = reload_config()
        assert reloaded is not first
        assert get_config() is reloaded


class TestValidation:
    """Test rejection of inconsistent configuration."""

    def test_missing_file(self, tmp_path):
        """A missing file should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_custom_path(self, tmp_path, raw_config):
        """A config written elsewhere should load with its own values."""
        raw_config["session"]["duration_seconds"] = 30
        config = load_config(write_config(tmp_path, raw_config))
        assert config.session.duration_seconds == 30

    def test_non_sequential_fruit_ids(self, tmp_path, raw_config):
        """Fruit IDs with a gap should be rejected."""
        raw_config["fruits"][1]["id"] = 5
        with pytest.raises(ValueError, match="Fruit ID mismatch"):
            load_config(write_config(tmp_path, raw_config))

    def test_duplicate_names(self, tmp_path, raw_config):
        """Two kinds with the same name should be rejected."""
        raw_config["hazard"]["name"] = raw_config["fruits"][0]["name"]
        with pytest.raises(ValueError, match="unique"):
            load_config(write_config(tmp_path, raw_config))

    def test_decay_out_of_range(self, tmp_path, raw_config):
        """A decay of 1.0 would never fade sliced entities."""
        raw_config["physics"]["scale_decay"] = 1.0
        with pytest.raises(ValueError, match="scale_decay"):
            load_config(write_config(tmp_path, raw_config))

    def test_hazard_probability_out_of_range(self, tmp_path, raw_config):
        raw_config["spawn"]["hazard_probability"] = 1.5
        with pytest.raises(ValueError, match="hazard_probability"):
            load_config(write_config(tmp_path, raw_config))

    def test_inverted_launch_speed(self, tmp_path, raw_config):
        raw_config["spawn"]["vy_min"] = 30
        with pytest.raises(ValueError, match="vy_min"):
            load_config(write_config(tmp_path, raw_config))

    def test_bad_color(self, tmp_path, raw_config):
        raw_config["fruits"][0]["color"] = [255, 0]
        with pytest.raises(ValueError, match="Color"):
            load_config(write_config(tmp_path, raw_config))


class TestFruitCatalog:
    """Test the kind catalog built from config."""

    def test_catalog_size(self):
        """Catalog should hold every fruit plus the hazard."""
        config = load_config()
        catalog = FruitCatalog(config)
        assert len(catalog) == config.num_fruit_kinds + 1
        assert len(catalog.fruits) == config.num_fruit_kinds

    def test_hazard_lookup(self):
        """The hazard should be addressable by ID and name."""
        config = load_config()
        catalog = FruitCatalog(config)
        hazard = catalog[config.hazard.id]
        assert hazard.is_hazard
        assert catalog.get_by_name(config.hazard.name) is hazard
        assert not any(f.is_hazard for f in catalog.fruits)

    def test_unknown_kind(self):
        config = load_config()
        catalog = FruitCatalog(config)
        with pytest.raises(IndexError):
            catalog[len(catalog)]
        assert catalog.get_by_name("durian") is None
