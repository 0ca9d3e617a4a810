"""
Tests for the adaptive weighted spawner.
"""

import logging
import random
from collections import Counter
from dataclasses import replace

import pytest

from recipe_slice.core.config_loader import KindConfig, config_from_overrides, load_config
from recipe_slice.core.entity_catalog import EntityCatalog
from recipe_slice.core.play_area import PlayArea
from recipe_slice.core.scheduler import Scheduler
from recipe_slice.core.spawner import AdaptiveSpawner


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def scheduler():
    return Scheduler()


@pytest.fixture
def area(config):
    return PlayArea(config)


@pytest.fixture
def catalog(config):
    return EntityCatalog(config)


@pytest.fixture
def spawner(catalog, area, scheduler, config):
    return AdaptiveSpawner(catalog, area, scheduler, config, rng=random.Random(42))


def _kinds(weights):
    return [KindConfig(name=name, weight=w, radius=0.5, mass=1.0) for name, w in weights]


class TestWeightedSelection:
    """Test cumulative-weight kind selection."""

    def test_only_positive_weight_selected(self, area, scheduler, config):
        """Weights [Apple:0, Banana:6, Strawberry:0] always select Banana."""
        catalog = EntityCatalog(kinds=_kinds([("Apple", 0), ("Banana", 6), ("Strawberry", 0)]))
        spawner = AdaptiveSpawner(catalog, area, scheduler, config, rng=random.Random(1))

        picks = Counter(spawner.pick_kind() for _ in range(1000))
        assert picks == Counter({"Banana": 1000})

    def test_zero_total_is_uniform(self, area, scheduler, config):
        """All-zero weights fall back to uniform choice."""
        catalog = EntityCatalog(kinds=_kinds([("Apple", 0), ("Banana", 0), ("Strawberry", 0)]))
        spawner = AdaptiveSpawner(catalog, area, scheduler, config, rng=random.Random(2))

        picks = Counter(spawner.pick_kind() for _ in range(600))
        assert set(picks) == {"Apple", "Banana", "Strawberry"}
        for count in picks.values():
            assert count > 120

    def test_weights_bias_distribution(self, spawner, catalog):
        """A boosted kind dominates selection."""
        catalog.reset_weights(1.0)
        catalog.set_weight("Apple", 20.0)

        picks = Counter(spawner.pick_kind() for _ in range(2000))
        assert picks.most_common(1)[0][0] == "Apple"
        assert picks["Apple"] > 1400

    def test_allowed_kinds_filter(self, spawner):
        """set_allowed_kinds hard-filters selection."""
        spawner.set_allowed_kinds(["Strawberry"])
        assert {spawner.pick_kind() for _ in range(200)} == {"Strawberry"}

    def test_zero_total_with_filter_stays_in_filter(self, spawner, catalog):
        """With all weights zeroed the uniform fallback honors the hard filter."""
        catalog.reset_weights(0.0)
        spawner.set_allowed_kinds(["Apple", "Banana"])

        picks = Counter(spawner.pick_kind() for _ in range(400))
        assert set(picks) == {"Apple", "Banana"}

    def test_empty_catalog_picks_nothing(self, area, scheduler, config):
        """No kinds means no pick."""
        spawner = AdaptiveSpawner(EntityCatalog(kinds=()), area, scheduler, config)
        assert spawner.pick_kind() is None
        assert spawner.spawn_one() is None

    def test_kind_names_passthrough(self, spawner, config):
        """get_all_kind_names reports the master set even when filtered."""
        spawner.set_allowed_kinds(["Apple"])
        assert spawner.get_all_kind_names() == list(config.kind_names)


class TestLaunch:
    """Test spawn placement and launch impulse."""

    def test_edge_spawns_arc_inward(self, spawner, config):
        """Off-center spawn points push toward the center."""
        center = config.spawner.center_x
        for _ in range(100):
            x, y, _ = spawner.launch_impulse(center + 5.0)
            assert x <= 0
            x, y, _ = spawner.launch_impulse(center - 5.0)
            assert x >= 0

    def test_impulse_ranges(self, spawner, config):
        """Impulse components stay within configured ranges."""
        cfg = config.spawner
        for _ in range(100):
            x, y, torque = spawner.launch_impulse(cfg.center_x)
            assert cfg.x_force_range[0] <= x <= cfg.x_force_range[1]
            assert cfg.y_force_range[0] <= y <= cfg.y_force_range[1]
            assert cfg.torque_range[0] <= torque <= cfg.torque_range[1]

    def test_spawn_one_registers_body(self, spawner, area, config):
        """spawn_one creates a moving body at a spawn point and tracks it."""
        uid = spawner.spawn_one()
        assert uid is not None
        assert uid in spawner.active_uids

        entity = area.get_entity(uid)
        assert entity.position in config.spawner.spawn_points
        assert entity.velocity[1] > 0

    def test_fixed_spawn_point(self, catalog, area, scheduler, config):
        """With randomization off, the first point is always used."""
        cfg = config_from_overrides(
            config, spawner=replace(config.spawner, randomize_spawn_point=False)
        )
        spawner = AdaptiveSpawner(catalog, area, scheduler, cfg, rng=random.Random(3))
        for _ in range(20):
            assert spawner.pick_spawn_point() == cfg.spawner.spawn_points[0]

    def test_consume(self, spawner, area):
        """consume removes a sliced body and returns its kind."""
        uid = spawner.spawn_one()
        kind = area.get_entity(uid).kind

        assert spawner.consume(uid) == kind
        assert area.get_entity(uid) is None
        assert spawner.active_count == 0
        assert spawner.consume(uid) is None


class TestLoops:
    """Test start/stop and the burst and cleanup loops."""

    def test_start_is_idempotent(self, spawner, scheduler):
        """Starting twice schedules the loops once."""
        spawner.start()
        spawner.start()
        assert spawner.is_running
        assert scheduler.pending == 2

    def test_stop_is_idempotent(self, spawner, scheduler):
        """Stopping twice behaves like stopping once."""
        spawner.start()
        spawner.stop()
        spawner.stop()
        assert not spawner.is_running
        assert scheduler.pending == 0

    def test_bursts_spawn(self, spawner, scheduler, config):
        """Bursts spawn fruit over time."""
        spawner.start()
        scheduler.advance(config.spawner.interval_range[1] * 3 + 0.1)
        assert spawner.total_spawned >= 3 * config.spawner.min_per_burst

    def test_stop_prevents_spawns(self, spawner, scheduler):
        """No spawns happen after stop()."""
        spawner.start()
        spawner.stop()
        scheduler.advance(30.0)
        assert spawner.total_spawned == 0

    def test_population_cap(self, catalog, area, scheduler, config):
        """Bursts never push the live population past the cap."""
        cfg = config_from_overrides(config, spawner=replace(
            config.spawner, max_active=3, min_per_burst=5, max_per_burst=5
        ))
        spawner = AdaptiveSpawner(catalog, area, scheduler, cfg, rng=random.Random(4))
        spawner.start()

        # Without physics steps, bodies never fall out of the area
        scheduler.advance(10.0)
        assert spawner.active_count == 3
        assert area.entity_count == 3

    def test_no_spawn_points_is_not_fatal(self, catalog, area, scheduler, config, caplog):
        """Missing spawn points log an error and spawn nothing."""
        cfg = config_from_overrides(config, spawner=replace(config.spawner, spawn_points=()))
        spawner = AdaptiveSpawner(catalog, area, scheduler, cfg)

        with caplog.at_level(logging.ERROR):
            spawner.start()
            scheduler.advance(10.0)

        assert spawner.total_spawned == 0
        assert "No spawn points" in caplog.text

    def test_cleanup_disposes_fallen_bodies(self, catalog, area, scheduler, config):
        """Bodies below the cleanup line are removed and reported."""
        disposed = []
        spawner = AdaptiveSpawner(
            catalog, area, scheduler, config,
            rng=random.Random(5),
            on_dispose=lambda uid, kind: disposed.append((uid, kind))
        )
        uid = spawner.spawn_one()
        kind = area.get_entity(uid).kind
        area.get_entity(uid).body.position = (0.0, config.spawner.cleanup_below_y - 5.0)

        spawner.start()
        scheduler.advance(config.spawner.cleanup_interval)

        assert disposed == [(uid, kind)]
        assert area.get_entity(uid) is None
        assert spawner.total_disposed == 1

    def test_cleanup_prunes_stale_handles(self, spawner, area, scheduler, config):
        """Handles of bodies removed elsewhere are forgotten."""
        uid = spawner.spawn_one()
        area.remove_entity(uid)

        spawner.start()
        scheduler.advance(config.spawner.cleanup_interval)
        assert uid not in spawner.active_uids
