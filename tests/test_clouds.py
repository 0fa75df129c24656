"""
Tests for stormcell/clouds.py - Cloud construction, drift and spawn timing
"""

import math
import random

import pytest

from stormcell.clouds import (
    CloudSpawner,
    advance_clouds,
    build_layers,
    make_cloud,
    retain_clouds,
)
from stormcell.config import StormConfig
from stormcell.models import Cloud


class TestLayers:
    """Cloud layer stacking."""

    @pytest.mark.unit
    def test_layers_widen_from_half_to_full(self):
        layers = build_layers(40, 5)
        assert [layer.width for layer in layers] == [20, 25, 30, 35, 40]
        assert [layer.offset for layer in layers] == [10, 7, 5, 2, 0]

    @pytest.mark.unit
    def test_narrow_layers_clamped_to_minimum(self):
        layers = build_layers(8, 4)
        widths = [layer.width for layer in layers]
        assert widths == [5, 5, 6, 8]
        assert widths == sorted(widths)

    @pytest.mark.unit
    def test_single_layer_is_full_width(self):
        layers = build_layers(30, 1)
        assert len(layers) == 1
        assert layers[0].width == 30
        assert layers[0].offset == 0


class TestMakeCloud:
    """New cloud parameters."""

    @pytest.mark.unit
    @pytest.mark.parametrize("seed", range(40))
    def test_parameters_in_range(self, seed):
        cloud = make_cloud(100, 40, random.Random(seed))

        assert 30 <= cloud.width < 70
        assert 4 <= cloud.layer_count < 8
        assert 0.2 <= abs(cloud.speed) <= 0.5
        assert 0 <= cloud.y < 10
        assert cloud.active

        widths = [layer.width for layer in cloud.layers]
        assert widths == sorted(widths)
        assert widths[-1] == cloud.width

    @pytest.mark.unit
    @pytest.mark.parametrize("seed", range(40))
    def test_enters_from_an_edge_moving_inward(self, seed):
        cloud = make_cloud(100, 40, random.Random(seed))
        if cloud.speed > 0:
            assert cloud.x == -cloud.width
        else:
            assert cloud.x == 100

    @pytest.mark.unit
    def test_both_edges_are_used(self):
        rng = random.Random(5)
        signs = {math.copysign(1, make_cloud(100, 40, rng).speed) for _ in range(50)}
        assert signs == {1.0, -1.0}

    @pytest.mark.unit
    def test_short_screen_puts_cloud_on_top_row(self):
        cloud = make_cloud(100, 3, random.Random(1))
        assert cloud.y == 0


class TestDrift:
    """Per-tick movement and retirement."""

    @pytest.mark.unit
    def test_cloud_reaches_screen_after_134_ticks(self):
        cloud = Cloud(x=-40.0, y=0.0, width=40, speed=0.3, layers=build_layers(40, 4))

        for _ in range(133):
            advance_clouds([cloud], 80)
        assert cloud.x < 0

        advance_clouds([cloud], 80)
        assert cloud.x >= 0
        assert math.ceil(40 / 0.3) == 134

    @pytest.mark.unit
    def test_cloud_removed_once_past_far_edge(self):
        cloud = Cloud(x=-40.0, y=0.0, width=40, speed=0.3, layers=build_layers(40, 4))
        ticks = 0
        while cloud.active:
            advance_clouds([cloud], 80)
            ticks += 1
            assert ticks < 1000

        assert cloud.x > 80
        assert 400 <= ticks <= 401

    @pytest.mark.unit
    def test_leftward_cloud_retires_off_left_edge(self):
        cloud = Cloud(x=1.0, y=0.0, width=10, speed=-0.5, layers=build_layers(10, 4))
        for _ in range(23):
            advance_clouds([cloud], 80)
        assert not cloud.active
        assert cloud.x + cloud.width < 0

    @pytest.mark.unit
    def test_inactive_clouds_do_not_move(self):
        cloud = Cloud(x=5.0, y=0.0, width=10, speed=1.0, active=False)
        advance_clouds([cloud], 80)
        assert cloud.x == 5.0

    @pytest.mark.unit
    def test_retain_reports_new_indices(self):
        clouds = [Cloud(x=float(i), y=0.0, width=10, speed=0.0) for i in range(4)]
        survivors, remap = retain_clouds(clouds, lambda c: c.x != 1.0)
        assert [c.x for c in survivors] == [0.0, 2.0, 3.0]
        assert remap == {0: 0, 2: 1, 3: 2}


class TestCloudSpawner:
    """Spawn timing."""

    @pytest.mark.unit
    def test_first_cloud_is_immediate(self, fake_clock):
        spawner = CloudSpawner(StormConfig(), random.Random(1), fake_clock)
        assert spawner.ready(0)

    @pytest.mark.unit
    def test_interval_rerolled_after_spawn(self, fake_clock):
        spawner = CloudSpawner(StormConfig(), random.Random(1), fake_clock)
        spawner.spawn(80, 24)

        assert 2.0 <= spawner.interval <= 5.0
        assert not spawner.ready(1)

        fake_clock.advance(spawner.interval)
        assert spawner.ready(1)

    @pytest.mark.unit
    def test_capped_at_max_clouds(self, fake_clock):
        spawner = CloudSpawner(StormConfig(max_clouds=3), random.Random(1), fake_clock)
        fake_clock.advance(100.0)
        assert spawner.ready(2)
        assert not spawner.ready(3)
