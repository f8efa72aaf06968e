"""Tests for ski_corridor generators module.

Tests: ObstaclePlacementPlanner
Focus: Zone rules, capacity caps, reproducibility, seam handling between regions

Note: Hypothesis tests build their planners inline since Hypothesis does not
work well with function-scoped pytest fixtures.
"""

from dataclasses import replace
from math import pi
from typing import Optional

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from ski_corridor.constants import ObstacleConfig
from ski_corridor.core.jump_scheduler import JumpScheduler
from ski_corridor.core.noise_source import NoiseSource
from ski_corridor.core.path_spine import PathSpineGenerator
from ski_corridor.core.terrain_sampler import TerrainSampler
from ski_corridor.generators.obstacle_planner import (
    BAND_ROLL_START,
    DEAD_TREE_ROLL,
    RARITY_ROLL,
    ROCK_ROLL,
    ObstaclePlacementPlanner,
)
from ski_corridor.model.obstacle_placement import ObstacleType, TreeSize
from ski_corridor.model.path_point import PathPoint, SpineTail
from ski_corridor.model.settings import NoiseBand, ObstacleSettings, SurfaceRule
from ski_corridor.model.terrain_sample import ObstacleZone, SurfaceKind

UNLIMITED = {bucket: 100_000 for bucket in ObstacleConfig.MAX_INSTANCES}


def _region(seed: int, segments: int = 20) -> list[PathPoint]:
    """First chunk of path points for a seed."""
    spine = PathSpineGenerator(noise=NoiseSource(seed=seed))
    return spine.generate_segment(start_index=0, segment_count=segments, base_altitude=600.0, slope_tangent=0.2)


def _planner(
    seed: int,
    obstacle_settings: Optional[ObstacleSettings] = None,
    density_multiplier: float = 1.0,
) -> ObstaclePlacementPlanner:
    noise = NoiseSource(seed=seed)
    sampler = TerrainSampler(noise=noise, jumps=JumpScheduler(seed=seed))
    return ObstaclePlacementPlanner(
        sampler=sampler,
        noise=noise,
        seed=seed,
        settings=obstacle_settings,
        density_multiplier=density_multiplier,
    )


def _only_zone(zone: ObstacleZone, rule: SurfaceRule, **overrides) -> ObstacleSettings:
    """Settings where every zone except one is switched off."""
    base = ObstacleSettings(max_instances=dict(UNLIMITED), **overrides).with_rarity(0.0)
    rules = dict(base.surface_rules)
    rules[zone] = rule
    return replace(base, surface_rules=rules)


def _bucket_counts(placements) -> dict[str, int]:
    counts: dict[str, int] = {}
    for placement in placements:
        counts[placement.bucket] = counts.get(placement.bucket, 0) + 1
    return counts


# =============================================================================
# TESTS FOR OBSTACLE PLACEMENT PLANNER
# =============================================================================


class TestObstaclePlacementPlanner:
    """ObstaclePlacementPlanner - region scan with per-zone rules."""

    def test_rarity_zero_places_nothing(self) -> None:
        """All zones at rarity 0 yield an empty region, whatever the multiplier."""
        planner = _planner(seed=3, obstacle_settings=ObstacleSettings().with_rarity(0.0), density_multiplier=2.0)
        placements = planner.plan_region(points=_region(seed=3))
        assert placements == []
        assert planner.last_stats.cells_scanned > 0

    def test_default_settings_place_obstacles(self) -> None:
        planner = _planner(seed=11)
        placements = planner.plan_region(points=_region(seed=11))
        assert len(placements) > 0
        assert planner.last_stats.placements == len(placements)

    def test_empty_points(self) -> None:
        assert _planner(seed=0).plan_region(points=[]) == []

    def test_capacity_never_exceeded(self) -> None:
        capped = ObstacleSettings(max_instances={bucket: 3 for bucket in ObstacleConfig.MAX_INSTANCES}).with_rarity(1.0)
        planner = _planner(seed=5, obstacle_settings=capped)
        placements = planner.plan_region(points=_region(seed=5))

        for bucket, count in _bucket_counts(placements).items():
            assert count <= 3, f"Bucket {bucket} over capacity: {count}"
        assert planner.last_stats.capacity_skips > 0, "Full rarity on every zone must hit the caps"

    def test_same_seed_same_layout(self) -> None:
        points = _region(seed=21)
        first = _planner(seed=21).plan_region(points=points)
        second = _planner(seed=21).plan_region(points=points)
        assert first == second

    def test_replanning_same_region_is_stable(self) -> None:
        """Planning a region twice on one planner yields the same layout."""
        planner = _planner(seed=8)
        points = _region(seed=8)
        assert planner.plan_region(points=points) == planner.plan_region(points=points)

    def test_different_seed_different_layout(self) -> None:
        points = _region(seed=1)
        first = _planner(seed=1).plan_region(points=points)
        second = _planner(seed=2).plan_region(points=points)
        assert first != second

    def test_placements_sit_on_terrain(self) -> None:
        """Placement Y equals the terrain height at its XZ position."""
        seed = 13
        points = _region(seed=seed)
        planner = _planner(seed=seed)
        sampler = TerrainSampler(noise=NoiseSource(seed=seed), jumps=JumpScheduler(seed=seed))

        placements = planner.plan_region(points=points)
        assert placements
        for placement in placements[:60]:
            x, y, z = placement.transform.position
            nearest = min(points, key=lambda p: (p.x - x) ** 2 + (p.z - z) ** 2)
            sample = sampler.sample_at(world_x=x, world_z=z, point=nearest)
            assert y == pytest.approx(sample.height)
            assert placement.surface == sample.kind

    def test_track_rule_uses_type_proportions(self) -> None:
        """Track with type proportions rock-only and rarity 1 places only rocks on the track."""
        rule = SurfaceRule(rarity=1.0, type_proportions={ObstacleType.ROCK: 1.0})
        planner = _planner(seed=4, obstacle_settings=_only_zone(ObstacleZone.TRACK, rule))
        placements = planner.plan_region(points=_region(seed=4))

        assert placements
        assert all(p.obstacle_type == ObstacleType.ROCK for p in placements)
        assert all(p.surface == SurfaceKind.TRACK for p in placements)

    def test_track_tree_sizes(self) -> None:
        rule = SurfaceRule(
            rarity=1.0,
            type_proportions={ObstacleType.TREE: 1.0},
            size_proportions={TreeSize.SMALL: 1.0, TreeSize.LARGE: 0.0},
        )
        planner = _planner(seed=4, obstacle_settings=_only_zone(ObstacleZone.TRACK, rule))
        placements = planner.plan_region(points=_region(seed=4))
        assert placements
        assert {p.tree_size for p in placements} == {TreeSize.SMALL}

    def test_bank_band_wins(self) -> None:
        """A full-range band with proportion 1 turns every bank cell into that tree size."""
        rule = SurfaceRule(
            rarity=1.0,
            noise_bands=(NoiseBand(noise_min=0.0, noise_max=1.01, tree_size=TreeSize.LARGE, proportion=1.0),),
        )
        planner = _planner(seed=6, obstacle_settings=_only_zone(ObstacleZone.BANK, rule))
        placements = planner.plan_region(points=_region(seed=6))

        assert placements
        for placement in placements:
            assert placement.obstacle_type == ObstacleType.TREE
            assert placement.tree_size == TreeSize.LARGE
            assert placement.surface == SurfaceKind.BANK

    def test_zero_proportion_band_falls_back_to_rock(self) -> None:
        rule = SurfaceRule(
            rarity=1.0,
            noise_bands=(NoiseBand(noise_min=0.0, noise_max=1.01, tree_size=TreeSize.LARGE, proportion=0.0),),
            rock_probability=1.0,
        )
        planner = _planner(seed=6, obstacle_settings=_only_zone(ObstacleZone.CLIFF, rule))
        placements = planner.plan_region(points=_region(seed=6))

        assert placements
        assert all(p.obstacle_type == ObstacleType.ROCK for p in placements)
        assert all(p.surface in (SurfaceKind.WALL_VERTICAL, SurfaceKind.WALL_LEDGE) for p in placements)

    def test_plateau_dead_tree_band_first(self) -> None:
        plateau = SurfaceRule.from_config(
            {
                "rarity": 1.0,
                "dead_tree_band": (0.0, 1.01, 1.0),
                "noise_bands": [(0.0, 1.01, "large", 1.0)],
            }
        )
        planner = _planner(seed=9, obstacle_settings=_only_zone(ObstacleZone.PLATEAU, plateau))
        placements = planner.plan_region(points=_region(seed=9))

        assert placements
        assert all(p.obstacle_type == ObstacleType.DEAD_TREE for p in placements)
        assert all(p.surface == SurfaceKind.PLATEAU for p in placements)

    def test_transforms_within_ranges(self) -> None:
        planner = _planner(seed=17, obstacle_settings=ObstacleSettings(max_instances=dict(UNLIMITED)))
        placements = planner.plan_region(points=_region(seed=17))
        assert placements

        for placement in placements:
            transform = placement.transform
            if placement.obstacle_type == ObstacleType.TREE:
                _, _, low, high = ObstacleConfig.TREE_SCALE[placement.tree_size.value]
                sx, sy, sz = transform.scale
                assert sx == sy == sz
                assert low <= sx <= high
                assert abs(transform.rotation[0]) <= ObstacleConfig.TREE_LEAN_MAX_RAD
            elif placement.obstacle_type == ObstacleType.ROCK:
                low, high = ObstacleConfig.ROCK_SCALE_RANGE
                assert all(low <= s <= high for s in transform.scale)
                assert all(0.0 <= r < 2 * pi for r in transform.rotation)
            elif placement.obstacle_type == ObstacleType.DEAD_TREE:
                low, high = ObstacleConfig.DEAD_TREE_SCALE_RANGE
                assert low <= transform.scale[0] <= high

    def test_adjacent_regions_do_not_share_rows(self) -> None:
        """Grid rows are half-open: the seam row belongs to the earlier region."""
        seed = 23
        no_jitter = replace(ObstacleSettings(max_instances=dict(UNLIMITED)), position_jitter=0.0).with_rarity(1.0)
        spine = PathSpineGenerator(noise=NoiseSource(seed=seed))
        first = spine.generate_segment(start_index=0, segment_count=20, base_altitude=600.0, slope_tangent=0.2)
        second = spine.continue_from(tail=SpineTail.from_points(first), segment_count=20, base_altitude=600.0, slope_tangent=0.2)

        planner = _planner(seed=seed, obstacle_settings=no_jitter)
        seam_z = first[-1].z
        placements_a = planner.plan_region(points=first)
        placements_b = planner.plan_region(points=[first[-1]] + second)

        assert placements_a and placements_b
        assert all(p.transform.position[2] > seam_z for p in placements_a)
        assert all(p.transform.position[2] <= seam_z for p in placements_b)

    def test_density_multiplier_only_adds(self) -> None:
        """With capacity out of the way, a denser planner keeps every sparser placement."""
        seed = 31
        points = _region(seed=seed)
        roomy = ObstacleSettings(max_instances=dict(UNLIMITED))
        chill = _planner(seed=seed, obstacle_settings=roomy, density_multiplier=0.5).plan_region(points=points)
        extreme = _planner(seed=seed, obstacle_settings=roomy, density_multiplier=2.0).plan_region(points=points)

        assert len(extreme) > len(chill)
        assert set(chill) <= set(extreme)

    def test_validation(self) -> None:
        noise = NoiseSource(seed=0)
        sampler = TerrainSampler(noise=noise)
        with pytest.raises(ValueError, match="density_multiplier"):
            ObstaclePlacementPlanner(sampler=sampler, noise=noise, density_multiplier=-1.0)

        planner = ObstaclePlacementPlanner(sampler=sampler, noise=noise)
        with pytest.raises(ValueError, match="grid_spacing"):
            planner.plan_region(points=_region(seed=0, segments=2), grid_spacing=0.0)

        too_many = SurfaceRule(
            rarity=0.5,
            noise_bands=tuple(
                NoiseBand(noise_min=i / 20, noise_max=(i + 1) / 20, tree_size=TreeSize.SMALL, proportion=0.1)
                for i in range(20)
            ),
        )
        with pytest.raises(ValueError, match="noise bands"):
            ObstaclePlacementPlanner(sampler=sampler, noise=noise, settings=_only_zone(ObstacleZone.BANK, too_many))


class TestObstacleDecisions:
    """ObstaclePlacementPlanner._decide - per-cell rule logic with fixed rolls."""

    @pytest.fixture
    def planner(self) -> ObstaclePlacementPlanner:
        noise = NoiseSource(seed=0)
        return ObstaclePlacementPlanner(sampler=TerrainSampler(noise=noise), noise=noise)

    def _rolls(self, value: float = 0.0, slots: Optional[dict[int, float]] = None) -> np.ndarray:
        """Roll block filled with value, with selected slots overridden."""
        rolls = np.full(ObstacleConfig.ROLLS_PER_CELL, value)
        for index, roll in (slots or {}).items():
            rolls[index] = roll
        return rolls

    def test_rarity_gate(self, planner: ObstaclePlacementPlanner) -> None:
        rule = SurfaceRule(rarity=0.3, type_proportions={ObstacleType.ROCK: 1.0})
        passing = self._rolls(slots={RARITY_ROLL: 0.29})
        failing = self._rolls(slots={RARITY_ROLL: 0.3})
        assert planner._decide(zone=ObstacleZone.TRACK, rule=rule, noise01=0.5, rolls=passing) == (ObstacleType.ROCK, None)
        assert planner._decide(zone=ObstacleZone.TRACK, rule=rule, noise01=0.5, rolls=failing) is None

    def test_empty_type_proportions(self, planner: ObstaclePlacementPlanner) -> None:
        rule = SurfaceRule(rarity=1.0)
        assert planner._decide(zone=ObstacleZone.TRACK, rule=rule, noise01=0.5, rolls=self._rolls()) is None

    def test_first_matching_band_wins(self, planner: ObstaclePlacementPlanner) -> None:
        rule = SurfaceRule(
            rarity=1.0,
            noise_bands=(
                NoiseBand(noise_min=0.6, noise_max=1.01, tree_size=TreeSize.LARGE, proportion=0.5),
                NoiseBand(noise_min=0.3, noise_max=0.6, tree_size=TreeSize.SMALL, proportion=0.5),
            ),
            rock_probability=0.5,
        )
        rolls = self._rolls(0.99, slots={RARITY_ROLL: 0.0, BAND_ROLL_START + 1: 0.1})
        assert planner._decide(zone=ObstacleZone.BANK, rule=rule, noise01=0.4, rolls=rolls) == (
            ObstacleType.TREE,
            TreeSize.SMALL,
        )
        # Band roll fails -> rock fallback roll decides
        rolls = self._rolls(0.99, slots={RARITY_ROLL: 0.0, ROCK_ROLL: 0.2})
        assert planner._decide(zone=ObstacleZone.CLIFF, rule=rule, noise01=0.4, rolls=rolls) == (ObstacleType.ROCK, None)
        # Nothing passes
        rolls = self._rolls(0.99, slots={RARITY_ROLL: 0.0})
        assert planner._decide(zone=ObstacleZone.BANK, rule=rule, noise01=0.4, rolls=rolls) is None

    def test_plateau_dead_tree_gate(self, planner: ObstaclePlacementPlanner) -> None:
        rule = SurfaceRule.from_config(
            {
                "rarity": 1.0,
                "dead_tree_band": (0.0, 0.22, 0.25),
                "noise_bands": [(0.0, 1.01, "medium", 1.0)],
            }
        )
        hit = self._rolls(0.0, slots={DEAD_TREE_ROLL: 0.1})
        miss = self._rolls(0.0, slots={DEAD_TREE_ROLL: 0.9})
        assert planner._decide(zone=ObstacleZone.PLATEAU, rule=rule, noise01=0.1, rolls=hit) == (
            ObstacleType.DEAD_TREE,
            None,
        )
        assert planner._decide(zone=ObstacleZone.PLATEAU, rule=rule, noise01=0.1, rolls=miss) == (
            ObstacleType.TREE,
            TreeSize.MEDIUM,
        )
        # Outside the dead tree band the tree bands decide directly
        assert planner._decide(zone=ObstacleZone.PLATEAU, rule=rule, noise01=0.5, rolls=hit) == (
            ObstacleType.TREE,
            TreeSize.MEDIUM,
        )

    def test_unknown_zone_raises(self, planner: ObstaclePlacementPlanner) -> None:
        rule = SurfaceRule(rarity=1.0)
        with pytest.raises(RuntimeError, match="Unknown obstacle zone"):
            planner._decide(zone="lava", rule=rule, noise01=0.5, rolls=self._rolls())  # type: ignore[arg-type]


class TestObstaclePlannerHypothesis:
    """Property-based tests using Hypothesis over seeds and capacities."""

    @given(
        seed=st.integers(min_value=0, max_value=100_000),
        cap=st.integers(min_value=0, max_value=25),
    )
    @settings(max_examples=10, deadline=None)
    def test_capacity_is_a_hard_cap(self, seed: int, cap: int) -> None:
        capped = ObstacleSettings(max_instances={bucket: cap for bucket in ObstacleConfig.MAX_INSTANCES})
        planner = _planner(seed=seed, obstacle_settings=capped, density_multiplier=2.0)
        placements = planner.plan_region(points=_region(seed=seed, segments=10))
        assert all(count <= cap for count in _bucket_counts(placements).values())

    @given(seed=st.integers(min_value=0, max_value=100_000))
    @settings(max_examples=10, deadline=None)
    def test_rarity_zero_always_empty(self, seed: int) -> None:
        planner = _planner(seed=seed, obstacle_settings=ObstacleSettings().with_rarity(0.0), density_multiplier=2.0)
        assert planner.plan_region(points=_region(seed=seed, segments=10)) == []
