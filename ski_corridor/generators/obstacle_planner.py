"""ObstaclePlacementPlanner - Trees, dead trees and rocks for a region of the ride.

Scans a world-aligned grid over the region and decides per cell:

**Grid:**
    Rows at world Z multiples of the grid spacing with z_last < z <= z_first,
    so consecutive regions sharing a seam point never place twice. Columns
    cover the path's X range plus the full corridor half extent (track,
    canyon floor, wall, plateau margin).

**Per cell:**
    1. Jitter the cell position, find the nearest path point (cKDTree)
    2. Sample the terrain there and map its surface kind to an ObstacleZone
    3. Read the normalized density noise at the position
    4. Apply the zone rule:
       - every zone: rarity gate (scaled by the density multiplier)
       - TRACK: type by type proportions, tree size by size proportions
       - BANK / CLIFF: first matching noise band that passes its roll,
         else the rock fallback roll
       - PLATEAU: dead tree band first, then the BANK / CLIFF logic
    5. Drop the placement if its bucket is at capacity

All rolls of a cell come from a fixed block of uniforms drawn from a
generator seeded with (session seed, first grid row). Every cell consumes
its block whatever it decides, so a region always yields the same layout
and a higher density multiplier only ever adds placements.
"""

import logging
from dataclasses import dataclass
from math import ceil, floor, pi
from typing import Optional, Sequence

import numpy as np
from scipy.spatial import cKDTree

from ski_corridor.constants import ObstacleConfig
from ski_corridor.core.noise_source import NoiseSource
from ski_corridor.core.terrain_math import TerrainMath
from ski_corridor.core.terrain_sampler import TerrainSampler
from ski_corridor.model.obstacle_placement import (
    ObstaclePlacement,
    ObstacleType,
    Transform,
    TreeSize,
    bucket_name,
)
from ski_corridor.model.path_point import PathPoint
from ski_corridor.model.settings import ObstacleSettings, SurfaceRule
from ski_corridor.model.terrain_sample import ObstacleZone

logger = logging.getLogger(__name__)

# Slots in each cell's block of uniforms
RARITY_ROLL = 0
TYPE_ROLL = 1
SIZE_ROLL = 2
DEAD_TREE_ROLL = 3
ROCK_ROLL = 4
JITTER_ROLLS = (5, 6)
SCALE_ROLLS = (7, 8)
YAW_ROLL = 9
LEAN_ROLLS = (10, 11)
ROCK_ROTATION_ROLLS = (12, 13, 14)
ROCK_SCALE_ROLLS = (15, 16, 17)
BAND_ROLL_START = 18
MAX_NOISE_BANDS = ObstacleConfig.ROLLS_PER_CELL - BAND_ROLL_START

Decision = tuple[ObstacleType, Optional[TreeSize]]


@dataclass
class PlanStats:
    """Counters of the most recent plan_region call."""

    cells_scanned: int = 0
    cells_outside: int = 0
    placements: int = 0
    capacity_skips: int = 0


class ObstaclePlacementPlanner:
    """Plans obstacle placements over regions of the ride.

    Example:
        planner = ObstaclePlacementPlanner(sampler=sampler, noise=noise, seed=7)
        placements = planner.plan_region(points=chunk_points)
        for placement in placements:
            print(placement.bucket, placement.transform.position)
    """

    def __init__(
        self,
        sampler: TerrainSampler,
        noise: Optional[NoiseSource] = None,
        seed: int = 0,
        settings: Optional[ObstacleSettings] = None,
        density_multiplier: float = 1.0,
    ):
        """Initialize obstacle planner.

        Args:
            sampler: Terrain sampler of the ride
            noise: Session noise field (the density field is derived from it)
            seed: Session seed for the per-region generators
            settings: Obstacle settings (defaults from ObstacleConfig)
            density_multiplier: Scales every zone's rarity (difficulty, game mode)
        """
        if density_multiplier < 0:
            raise ValueError(f"density_multiplier must not be negative, got {density_multiplier}")
        self._sampler = sampler
        self._seed = int(seed)
        self._density_noise = (noise or NoiseSource(seed=self._seed)).derive(salt=ObstacleConfig.DENSITY_NOISE_SALT)
        self._settings = settings or ObstacleSettings()
        self._density_multiplier = density_multiplier
        self._validate_rules(settings=self._settings)
        self.last_stats = PlanStats()

    @property
    def settings(self) -> ObstacleSettings:
        return self._settings

    @property
    def density_multiplier(self) -> float:
        return self._density_multiplier

    @staticmethod
    def _validate_rules(settings: ObstacleSettings) -> None:
        for zone, rule in settings.surface_rules.items():
            if len(rule.noise_bands) > MAX_NOISE_BANDS:
                raise ValueError(
                    f"{zone.value}: at most {MAX_NOISE_BANDS} noise bands supported, got {len(rule.noise_bands)}"
                )

    def corridor_half_extent(self, points: Sequence[PathPoint]) -> float:
        """Lateral reach of the grid from the centerline."""
        terrain = self._sampler.settings
        max_half_width = max(p.half_width for p in points)
        return max_half_width + terrain.canyon_floor_offset + terrain.wall_width + self._settings.plateau_margin

    def density_at(self, world_x: float, world_z: float, scale: float) -> float:
        """Normalized density noise in [0, 1]."""
        return self._density_noise.sample01(x=world_x * scale, y=world_z * scale)

    def plan_region(
        self,
        points: Sequence[PathPoint],
        grid_spacing: Optional[float] = None,
        surface_config: Optional[ObstacleSettings] = None,
    ) -> list[ObstaclePlacement]:
        """Plan obstacles for the region spanned by points.

        Args:
            points: Path points of the region, ordered along the ride
            grid_spacing: Scan grid spacing (defaults to the settings' spacing)
            surface_config: Per-call settings override

        Returns:
            Placements in grid scan order (rows down the ride, columns left to right).
        """
        settings = surface_config or self._settings
        if surface_config is not None:
            self._validate_rules(settings=surface_config)
        spacing = grid_spacing if grid_spacing is not None else settings.grid_spacing
        if spacing <= 0:
            raise ValueError(f"grid_spacing must be positive, got {spacing}")

        self.last_stats = PlanStats()
        if not points:
            logger.debug("plan_region: no path points, nothing to plan")
            return []

        xs = np.array([p.x for p in points])
        zs = np.array([p.z for p in points])
        half_extent = self.corridor_half_extent(points=points)

        row_top = floor(float(zs.max()) / spacing)
        row_bottom = floor(float(zs.min()) / spacing) + 1
        col_left = ceil((float(xs.min()) - half_extent) / spacing)
        col_right = floor((float(xs.max()) + half_extent) / spacing)
        n_rows = row_top - row_bottom + 1
        n_cols = col_right - col_left + 1
        if n_rows <= 0 or n_cols <= 0:
            logger.debug(f"plan_region: empty grid (rows={n_rows}, cols={n_cols})")
            return []

        rng = TerrainMath.seeded_rng(self._seed, row_top)
        rolls = rng.random((n_rows, n_cols, ObstacleConfig.ROLLS_PER_CELL))

        rows_z = np.arange(row_top, row_bottom - 1, -1) * spacing
        cols_x = np.arange(col_left, col_right + 1) * spacing
        cell_z, cell_x = np.meshgrid(rows_z, cols_x, indexing="ij")
        jitter = settings.position_jitter * spacing
        world_x = cell_x + (rolls[:, :, JITTER_ROLLS[0]] - 0.5) * 2 * jitter
        world_z = cell_z + (rolls[:, :, JITTER_ROLLS[1]] - 0.5) * 2 * jitter

        tree = cKDTree(np.column_stack([xs, zs]))
        _, nearest = tree.query(np.column_stack([world_x.ravel(), world_z.ravel()]))
        nearest = nearest.reshape(n_rows, n_cols)

        terrain = self._sampler.settings
        placements: list[ObstaclePlacement] = []
        counts: dict[str, int] = {}
        stats = self.last_stats

        for r in range(n_rows):
            for c in range(n_cols):
                stats.cells_scanned += 1
                point = points[int(nearest[r, c])]
                px = float(world_x[r, c])
                pz = float(world_z[r, c])
                sample = self._sampler.sample_at(world_x=px, world_z=pz, point=point)

                reach = point.half_width + terrain.canyon_floor_offset + terrain.wall_width + settings.plateau_margin
                if abs(sample.local_t) > reach:
                    stats.cells_outside += 1
                    continue

                cell_rolls = rolls[r, c]
                zone = sample.zone
                noise01 = self.density_at(world_x=px, world_z=pz, scale=settings.density_noise_scale)
                decision = self._decide(zone=zone, rule=settings.surface_rules[zone], noise01=noise01, rolls=cell_rolls)
                if decision is None:
                    continue

                obstacle_type, tree_size = decision
                bucket = bucket_name(obstacle_type=obstacle_type, tree_size=tree_size)
                if counts.get(bucket, 0) >= settings.max_instances.get(bucket, 0):
                    stats.capacity_skips += 1
                    continue
                counts[bucket] = counts.get(bucket, 0) + 1

                transform = self._make_transform(
                    obstacle_type=obstacle_type,
                    tree_size=tree_size,
                    position=(px, sample.height, pz),
                    rolls=cell_rolls,
                )
                placements.append(
                    ObstaclePlacement(
                        obstacle_type=obstacle_type,
                        transform=transform,
                        surface=sample.kind,
                        tree_size=tree_size,
                    )
                )

        stats.placements = len(placements)
        logger.debug(
            f"plan_region: {stats.cells_scanned} cells ({n_rows}x{n_cols}), "
            f"{stats.placements} placements, {stats.capacity_skips} capacity skips, buckets={counts}"
        )
        return placements

    def _decide(
        self,
        zone: ObstacleZone,
        rule: SurfaceRule,
        noise01: float,
        rolls: np.ndarray,
    ) -> Optional[Decision]:
        """Obstacle for one cell, or None."""
        if rolls[RARITY_ROLL] >= min(1.0, rule.rarity * self._density_multiplier):
            return None

        if zone == ObstacleZone.TRACK:
            obstacle_type = TerrainMath.weighted_choice(weights=rule.type_proportions, u=float(rolls[TYPE_ROLL]))
            if obstacle_type is None:
                return None
            if obstacle_type != ObstacleType.TREE:
                return obstacle_type, None
            tree_size = TerrainMath.weighted_choice(weights=rule.size_proportions, u=float(rolls[SIZE_ROLL]))
            if tree_size is None:
                return None
            return ObstacleType.TREE, tree_size
        elif zone in (ObstacleZone.BANK, ObstacleZone.CLIFF):
            return self._band_or_rock(rule=rule, noise01=noise01, rolls=rolls)
        elif zone == ObstacleZone.PLATEAU:
            band = rule.dead_tree_band
            if band is not None and band.matches(noise01) and rolls[DEAD_TREE_ROLL] < band.probability:
                return ObstacleType.DEAD_TREE, None
            return self._band_or_rock(rule=rule, noise01=noise01, rolls=rolls)
        raise RuntimeError(f"Unknown obstacle zone: {zone}")

    @staticmethod
    def _band_or_rock(rule: SurfaceRule, noise01: float, rolls: np.ndarray) -> Optional[Decision]:
        """Tree size from the first band that matches and passes its roll, else the rock fallback."""
        for i, band in enumerate(rule.noise_bands):
            if band.proportion <= 0 or not band.matches(noise01):
                continue
            if rolls[BAND_ROLL_START + i] < band.proportion:
                return ObstacleType.TREE, band.tree_size
        if rolls[ROCK_ROLL] < rule.rock_probability:
            return ObstacleType.ROCK, None
        return None

    @staticmethod
    def _make_transform(
        obstacle_type: ObstacleType,
        tree_size: Optional[TreeSize],
        position: tuple[float, float, float],
        rolls: np.ndarray,
    ) -> Transform:
        """Cosmetic rotation and scale for a placement."""
        yaw = float(rolls[YAW_ROLL]) * 2 * pi
        lean_x = (float(rolls[LEAN_ROLLS[0]]) - 0.5) * 2 * ObstacleConfig.TREE_LEAN_MAX_RAD
        lean_z = (float(rolls[LEAN_ROLLS[1]]) - 0.5) * 2 * ObstacleConfig.TREE_LEAN_MAX_RAD

        if obstacle_type == ObstacleType.TREE:
            assert tree_size is not None
            mean, std, low, high = ObstacleConfig.TREE_SCALE[tree_size.value]
            scale = TerrainMath.clamped_normal(
                u1=float(rolls[SCALE_ROLLS[0]]),
                u2=float(rolls[SCALE_ROLLS[1]]),
                mean=mean,
                std=std,
                low=low,
                high=high,
            )
            return Transform(position=position, rotation=(lean_x, yaw, lean_z), scale=(scale, scale, scale))
        elif obstacle_type == ObstacleType.DEAD_TREE:
            low, high = ObstacleConfig.DEAD_TREE_SCALE_RANGE
            scale = TerrainMath.lerp(low, high, float(rolls[SCALE_ROLLS[0]]))
            return Transform(position=position, rotation=(lean_x, yaw, lean_z), scale=(scale, scale, scale))
        elif obstacle_type == ObstacleType.ROCK:
            low, high = ObstacleConfig.ROCK_SCALE_RANGE
            rotation = tuple(float(rolls[i]) * 2 * pi for i in ROCK_ROTATION_ROLLS)
            scale = tuple(TerrainMath.lerp(low, high, float(rolls[i])) for i in ROCK_SCALE_ROLLS)
            return Transform(position=position, rotation=rotation, scale=scale)
        raise RuntimeError(f"Unknown obstacle_type: {obstacle_type}")
