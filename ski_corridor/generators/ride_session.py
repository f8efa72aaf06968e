"""RideSession - One ride's generation context, chunk by chunk.

Owns the only mutable generation state of a ride (the spine tail, the jump
schedule and its lookup cursor, the retained point window) and wires the
components together:

    NoiseSource ──> PathSpineGenerator ──> path points
         │                                     │
         ├──> TerrainSampler <── JumpScheduler │
         │          │                          v
         └──> ObstaclePlacementPlanner ──> TerrainChunk

A session must be confined to one thread. Everything it hands out
(PathPoint, TerrainSample, ObstaclePlacement, numpy arrays) is a value.

Difficulty and game mode only scale obstacle density:
    multiplier = DifficultyConfig.DENSITY_MULTIPLIERS[difficulty]
               * DifficultyConfig.GAME_MODE_MULTIPLIERS[game_mode]
"""

import logging
from bisect import bisect_left
from math import pi, tan
from typing import Optional

import numpy as np

from ski_corridor.constants import DifficultyConfig, MountainConfig
from ski_corridor.core.jump_scheduler import JumpScheduler
from ski_corridor.core.noise_source import NoiseSource
from ski_corridor.core.path_spine import PathSpineGenerator
from ski_corridor.core.terrain_sampler import TerrainSampler
from ski_corridor.generators.obstacle_planner import ObstaclePlacementPlanner
from ski_corridor.model.path_point import PathPoint, SpineTail
from ski_corridor.model.settings import GenerationSettings
from ski_corridor.model.terrain_chunk import HeightfieldGrid, TerrainChunk
from ski_corridor.model.terrain_sample import TerrainSample

logger = logging.getLogger(__name__)


def density_multiplier(difficulty: str, game_mode: str) -> float:
    """Obstacle density multiplier for a difficulty / game mode pair."""
    if difficulty not in DifficultyConfig.DENSITY_MULTIPLIERS:
        raise ValueError(f"Unknown difficulty: {difficulty} (expected one of {DifficultyConfig.DIFFICULTIES})")
    if game_mode not in DifficultyConfig.GAME_MODE_MULTIPLIERS:
        raise ValueError(f"Unknown game mode: {game_mode} (expected one of {DifficultyConfig.GAME_MODES})")
    return DifficultyConfig.DENSITY_MULTIPLIERS[difficulty] * DifficultyConfig.GAME_MODE_MULTIPLIERS[game_mode]


class RideSession:
    """Generation context of a single ride.

    Example:
        session = RideSession(seed=42, difficulty="EXTREME")
        chunk = session.build_next_chunk()
        session.extend_to(world_z=-1000.0)
        height = session.terrain_height_at(world_x=5.0, world_z=-420.0)
    """

    def __init__(
        self,
        seed: int = 0,
        settings: Optional[GenerationSettings] = None,
        difficulty: str = DifficultyConfig.DEFAULT_DIFFICULTY,
        game_mode: str = DifficultyConfig.DEFAULT_GAME_MODE,
        slope_angle_rad: Optional[float] = None,
        base_altitude: float = MountainConfig.START_ALTITUDE_M,
        finite: bool = False,
    ):
        """Initialize a ride session. No terrain is generated until asked for.

        Args:
            seed: Session seed (noise field, jump schedule, obstacle rolls)
            settings: Generation settings (stock configuration if None)
            difficulty: One of DifficultyConfig.DIFFICULTIES
            game_mode: One of DifficultyConfig.GAME_MODES
            slope_angle_rad: Descent angle; default uses the mountain's average slope
            base_altitude: Altitude at the ride start
            finite: Stop generating once the run's total length is reached
        """
        self._settings = settings or GenerationSettings()
        self._seed = int(seed)
        self._difficulty = difficulty
        self._game_mode = game_mode
        self._density_multiplier = density_multiplier(difficulty=difficulty, game_mode=game_mode)

        if slope_angle_rad is None:
            self._slope_tangent = MountainConfig.DEFAULT_SLOPE_TANGENT
        elif 0 <= slope_angle_rad < pi / 2:
            self._slope_tangent = tan(slope_angle_rad)
        else:
            raise ValueError(f"slope_angle_rad must be in [0, pi/2), got {slope_angle_rad}")
        self._base_altitude = base_altitude
        self._finite = finite

        self._noise = NoiseSource(seed=self._seed)
        self._jumps = JumpScheduler(seed=self._seed, settings=self._settings.jumps)
        self._spine = PathSpineGenerator(noise=self._noise, settings=self._settings.terrain)
        self._sampler = TerrainSampler(noise=self._noise, settings=self._settings.terrain, jumps=self._jumps)
        self._planner = ObstaclePlacementPlanner(
            sampler=self._sampler,
            noise=self._noise,
            seed=self._seed,
            settings=self._settings.obstacles,
            density_multiplier=self._density_multiplier,
        )

        self._tail = SpineTail.empty()
        self._start: Optional[PathPoint] = None
        self._points: list[PathPoint] = []
        self._neg_z: list[float] = []
        self._chunks: list[TerrainChunk] = []
        self._chunks_built = 0

        logger.info(
            f"RideSession created: seed={self._seed}, difficulty={difficulty}, game_mode={game_mode}, "
            f"density x{self._density_multiplier:.2f}, slope_tangent={self._slope_tangent:.3f}"
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def settings(self) -> GenerationSettings:
        return self._settings

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def density_multiplier(self) -> float:
        return self._density_multiplier

    @property
    def slope_tangent(self) -> float:
        return self._slope_tangent

    @property
    def sampler(self) -> TerrainSampler:
        return self._sampler

    @property
    def jumps(self) -> JumpScheduler:
        return self._jumps

    @property
    def planner(self) -> ObstaclePlacementPlanner:
        return self._planner

    @property
    def tail(self) -> SpineTail:
        return self._tail

    @property
    def points(self) -> list[PathPoint]:
        """Retained path points (oldest first)."""
        return list(self._points)

    @property
    def chunks(self) -> list[TerrainChunk]:
        """Retained chunks (oldest first)."""
        return list(self._chunks)

    @property
    def chunks_built(self) -> int:
        return self._chunks_built

    @property
    def distance_generated(self) -> float:
        """Straight-line distance down the mountain covered so far."""
        return -self._points[-1].z if self._points else 0.0

    @property
    def is_finished(self) -> bool:
        """Whether generation has reached the run's total length."""
        return self.distance_generated >= self._settings.terrain.total_length

    # =========================================================================
    # Generation
    # =========================================================================

    def heightfield_half_extent(self) -> float:
        """Lateral half extent of every heightfield row.

        Constant per session so the seam rows of neighboring chunks sample
        identical positions.
        """
        terrain = self._settings.terrain
        max_width = terrain.width_base * (1 + terrain.width_variation) * (1 + terrain.width_bulge)
        return (
            max_width / 2
            + terrain.canyon_floor_offset
            + terrain.wall_width
            + self._settings.obstacles.plateau_margin
        )

    def sample_heightfield(self, points: list[PathPoint]) -> HeightfieldGrid:
        """Sample terrain on a path-aligned grid, one row per point."""
        extent = self.heightfield_half_extent()
        offsets = np.linspace(-extent, extent, self._settings.heightfield_columns)
        shape = (len(points), offsets.size)
        xs = np.empty(shape)
        zs = np.empty(shape)
        heights = np.empty(shape)
        kinds = np.empty(shape, dtype=np.int8)

        for r, point in enumerate(points):
            xs[r] = point.x + offsets * point.right_x
            zs[r] = point.z + offsets * point.right_z
            for c, t in enumerate(offsets):
                sample = self._sampler.sample_local(t=float(t), s=point.s, point=point)
                heights[r, c] = sample.height
                kinds[r, c] = sample.kind.code

        return HeightfieldGrid(x=xs, z=zs, heights=heights, kinds=kinds, lateral_offsets=offsets)

    def build_next_chunk(self) -> TerrainChunk:
        """Generate the next chunk: path points, heightfield and obstacles."""
        if self._finite and self.is_finished:
            raise RuntimeError(f"Ride finished at {self.distance_generated:.1f}m, no more chunks in finite mode")

        tail = self._tail
        new_points = self._spine.generate_segment(
            start_index=tail.next_index,
            segment_count=self._settings.chunk_segments,
            base_altitude=self._base_altitude,
            slope_tangent=self._slope_tangent,
            tail=None if tail.is_empty else tail,
        )
        region = new_points if tail.is_empty else [tail.last] + new_points

        heightfield = self.sample_heightfield(points=region)
        placements = self._planner.plan_region(points=region)

        chunk = TerrainChunk(
            chunk_index=self._chunks_built,
            points=new_points,
            heightfield=heightfield,
            placements=placements,
        )
        self._chunks_built += 1
        self._chunks.append(chunk)
        self._tail = SpineTail.from_points(new_points, keep=self._settings.tail_points)
        if self._start is None:
            self._start = new_points[0]
        for point in new_points:
            self._points.append(point)
            self._neg_z.append(-point.z)

        logger.info(f"Built {chunk}")
        return chunk

    def extend_to(self, world_z: float) -> list[TerrainChunk]:
        """Build chunks until the ride reaches world_z (or the finish in finite mode)."""
        built = []
        while not self._points or self._points[-1].z > world_z:
            if self._finite and self.is_finished:
                logger.info(f"Ride finished at {self.distance_generated:.1f}m, stopping before z={world_z:.1f}")
                break
            built.append(self.build_next_chunk())
        return built

    def discard_before(self, world_z: float) -> int:
        """Drop retained points and chunks entirely behind world_z.

        The last point behind world_z is kept so nearest-point queries at
        world_z still see both neighbors. The spine tail is separate and
        never affected.

        Returns:
            Number of points dropped.
        """
        # Points behind the rider have z > world_z, i.e. -z < -world_z
        cut = bisect_left(self._neg_z, -world_z) - 1
        if cut <= 0:
            return 0
        del self._points[:cut]
        del self._neg_z[:cut]
        first_kept = self._points[0].index
        before = len(self._chunks)
        self._chunks = [chunk for chunk in self._chunks if chunk.points[-1].index >= first_kept]
        logger.debug(f"Discarded {cut} points and {before - len(self._chunks)} chunks behind z={world_z:.1f}")
        return cut

    # =========================================================================
    # Queries
    # =========================================================================

    def nearest_point(self, world_z: float) -> Optional[PathPoint]:
        """Retained path point closest to world_z along the Z axis."""
        if not self._points:
            return None
        i = bisect_left(self._neg_z, -world_z)
        if i == 0:
            return self._points[0]
        if i == len(self._points):
            return self._points[-1]
        before = self._points[i - 1]
        after = self._points[i]
        return before if abs(before.z - world_z) <= abs(after.z - world_z) else after

    def sample_terrain_at(self, world_x: float, world_z: float) -> Optional[TerrainSample]:
        """Terrain sample at a world position, None before any chunk exists."""
        point = self.nearest_point(world_z=world_z)
        if point is None:
            return None
        return self._sampler.sample_at(world_x=world_x, world_z=world_z, point=point)

    def terrain_height_at(self, world_x: float, world_z: float) -> float:
        """Terrain height at a world position (base altitude before any chunk exists)."""
        sample = self.sample_terrain_at(world_x=world_x, world_z=world_z)
        return sample.height if sample is not None else self._base_altitude

    def start_point(self) -> tuple[float, float, float]:
        """World position of the ride start."""
        if self._start is None:
            return (0.0, self._base_altitude, 0.0)
        return self._start.position

    def point_at_offset(self, offset: int = 0) -> tuple[float, float, float]:
        """World position of the retained point offset samples after the oldest one.

        The offset is clamped to the retained window.
        """
        if not self._points:
            return (0.0, self._base_altitude, 0.0)
        index = min(max(0, offset), len(self._points) - 1)
        return self._points[index].position
