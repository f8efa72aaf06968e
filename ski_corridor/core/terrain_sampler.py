"""Terrain height and surface classification at world positions.

Three steps per query:
1. Project the world position into the nearest path point's local frame (t, s)
2. Classify by lateral distance: track, bank, terraced cliff face, plateau
3. Compose the height additively (base, banking, moguls, zone extra, jump)

The sampler is pure apart from the jump schedule's lookup cursor, and is
called once per heightfield vertex and once per obstacle grid cell.
"""

import logging
from math import floor
from typing import Optional

from ski_corridor.core.jump_scheduler import JumpScheduler
from ski_corridor.core.noise_source import NoiseSource
from ski_corridor.model.path_point import PathPoint
from ski_corridor.model.settings import TerrainSettings
from ski_corridor.model.terrain_sample import SurfaceKind, TerrainSample

logger = logging.getLogger(__name__)

# Noise-space scaling of the cliff face (along-path, up-the-wall)
WALL_NOISE_S_SCALE = 0.1
WALL_NOISE_HEIGHT_SCALE = 0.15
WALL_DETAIL_FREQUENCY = 2.0


class TerrainSampler:
    """Samples the corridor surface around the path spine.

    Example:
        sampler = TerrainSampler(noise=NoiseSource(seed=7), jumps=JumpScheduler(seed=7))
        sample = sampler.sample_at(world_x=12.0, world_z=-340.0, point=nearest)
        if sample.kind == SurfaceKind.PLATEAU:
            ...
    """

    def __init__(
        self,
        noise: Optional[NoiseSource] = None,
        settings: Optional[TerrainSettings] = None,
        jumps: Optional[JumpScheduler] = None,
    ):
        """Initialize terrain sampler.

        Args:
            noise: Noise field for moguls, wall displacement and plateau relief
            settings: Terrain settings (defaults from TerrainConfig)
            jumps: Jump schedule of the ride (a fresh unseeded schedule if None)
        """
        self._noise = noise or NoiseSource()
        self._settings = settings or TerrainSettings()
        self._jumps = jumps or JumpScheduler()

    @property
    def settings(self) -> TerrainSettings:
        return self._settings

    @property
    def jumps(self) -> JumpScheduler:
        return self._jumps

    @staticmethod
    def project(world_x: float, world_z: float, point: PathPoint) -> tuple[float, float]:
        """World XZ to local (t, s) in the point's frame.

        Returns:
            (t, s): signed lateral offset along the right vector, and the
            point's arc-length plus the offset along the forward vector.
        """
        dx = world_x - point.x
        dz = world_z - point.z
        t = dx * point.right_x + dz * point.right_z
        s = point.s + dx * point.forward_x + dz * point.forward_z
        return t, s

    def classify(self, t: float, point: PathPoint) -> tuple[SurfaceKind, float, float]:
        """Surface kind of a lateral offset.

        Returns:
            (kind, dist_from_track_edge, wall_progress) where wall_progress
            is 0 inside the canyon floor and 1 on the plateau.
        """
        cfg = self._settings
        half_track = point.half_width
        canyon_floor_half = half_track + cfg.canyon_floor_offset
        abs_t = abs(t)
        dist_from_edge = abs_t - canyon_floor_half

        if dist_from_edge <= 0:
            kind = SurfaceKind.TRACK if abs_t <= half_track else SurfaceKind.BANK
            return kind, dist_from_edge, 0.0

        progress = min(1.0, dist_from_edge / cfg.wall_width)
        if progress >= 1.0:
            return SurfaceKind.PLATEAU, dist_from_edge, progress

        progress_in_step = (progress * cfg.terrace_steps) % 1.0
        on_ledge = progress_in_step < cfg.ledge_fraction or progress_in_step > 1.0 - cfg.ledge_fraction
        kind = SurfaceKind.WALL_LEDGE if on_ledge else SurfaceKind.WALL_VERTICAL
        return kind, dist_from_edge, progress

    def _wall_height(self, progress: float, s: float) -> float:
        """Terrace height plus displacement and detail noise on the cliff face."""
        cfg = self._settings
        steps = cfg.terrace_steps
        quantized = floor(progress * steps) / steps
        terrace_height = quantized * cfg.canyon_height

        wall_x = s * WALL_NOISE_S_SCALE
        wall_y = progress * cfg.canyon_height * WALL_NOISE_HEIGHT_SCALE
        displacement = self._noise.sample(x=wall_x, y=wall_y) * cfg.terrace_step_height * cfg.terrace_displacement
        detail = (
            self._noise.sample(x=wall_x * WALL_DETAIL_FREQUENCY, y=wall_y * WALL_DETAIL_FREQUENCY)
            * cfg.wall_detail_height
        )
        return terrace_height + displacement + detail

    def _extra_height(self, kind: SurfaceKind, t: float, s: float, progress: float) -> float:
        cfg = self._settings
        if kind in (SurfaceKind.TRACK, SurfaceKind.BANK, SurfaceKind.CANYON_FLOOR):
            return 0.0
        elif kind in (SurfaceKind.WALL_VERTICAL, SurfaceKind.WALL_LEDGE):
            return self._wall_height(progress=progress, s=s)
        elif kind == SurfaceKind.PLATEAU:
            plateau_noise = self._noise.sample(x=t * cfg.plateau_noise_scale, y=s * cfg.plateau_noise_scale)
            return cfg.canyon_height + plateau_noise * cfg.plateau_noise_height
        raise RuntimeError(f"Unknown surface kind: {kind}")

    def _jump_height(self, kind: SurfaceKind, t: float, s: float, point: PathPoint) -> float:
        """Jump offset felt at (t, s); only the rideable track and bank carry jumps."""
        if kind in (SurfaceKind.TRACK, SurfaceKind.BANK):
            lookup = self._jumps.height_offset_at(s=s)
            if lookup.ramp is None or lookup.offset <= 0:
                return 0.0
            usable_half_width = point.half_width + self._settings.canyon_floor_offset
            factor = self._jumps.lateral_factor(ramp=lookup.ramp, t=t, usable_half_width=usable_half_width)
            return lookup.offset * factor
        elif kind in (
            SurfaceKind.CANYON_FLOOR,
            SurfaceKind.WALL_VERTICAL,
            SurfaceKind.WALL_LEDGE,
            SurfaceKind.PLATEAU,
        ):
            return 0.0
        raise RuntimeError(f"Unknown surface kind: {kind}")

    def sample_local(self, t: float, s: float, point: PathPoint) -> TerrainSample:
        """Sample at local coordinates (t, s) relative to a path point."""
        cfg = self._settings
        kind, dist_from_edge, progress = self.classify(t=t, point=point)

        moguls = self._noise.sample(x=t * cfg.mogul_scale, y=s * cfg.mogul_scale) * cfg.mogul_height
        height = point.y + t * point.banking + moguls
        height += self._extra_height(kind=kind, t=t, s=s, progress=progress)
        height += self._jump_height(kind=kind, t=t, s=s, point=point)

        return TerrainSample(
            height=height,
            kind=kind,
            is_wall=kind == SurfaceKind.WALL_VERTICAL,
            local_t=t,
            local_s=s,
            dist_from_track_edge=dist_from_edge,
        )

    def sample_at(self, world_x: float, world_z: float, point: PathPoint) -> TerrainSample:
        """Sample at a world position, using point as the local frame."""
        t, s = self.project(world_x=world_x, world_z=world_z, point=point)
        return self.sample_local(t=t, s=s, point=point)

    def height_at(self, world_x: float, world_z: float, point: PathPoint) -> float:
        return self.sample_at(world_x=world_x, world_z=world_z, point=point).height
