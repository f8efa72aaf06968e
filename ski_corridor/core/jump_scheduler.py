"""Jump ramp schedule along the ride's arc-length axis.

The schedule is append-only and generated lazily: every query first makes
sure jumps exist up to a full maximum spacing beyond it. Each jump is drawn
from a generator seeded with (session seed, jump ordinal), so the schedule
is identical no matter how far ahead, or in which order, it was extended.

Height profile of a ramp, by progress p along it:
- p < ramp_phase: smoothstep rise from 0 to full height (the approach face)
- p >= ramp_phase: cubic ease-out rise to full height (the takeoff lip)
"""

import logging
from typing import Optional


from ski_corridor.core.terrain_math import TerrainMath
from ski_corridor.model.jump_ramp import JumpLookup, JumpRamp
from ski_corridor.model.settings import JumpSettings

logger = logging.getLogger(__name__)


class JumpScheduler:
    """Lazily extended, arc-length indexed jump schedule with a lookup cursor.

    State is three parallel monotonic lists (start, length, height) plus the
    lateral center seeds and a cursor remembering the last lookup. Queries
    that move forward along the ride are amortized O(1).

    Example:
        jumps = JumpScheduler(seed=42)
        lookup = jumps.height_offset_at(s=350.0)
        if lookup.on_ramp:
            print(f"Jump #{lookup.index}: +{lookup.offset:.2f}m")
    """

    def __init__(self, seed: int = 0, settings: Optional[JumpSettings] = None):
        """Initialize an empty schedule.

        Args:
            seed: Session seed mixed into every jump's generator
            settings: Jump settings (defaults from JumpConfig)
        """
        self._seed = int(seed)
        self._settings = settings or JumpSettings()
        self._starts: list[float] = []
        self._lengths: list[float] = []
        self._heights: list[float] = []
        self._center_seeds: list[float] = []
        self._cursor = 0

    @property
    def settings(self) -> JumpSettings:
        return self._settings

    @property
    def last_lookup_index(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._starts)

    @property
    def ramps(self) -> list[JumpRamp]:
        """Snapshot of all scheduled ramps, ordered by start."""
        return [self.ramp_at(index=i) for i in range(len(self._starts))]

    def ramp_at(self, index: int) -> JumpRamp:
        return JumpRamp(
            index=index,
            start=self._starts[index],
            length=self._lengths[index],
            height=self._heights[index],
            center_seed=self._center_seeds[index],
        )

    def _draw_jump(self, ordinal: int) -> tuple[float, float, float, float]:
        """Spacing, length, height and center seed of one jump."""
        cfg = self._settings
        rng = TerrainMath.seeded_rng(self._seed, ordinal)
        u1, u2, u_length, u_height, u_center = rng.random(5)
        spacing = TerrainMath.clamped_normal(
            u1=float(u1),
            u2=float(u2),
            mean=cfg.distance_mean,
            std=cfg.distance_std,
            low=cfg.distance_min,
            high=cfg.distance_max,
        )
        length = TerrainMath.lerp(cfg.length_range[0], cfg.length_range[1], float(u_length))
        height = TerrainMath.lerp(cfg.height_range[0], cfg.height_range[1], float(u_height))
        return spacing, length, height, float(u_center)

    def _append_next(self) -> None:
        ordinal = len(self._starts)
        spacing, length, height, center_seed = self._draw_jump(ordinal=ordinal)
        previous_start = self._starts[-1] if self._starts else 0.0
        self._starts.append(previous_start + spacing)
        self._lengths.append(length)
        self._heights.append(height)
        self._center_seeds.append(center_seed)

    def ensure_coverage(self, s: float) -> None:
        """Schedule jumps until the last one starts beyond s + max spacing."""
        before = len(self._starts)
        if not self._starts:
            self._append_next()
        while self._starts[-1] < s + self._settings.distance_max:
            self._append_next()
        added = len(self._starts) - before
        if added:
            logger.debug(f"Scheduled {added} jumps, last start s={self._starts[-1]:.1f}")

    def ramp_profile(self, progress: float, height: float) -> float:
        """Height offset at a progress in [0, 1] along a ramp of given height."""
        phase = self._settings.ramp_phase
        if progress < phase:
            return TerrainMath.smoothstep(progress / phase) * height
        lip_t = (progress - phase) / (1 - phase)
        return TerrainMath.ease_out_cubic(lip_t) * height

    def height_offset_at(self, s: float) -> JumpLookup:
        """Jump height offset at arc-length s.

        Walks the cursor forward while s is past the current jump's end and
        backward while s precedes its start.

        Returns:
            JumpLookup with offset 0 and index None when no jump contains s.
        """
        self.ensure_coverage(s)

        idx = self._cursor
        last = len(self._starts) - 1
        while idx < last and s >= self._starts[idx] + self._lengths[idx]:
            idx += 1
        while idx > 0 and s < self._starts[idx]:
            idx -= 1
        self._cursor = idx

        start = self._starts[idx]
        length = self._lengths[idx]
        if s < start or s > start + length:
            return JumpLookup(offset=0.0, index=None, start=start, length=length)

        progress = (s - start) / length
        offset = self.ramp_profile(progress=progress, height=self._heights[idx])
        return JumpLookup(offset=offset, index=idx, start=start, length=length, ramp=self.ramp_at(index=idx))

    def lateral_factor(self, ramp: JumpRamp, t: float, usable_half_width: float) -> float:
        """Fraction of the jump felt at lateral offset t.

        1 at the band center, smoothstep falloff to 0 at the band edges,
        0 outside the band.
        """
        center_offset, half_band = ramp.band(
            usable_half_width=usable_half_width,
            band_fraction=self._settings.width_fraction,
        )
        lateral_dist = abs(t - center_offset)
        if half_band <= 0 or lateral_dist >= half_band:
            return 0.0
        return 1.0 - TerrainMath.smoothstep(lateral_dist / half_band)
