"""Path spine generation for the ride centerline.

Extends the centerline segment by segment:
1. Raw lateral offsets from a noise term plus two sinusoidal meanders
2. Centered moving-average smoothing of X across the previous tail
3. Local frame, heading, arc-length, width and banking per new point

Chunk continuation is explicit: the caller passes the previous segment's
SpineTail and receives points that continue it seamlessly.
"""

import logging
from math import atan2, cos, hypot, pi, sin
from typing import Optional

from ski_corridor.core.noise_source import NoiseSource
from ski_corridor.core.terrain_math import TerrainMath
from ski_corridor.model.path_point import PathPoint, SpineTail
from ski_corridor.model.settings import TerrainSettings

logger = logging.getLogger(__name__)

# Meander amplitudes relative to the overall lateral amplitude
MEANDER1_WEIGHT = 0.3
MEANDER2_WEIGHT = 0.2
MEANDER2_PHASE = 1.0

# Noise-space row used for width variation (keeps it independent of the X offsets)
WIDTH_NOISE_ROW = 100.0
MIN_WIDTH_FACTOR = 0.5


class PathSpineGenerator:
    """Generates oriented path points along the ride.

    The generator holds no ride state: every call is a pure function of the
    noise field, the settings, the indices and the tail it is given.

    Example:
        spine = PathSpineGenerator(noise=NoiseSource(seed=7))
        first = spine.generate_segment(start_index=0, segment_count=20,
                                       base_altitude=600.0, slope_tangent=0.2)
        tail = SpineTail.from_points(first)
        second = spine.generate_segment(start_index=tail.next_index, segment_count=20,
                                        base_altitude=600.0, slope_tangent=0.2, tail=tail)
    """

    def __init__(
        self,
        noise: Optional[NoiseSource] = None,
        settings: Optional[TerrainSettings] = None,
    ):
        """Initialize path spine generator.

        Args:
            noise: Noise field for lateral offsets and width variation
            settings: Terrain settings (defaults from TerrainConfig)
        """
        self._noise = noise or NoiseSource()
        self._settings = settings or TerrainSettings()

    @property
    def settings(self) -> TerrainSettings:
        return self._settings

    def raw_lateral_offset(self, global_index: int) -> float:
        """Unsmoothed X offset of a sample (noise + two meanders)."""
        cfg = self._settings
        virtual_run_samples = cfg.total_length / cfg.segment_length
        progress = global_index / virtual_run_samples if virtual_run_samples > 0 else 0.0

        lateral_noise = self._noise.sample(x=global_index * cfg.noise_scale, y=0.0) * cfg.amplitude
        meander1 = sin(progress * 2 * pi * cfg.meander1_freq) * cfg.amplitude * MEANDER1_WEIGHT
        meander2 = sin(progress * 2 * pi * cfg.meander2_freq + MEANDER2_PHASE) * cfg.amplitude * MEANDER2_WEIGHT
        return lateral_noise + meander1 + meander2

    def generate_segment(
        self,
        start_index: int,
        segment_count: int,
        base_altitude: float,
        slope_tangent: float,
        tail: Optional[SpineTail] = None,
    ) -> list[PathPoint]:
        """Generate segment_count + 1 points starting at start_index.

        Args:
            start_index: Global sample index of the first new point
            segment_count: Number of segments (points - 1)
            base_altitude: Altitude at distance 0
            slope_tangent: Altitude drop per meter of travel
            tail: Previous segment's tail for smoothing and arc-length continuity

        Returns:
            New PathPoints (tail points are not repeated).
        """
        cfg = self._settings
        segment_length = cfg.segment_length
        num_points = segment_count + 1
        start_distance = start_index * segment_length
        tail_points = tail.points if tail is not None else ()
        n_tail = len(tail_points)

        raw_x: list[float] = []
        raw_y: list[float] = []
        raw_z: list[float] = []
        for i in range(num_points):
            distance_along = start_distance + i * segment_length
            raw_x.append(self.raw_lateral_offset(global_index=start_index + i))
            raw_y.append(base_altitude - distance_along * slope_tangent)
            raw_z.append(0.0 - distance_along)

        combined_x = [p.x for p in tail_points] + raw_x
        combined_z = [p.z for p in tail_points] + raw_z
        smoothed_x = TerrainMath.moving_average(values=combined_x, window=cfg.smoothing_window)
        # Tail points are final; only their neighborhood influences the new points
        for j, point in enumerate(tail_points):
            smoothed_x[j] = point.x

        cumulative_s = tail.last_s if tail is not None and n_tail > 0 else start_distance
        new_points: list[PathPoint] = []

        for i in range(num_points):
            ci = n_tail + i
            x = float(smoothed_x[ci])
            z = combined_z[ci]

            if ci > 0:
                direction_x = x - float(smoothed_x[ci - 1])
                direction_z = z - combined_z[ci - 1]
            elif ci + 1 < len(combined_x):
                direction_x = float(smoothed_x[ci + 1]) - x
                direction_z = combined_z[ci + 1] - z
            else:
                direction_x, direction_z = 0.0, -segment_length

            step_length = hypot(direction_x, direction_z)
            if step_length == 0:
                logger.debug(f"Zero-length step at index {start_index + i}, using default direction")
                step_length = segment_length
                direction_x, direction_z = 0.0, -segment_length

            if ci > 0:
                cumulative_s += step_length

            heading = atan2(direction_x, -direction_z)
            forward_x, forward_z = sin(heading), -cos(heading)
            right_x, right_z = forward_z, 0.0 - forward_x

            width_noise = self._noise.sample(x=z * cfg.width_noise_scale, y=WIDTH_NOISE_ROW)
            segment_progress = i / segment_count if segment_count > 0 else 0.0
            width_factor = max(MIN_WIDTH_FACTOR, 1 + sin(segment_progress * pi) * cfg.width_bulge)
            width = cfg.width_base * (1 + width_noise * cfg.width_variation) * width_factor

            new_points.append(
                PathPoint(
                    index=start_index + i,
                    x=x,
                    y=raw_y[i],
                    z=z,
                    heading=heading,
                    width=width,
                    banking=heading * cfg.banking_strength,
                    s=cumulative_s,
                    forward_x=forward_x,
                    forward_z=forward_z,
                    right_x=right_x,
                    right_z=right_z,
                )
            )

        logger.debug(
            f"generate_segment: indices {start_index}..{start_index + segment_count}, "
            f"tail={n_tail}, s=[{new_points[0].s:.1f}, {new_points[-1].s:.1f}]"
        )
        return new_points

    def continue_from(
        self,
        tail: SpineTail,
        segment_count: int,
        base_altitude: float,
        slope_tangent: float,
    ) -> list[PathPoint]:
        """Generate the segment that directly follows a tail."""
        return self.generate_segment(
            start_index=tail.next_index,
            segment_count=segment_count,
            base_altitude=base_altitude,
            slope_tangent=slope_tangent,
            tail=tail,
        )
