"""JumpRamp - A scheduled jump on the arc-length axis.

The schedule is append-only and ordered by start. A ramp's lateral band is
not stored in meters because it depends on the track width where the rider
actually is; instead the ramp carries a center seed and derives its band on
demand.
"""

from dataclasses import dataclass
from typing import Optional

from ski_corridor.constants import JumpConfig


@dataclass(frozen=True)
class JumpRamp:
    """A jump ramp.

    Attributes:
        index: Ordinal in the schedule (0 = first jump of the ride)
        start: Arc-length where the ramp begins
        length: Ramp length along the path
        height: Height at the end of the lip
        center_seed: Uniform value in [0, 1) placing the band across the track
    """

    index: int
    start: float
    length: float
    height: float
    center_seed: float

    @property
    def end(self) -> float:
        return self.start + self.length

    def contains(self, s: float) -> bool:
        """Whether arc-length s lies on the ramp (both ends inclusive)."""
        return self.start <= s <= self.end

    def band(
        self,
        usable_half_width: float,
        band_fraction: float = JumpConfig.WIDTH_FRACTION,
    ) -> tuple[float, float]:
        """Lateral band of this ramp for a given usable half width.

        Args:
            usable_half_width: Half track width plus canyon floor offset
            band_fraction: Band width as a fraction of usable width

        Returns:
            (center_offset, half_band) in meters. The band always stays
            inside [-usable_half_width, usable_half_width].
        """
        fraction = max(JumpConfig.MIN_WIDTH_FRACTION, min(1.0, band_fraction))
        half_band = usable_half_width * fraction
        max_center_offset = max(0.0, usable_half_width - half_band)
        center_offset = (self.center_seed - 0.5) * 2 * max_center_offset
        return center_offset, half_band


@dataclass(frozen=True)
class JumpLookup:
    """Result of a jump height query.

    Attributes:
        offset: Height offset at the queried arc-length (0 off-ramp)
        index: Ordinal of the containing ramp, None if no ramp contains s
        start: Start of the ramp the cursor settled on
        length: Length of the ramp the cursor settled on
        ramp: The containing ramp, None if no ramp contains s
    """

    offset: float
    index: Optional[int]
    start: float
    length: float
    ramp: Optional[JumpRamp] = None

    @property
    def on_ramp(self) -> bool:
        return self.index is not None
