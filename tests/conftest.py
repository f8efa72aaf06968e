"""Shared pytest fixtures for ski_corridor tests.

Provides stub noise fields and reusable settings and path points.
All fixtures use explicit values with documented rationale.

COORDINATE SYSTEM:
    The ride starts at the origin and progresses along -Z. A heading of 0
    means straight down -Z. The right vector is (forward_z, -forward_x), so
    for such a point it is -X and a lateral offset t sits at world X = -t.
    Tests that exercise only the cross-section call sample_local with t
    directly.
"""

from math import cos, sin

import pytest

from ski_corridor.core.jump_scheduler import JumpScheduler
from ski_corridor.core.noise_source import NoiseSource
from ski_corridor.core.terrain_sampler import TerrainSampler
from ski_corridor.model.path_point import PathPoint
from ski_corridor.model.settings import JumpSettings, TerrainSettings


# =============================================================================
# STUB NOISE FIELDS
# =============================================================================


class ConstantNoise(NoiseSource):
    """Noise field returning the same value everywhere.

    With value 0 moguls, wall displacement and plateau relief all vanish,
    so heights reduce to base + banking + terrace/canyon height.
    """

    def __init__(self, value: float = 0.0) -> None:
        super().__init__(seed=0)
        self.value = value

    def sample(self, x: float, y: float) -> float:
        return self.value

    def derive(self, salt: int) -> "ConstantNoise":
        return ConstantNoise(value=self.value)


# =============================================================================
# PATH POINTS
# =============================================================================


def make_point(
    x: float = 0.0,
    y: float = 100.0,
    z: float = 0.0,
    width: float = 40.0,
    banking: float = 0.0,
    s: float = 0.0,
    heading: float = 0.0,
    index: int = 0,
) -> PathPoint:
    """Path point with a consistent frame derived from heading."""
    return PathPoint(
        index=index,
        x=x,
        y=y,
        z=z,
        heading=heading,
        width=width,
        banking=banking,
        s=s,
        forward_x=sin(heading),
        forward_z=-cos(heading),
        right_x=-cos(heading),
        right_z=-sin(heading),
    )


@pytest.fixture
def flat_point() -> PathPoint:
    """Straight-down point: width 40, no banking, at altitude 100."""
    return make_point()


@pytest.fixture
def point_factory():
    """Factory for custom path points (same signature as make_point)."""
    return make_point


# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture
def no_jump_settings() -> JumpSettings:
    """Jump schedule whose ramps are all zero height."""
    return JumpSettings(height_range=(0.0, 0.0))


@pytest.fixture
def wall_test_settings() -> TerrainSettings:
    """Canyon with floor offset 5 and wall width 20.

    With width 30 (half track 15) the canyon floor ends at |t| = 20 and the
    wall reaches the plateau at |t| = 40.
    """
    return TerrainSettings(canyon_floor_offset=5.0, wall_width=20.0)


# =============================================================================
# SAMPLERS
# =============================================================================


@pytest.fixture
def zero_noise() -> ConstantNoise:
    return ConstantNoise(value=0.0)


@pytest.fixture
def flat_sampler(zero_noise: ConstantNoise, no_jump_settings: JumpSettings) -> TerrainSampler:
    """Sampler with zero noise and no jumps (pure geometry)."""
    return TerrainSampler(
        noise=zero_noise,
        settings=TerrainSettings(),
        jumps=JumpScheduler(seed=0, settings=no_jump_settings),
    )


@pytest.fixture
def wall_sampler(
    zero_noise: ConstantNoise,
    wall_test_settings: TerrainSettings,
    no_jump_settings: JumpSettings,
) -> TerrainSampler:
    """Zero-noise sampler over the wall_test_settings canyon."""
    return TerrainSampler(
        noise=zero_noise,
        settings=wall_test_settings,
        jumps=JumpScheduler(seed=0, settings=no_jump_settings),
    )
