"""Seedable 2D coherent noise.

Wraps OpenSimplex so the rest of the package depends on a single
`sample(x, y)` contract: deterministic per seed, continuous, output in
[-1, 1], no state beyond the seed. OpenSimplex works in float64, so the
ride's distance range (tens of kilometers) stays far from precision loss.
"""

import logging

from opensimplex import OpenSimplex

logger = logging.getLogger(__name__)


class NoiseSource:
    """Deterministic 2D simplex noise.

    Example:
        noise = NoiseSource(seed=42)
        value = noise.sample(x=12.5, y=-300.0)  # in [-1, 1]
    """

    def __init__(self, seed: int = 0):
        """Initialize with a seed.

        Args:
            seed: Integer seed - same seed, same field
        """
        self._seed = int(seed)
        self._simplex = OpenSimplex(seed=self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def sample(self, x: float, y: float) -> float:
        """Sample the noise field.

        Args:
            x, y: Noise-space coordinates (any finite value)

        Returns:
            Noise value in [-1, 1].
        """
        value = self._simplex.noise2(x, y)
        return float(max(-1.0, min(1.0, value)))

    def sample01(self, x: float, y: float) -> float:
        """Sample normalized to [0, 1]."""
        return (self.sample(x=x, y=y) + 1.0) / 2.0

    def derive(self, salt: int) -> "NoiseSource":
        """Independent noise field derived from this one's seed."""
        logger.debug(f"Deriving noise field: seed={self._seed}, salt={salt}")
        return NoiseSource(seed=self._seed + salt)

    def __repr__(self) -> str:
        return f"NoiseSource(seed={self._seed})"
