"""Shared numeric helpers for terrain generation.

Provides the small curve and sampling functions the generators share:
- Smoothstep and cubic ease-out curves
- Clamped centered moving average (no wrap-around, no padding)
- Box-Muller normal sampling from two uniforms
- Weighted choice from normalized proportions

All functions are pure.
"""

from math import ceil, cos, log, pi, sqrt
from typing import Hashable, Mapping, Optional, Sequence, TypeVar

import numpy as np

K = TypeVar("K", bound=Hashable)

# Lower clamp for the first Box-Muller uniform (log(0) guard)
_MIN_UNIFORM = 1e-6

# SeedSequence entropy must be non-negative
_SEED_MODULUS = 2**64


class TerrainMath:
    """Static helpers for curves, smoothing and random sampling."""

    @staticmethod
    def smoothstep(p: float) -> float:
        """Cubic ease 3p² - 2p³ with p clamped to [0, 1]."""
        p = max(0.0, min(1.0, p))
        return p * p * (3.0 - 2.0 * p)

    @staticmethod
    def ease_out_cubic(p: float) -> float:
        """Cubic ease-out 1 - (1 - p)³ with p clamped to [0, 1]."""
        p = max(0.0, min(1.0, p))
        return 1.0 - (1.0 - p) ** 3

    @staticmethod
    def moving_average(values: Sequence[float], window: int) -> np.ndarray:
        """Centered moving average with the window clamped at the ends.

        Sample i averages values[i - window//2 : i + ceil(window/2)],
        clipped to the available range. Edge samples therefore average
        fewer neighbors instead of wrapping or padding.

        Args:
            values: Input samples
            window: Window size (>= 1)

        Returns:
            Smoothed samples as float64 array of the same length.
        """
        data = np.asarray(values, dtype=np.float64)
        n = data.size
        if n == 0 or window <= 1:
            return data.copy()

        cumulative = np.concatenate(([0.0], np.cumsum(data)))
        idx = np.arange(n)
        lo = np.maximum(0, idx - window // 2)
        hi = np.minimum(n, idx + ceil(window / 2))
        return (cumulative[hi] - cumulative[lo]) / (hi - lo)

    @staticmethod
    def box_muller(u1: float, u2: float) -> float:
        """Standard normal sample from two uniforms in [0, 1)."""
        u1 = max(_MIN_UNIFORM, u1)
        return sqrt(-2.0 * log(u1)) * cos(2.0 * pi * u2)

    @staticmethod
    def clamped_normal(
        u1: float,
        u2: float,
        mean: float,
        std: float,
        low: float,
        high: float,
    ) -> float:
        """Normal sample (mean, std) clamped to [low, high]."""
        value = mean + TerrainMath.box_muller(u1=u1, u2=u2) * std
        return max(low, min(high, value))

    @staticmethod
    def lerp(a: float, b: float, t: float) -> float:
        return a + (b - a) * t

    @staticmethod
    def weighted_choice(weights: Mapping[K, float], u: float) -> Optional[K]:
        """Pick a key by normalized weights.

        Args:
            weights: Non-negative weight per key (normalized here)
            u: Uniform value in [0, 1)

        Returns:
            The chosen key, or None if all weights are zero.
        """
        total = sum(weights.values())
        if total <= 0:
            return None
        threshold = u * total
        cumulative = 0.0
        chosen: Optional[K] = None
        for key, weight in weights.items():
            if weight <= 0:
                continue
            cumulative += weight
            chosen = key
            if threshold < cumulative:
                return key
        # Float round-off at u close to 1 lands on the last positive weight
        return chosen

    @staticmethod
    def seeded_rng(seed: int, *keys: int) -> np.random.Generator:
        """Generator keyed on (seed, *keys).

        The same seed and keys always give the same stream, independent of
        any other draws in the process. Negative values are folded into the
        unsigned range numpy's SeedSequence requires.
        """
        entropy = [int(value) % _SEED_MODULUS for value in (seed, *keys)]
        return np.random.default_rng(entropy)
