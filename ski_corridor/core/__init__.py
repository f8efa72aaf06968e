"""Generation core: noise, path spine, jump schedule and terrain sampling."""

from ski_corridor.core.jump_scheduler import JumpScheduler
from ski_corridor.core.noise_source import NoiseSource
from ski_corridor.core.path_spine import PathSpineGenerator
from ski_corridor.core.terrain_math import TerrainMath
from ski_corridor.core.terrain_sampler import TerrainSampler

__all__ = [
    "NoiseSource",
    "TerrainMath",
    "PathSpineGenerator",
    "JumpScheduler",
    "TerrainSampler",
]
