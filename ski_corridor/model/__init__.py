"""Data model classes for the generated ride.

Value types produced by the generation core and handed to consumers:
- PathPoint: Geometry atom of the ride centerline
- SpineTail: Continuation context between generated segments
- JumpRamp / JumpLookup: Scheduled jumps and height queries
- SurfaceKind / ObstacleZone / TerrainSample: Surface classification
- ObstaclePlacement / Transform: Obstacle decisions
- HeightfieldGrid / TerrainChunk: Per-chunk output bundle
- GenerationSettings and friends: Explicit session configuration
"""

from ski_corridor.model.jump_ramp import JumpLookup, JumpRamp
from ski_corridor.model.obstacle_placement import (
    ObstaclePlacement,
    ObstacleType,
    Transform,
    TreeSize,
)
from ski_corridor.model.path_point import PathPoint, SpineTail
from ski_corridor.model.settings import (
    DeadTreeBand,
    GenerationSettings,
    JumpSettings,
    NoiseBand,
    ObstacleSettings,
    SurfaceRule,
    TerrainSettings,
)
from ski_corridor.model.terrain_chunk import HeightfieldGrid, TerrainChunk
from ski_corridor.model.terrain_sample import ObstacleZone, SurfaceKind, TerrainSample

__all__ = [
    "PathPoint",
    "SpineTail",
    "JumpRamp",
    "JumpLookup",
    "SurfaceKind",
    "ObstacleZone",
    "TerrainSample",
    "ObstacleType",
    "TreeSize",
    "Transform",
    "ObstaclePlacement",
    "HeightfieldGrid",
    "TerrainChunk",
    "TerrainSettings",
    "JumpSettings",
    "NoiseBand",
    "DeadTreeBand",
    "SurfaceRule",
    "ObstacleSettings",
    "GenerationSettings",
]
