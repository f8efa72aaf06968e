"""TerrainChunk - One generated region of the ride, ready for consumers.

A chunk bundles everything the mesh, physics and instancing collaborators
need: the new path points, a heightfield grid sampled across the corridor,
and the obstacle placements for the region.
"""

from dataclasses import dataclass, field

import numpy as np

from ski_corridor.model.obstacle_placement import ObstaclePlacement
from ski_corridor.model.path_point import PathPoint
from ski_corridor.model.terrain_sample import SurfaceKind


@dataclass
class HeightfieldGrid:
    """Terrain samples on a path-aligned grid.

    Row r follows path point r (the first row is the seam point shared with
    the previous chunk, when there is one). Columns run across the corridor
    along the point's right vector.

    Attributes:
        x: World X per vertex, shape (rows, cols)
        z: World Z per vertex, shape (rows, cols)
        heights: Terrain height per vertex, shape (rows, cols)
        kinds: SurfaceKind codes per vertex, shape (rows, cols)
        lateral_offsets: Lateral offset t of each column, shape (cols,)
    """

    x: np.ndarray
    z: np.ndarray
    heights: np.ndarray
    kinds: np.ndarray
    lateral_offsets: np.ndarray

    @property
    def shape(self) -> tuple[int, int]:
        return self.heights.shape

    def kind_at(self, row: int, col: int) -> SurfaceKind:
        return SurfaceKind.from_code(int(self.kinds[row, col]))

    def vertices(self) -> np.ndarray:
        """Flattened (N, 3) vertex array in row-major order."""
        return np.stack([self.x.ravel(), self.heights.ravel(), self.z.ravel()], axis=1)

    def kind_counts(self) -> dict[SurfaceKind, int]:
        """Number of vertices per surface kind."""
        codes, counts = np.unique(self.kinds, return_counts=True)
        return {SurfaceKind.from_code(int(code)): int(count) for code, count in zip(codes, counts)}


@dataclass
class TerrainChunk:
    """A fully generated region of the ride.

    Attributes:
        chunk_index: Ordinal of the chunk in its ride session
        points: New path points of this chunk (no seam point)
        heightfield: Path-aligned terrain grid (includes the seam row)
        placements: Obstacles planned for the region
    """

    chunk_index: int
    points: list[PathPoint]
    heightfield: HeightfieldGrid
    placements: list[ObstaclePlacement] = field(default_factory=list)

    @property
    def start_z(self) -> float:
        return self.points[0].z

    @property
    def end_z(self) -> float:
        return self.points[-1].z

    @property
    def end_s(self) -> float:
        return self.points[-1].s

    def __repr__(self) -> str:
        return (
            f"TerrainChunk(#{self.chunk_index}, points={len(self.points)}, "
            f"z=[{self.start_z:.1f}, {self.end_z:.1f}], placements={len(self.placements)})"
        )
