"""PathPoint - The fundamental geometry atom of the ride centerline.

A PathPoint is one sample of the smoothed spine: world position, heading,
track width, banking, cumulative arc-length and an orthonormal XZ frame.
PathPoints are never mutated after creation.

Used by:
- TerrainSampler (projects world points into the local frame)
- ObstaclePlacementPlanner (nearest-point lookup per grid cell)
- RideSession (retained window of the active ride)

SpineTail carries the last few points of a generated segment into the next
generate_segment call, so chunk continuation is an explicit value rather
than hidden generator state.
"""

from dataclasses import dataclass
from math import isnan, sqrt
from typing import Sequence

from ski_corridor.constants import ChunkConfig


@dataclass(frozen=True)
class PathPoint:
    """A point on the ride centerline.

    Attributes:
        index: Global sample index along the ride (0 = ride start)
        x, y, z: World position (ride progresses along -Z)
        heading: Heading angle in radians (0 = straight down -Z)
        width: Lateral track width in meters
        banking: Banking factor (height change per meter of lateral offset)
        s: Cumulative arc-length from the ride start
        forward_x, forward_z: Unit tangent in the XZ plane
        right_x, right_z: Unit vector perpendicular to forward, (forward_z, -forward_x)

    Example:
        point = PathPoint(index=0, x=0.0, y=600.0, z=0.0, heading=0.0, width=30.0,
                          banking=0.0, s=0.0, forward_x=0.0, forward_z=-1.0,
                          right_x=-1.0, right_z=0.0)
    """

    index: int
    x: float
    y: float
    z: float
    heading: float
    width: float
    banking: float
    s: float
    forward_x: float
    forward_z: float
    right_x: float
    right_z: float

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if isnan(self.x) or isnan(self.y) or isnan(self.z) or isnan(self.s):
            raise ValueError(f"PathPoint {self.index} cannot have NaN coordinates")

    @property
    def half_width(self) -> float:
        return self.width / 2

    @property
    def position(self) -> tuple[float, float, float]:
        """Return (x, y, z) tuple."""
        return (self.x, self.y, self.z)

    def distance_to(self, other: "PathPoint") -> float:
        """Euclidean distance to another point in 3D."""
        dx = other.x - self.x
        dy = other.y - self.y
        dz = other.z - self.z
        return sqrt(dx * dx + dy * dy + dz * dz)

    def planar_distance_to(self, other: "PathPoint") -> float:
        """Distance to another point in the XZ plane."""
        dx = other.x - self.x
        dz = other.z - self.z
        return sqrt(dx * dx + dz * dz)

    def __repr__(self) -> str:
        return f"PathPoint(#{self.index}, x={self.x:.2f}, y={self.y:.2f}, z={self.z:.2f}, s={self.s:.2f})"


@dataclass(frozen=True)
class SpineTail:
    """Continuation context passed from one generated segment into the next.

    Attributes:
        points: Last few points of the previous segment (oldest first)
        next_index: Global sample index of the next point to generate
        last_s: Arc-length of the last generated point
    """

    points: tuple[PathPoint, ...]
    next_index: int
    last_s: float

    @classmethod
    def empty(cls) -> "SpineTail":
        """Tail for a ride that has not generated any points yet."""
        return cls(points=(), next_index=0, last_s=0.0)

    @classmethod
    def from_points(cls, points: Sequence[PathPoint], keep: int = ChunkConfig.TAIL_POINTS) -> "SpineTail":
        """Build the tail of a generated sequence.

        Args:
            points: Generated points (must not be empty)
            keep: Number of trailing points carried into the next segment
        """
        if not points:
            raise ValueError("SpineTail.from_points requires at least one point")
        last = points[-1]
        return cls(points=tuple(points[-keep:]), next_index=last.index + 1, last_s=last.s)

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0

    @property
    def last(self) -> PathPoint:
        """Most recent point of the tail."""
        if not self.points:
            raise ValueError("Empty SpineTail has no last point")
        return self.points[-1]
