"""ObstaclePlacement - Type, transform and provenance of one obstacle.

Placements are value objects handed to the rendering and physics
collaborators, which own them from then on.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ski_corridor.model.terrain_sample import SurfaceKind


class ObstacleType(Enum):
    """Obstacle categories."""

    TREE = "tree"
    DEAD_TREE = "dead_tree"
    ROCK = "rock"


class TreeSize(Enum):
    """Tree archetypes (layer count differs per archetype)."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


Vector3 = tuple[float, float, float]


@dataclass(frozen=True)
class Transform:
    """World transform of an obstacle instance.

    Attributes:
        position: (x, y, z) world position, y on the terrain surface
        rotation: Euler angles in radians (x, y, z)
        scale: Per-axis scale
    """

    position: Vector3
    rotation: Vector3 = (0.0, 0.0, 0.0)
    scale: Vector3 = (1.0, 1.0, 1.0)


@dataclass(frozen=True)
class ObstaclePlacement:
    """One obstacle decided by the placement planner.

    Attributes:
        obstacle_type: Tree, dead tree or rock
        transform: World transform
        surface: Surface kind of the grid cell the obstacle came from
        tree_size: Archetype for trees, None otherwise
    """

    obstacle_type: ObstacleType
    transform: Transform
    surface: SurfaceKind
    tree_size: Optional[TreeSize] = None

    def __post_init__(self) -> None:
        """Validate - trees need a size, nothing else may have one."""
        if self.obstacle_type == ObstacleType.TREE and self.tree_size is None:
            raise ValueError("TREE placement must have tree_size set")
        if self.obstacle_type != ObstacleType.TREE and self.tree_size is not None:
            raise ValueError(f"{self.obstacle_type.value} placement must NOT have tree_size set")

    @property
    def bucket(self) -> str:
        """Capacity bucket name (matches ObstacleConfig.MAX_INSTANCES keys)."""
        return bucket_name(obstacle_type=self.obstacle_type, tree_size=self.tree_size)


def bucket_name(obstacle_type: ObstacleType, tree_size: Optional[TreeSize] = None) -> str:
    """Capacity bucket for an obstacle type / tree size combination."""
    if obstacle_type == ObstacleType.TREE:
        assert tree_size is not None
        return f"tree_{tree_size.value}"
    elif obstacle_type == ObstacleType.DEAD_TREE:
        return "dead_tree"
    elif obstacle_type == ObstacleType.ROCK:
        return "rock"
    raise RuntimeError(f"Unknown obstacle_type: {obstacle_type}")
