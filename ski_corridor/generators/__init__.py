"""Region-level generation on top of the core.

- ObstaclePlacementPlanner: per-cell obstacle decisions over a grid region
- RideSession: one ride's chunk-by-chunk generation context
"""

from ski_corridor.generators.obstacle_planner import ObstaclePlacementPlanner, PlanStats
from ski_corridor.generators.ride_session import RideSession, density_multiplier

__all__ = [
    "ObstaclePlacementPlanner",
    "PlanStats",
    "RideSession",
    "density_multiplier",
]
