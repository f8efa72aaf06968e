"""TerrainSample - Height and surface classification at one world position.

SurfaceKind is the closed set of surface zones. Both the height composition
(TerrainSampler) and the obstacle rules (ObstaclePlacementPlanner via
ObstacleZone.from_surface) switch on it exhaustively and raise on anything
they do not know.
"""

from dataclasses import dataclass
from enum import Enum


class SurfaceKind(Enum):
    """Surface zones across the corridor, from the centerline outwards."""

    TRACK = "track"
    BANK = "bank"
    CANYON_FLOOR = "canyon_floor"
    WALL_VERTICAL = "wall_vertical"
    WALL_LEDGE = "wall_ledge"
    PLATEAU = "plateau"

    @property
    def code(self) -> int:
        """Small integer code for numpy heightfield arrays."""
        return _SURFACE_CODES[self]

    @classmethod
    def from_code(cls, code: int) -> "SurfaceKind":
        for kind, kind_code in _SURFACE_CODES.items():
            if kind_code == code:
                return kind
        raise ValueError(f"Unknown surface code: {code}")


_SURFACE_CODES = {kind: i for i, kind in enumerate(SurfaceKind)}


class ObstacleZone(Enum):
    """Obstacle rule zones (cliff = vertical wall + ledges)."""

    TRACK = "track"
    BANK = "bank"
    CLIFF = "cliff"
    PLATEAU = "plateau"

    @classmethod
    def from_surface(cls, kind: SurfaceKind) -> "ObstacleZone":
        """Map a surface kind onto its obstacle rule zone."""
        if kind == SurfaceKind.TRACK:
            return cls.TRACK
        elif kind in (SurfaceKind.BANK, SurfaceKind.CANYON_FLOOR):
            return cls.BANK
        elif kind in (SurfaceKind.WALL_VERTICAL, SurfaceKind.WALL_LEDGE):
            return cls.CLIFF
        elif kind == SurfaceKind.PLATEAU:
            return cls.PLATEAU
        raise RuntimeError(f"Unknown surface kind: {kind}")


@dataclass(frozen=True)
class TerrainSample:
    """Classification and height at one (world_x, world_z) position.

    Attributes:
        height: Final terrain height (Y)
        kind: Surface zone
        is_wall: True only on the vertical part of the cliff face
        local_t: Signed lateral offset from the centerline
        local_s: Arc-length of the position along the path
        dist_from_track_edge: |t| minus the canyon floor half width
            (negative inside the rideable corridor, positive on the wall)
    """

    height: float
    kind: SurfaceKind
    is_wall: bool
    local_t: float
    local_s: float
    dist_from_track_edge: float

    @property
    def zone(self) -> ObstacleZone:
        return ObstacleZone.from_surface(self.kind)

    @property
    def is_rideable(self) -> bool:
        """Track, bank and canyon floor are rideable surfaces."""
        return self.kind in (SurfaceKind.TRACK, SurfaceKind.BANK, SurfaceKind.CANYON_FLOOR)
